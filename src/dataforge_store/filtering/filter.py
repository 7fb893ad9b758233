"""
Filter - Ordered list of FilterRules with boolean composition.

Evaluation scans the rules left to right. A rule concatenated with OR joins
the group of the rule before it; any other concatenation opens a new group.
The filter matches when every group matches, and a group matches when at
least one of its rules does. The concatenation of the first rule is ignored.

Example:
    A AND B OR C AND D   ->   A and (B or C) and D
"""

import logging
from typing import Callable, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .operators import Operator, RuleFormat
from .rule import FilterRule

logger = logging.getLogger(__name__)


class Filter:
    """
    Composable predicate over rows or tree nodes.

    Args:
        rules: Initial rules
        allowed_headers: Optional allow-list of header names (case-insensitive);
            rules on other headers are dropped and logged
    """

    def __init__(self, rules: Optional[Iterable[FilterRule]] = None,
                 allowed_headers: Optional[Iterable[str]] = None):
        self._rules: List[FilterRule] = []
        self._allowed: Optional[List[str]] = None
        if allowed_headers is not None:
            self._allowed = [h for h in allowed_headers]
        for rule in rules or []:
            self.add_rule(rule)

    # ==================== Building ====================

    def add_rule(self, rule: FilterRule) -> bool:
        """
        Append a rule.

        Returns:
            False if the rule was dropped by the allow-list
        """
        if not self.is_allowed(rule.header):
            logger.error(f"Filter rule on header '{rule.header}' dropped: header not allowed "
                         f"(allowed: {self._allowed})")
            return False
        self._rules.append(rule)
        return True

    def add_filter_rule(self, header: str, values: Union[str, Iterable[str]],
                        operator: Union[Operator, str] = Operator.EQUALS,
                        concatenation: Union[Operator, str] = Operator.AND,
                        rule_format: RuleFormat = RuleFormat.STRING) -> 'Filter':
        """Build and append a rule; returns self for chaining."""
        self.add_rule(FilterRule(header, values, operator, concatenation, rule_format))
        return self

    def delete_rule(self, rule_or_header: Union[FilterRule, str]) -> int:
        """
        Remove rules equal to a rule, or all rules on a header.

        Returns:
            Number of removed rules
        """
        before = len(self._rules)
        if isinstance(rule_or_header, FilterRule):
            self._rules = [r for r in self._rules if r != rule_or_header]
        else:
            self._rules = [r for r in self._rules if r.header != rule_or_header]
        return before - len(self._rules)

    def clear(self):
        self._rules = []

    # ==================== Allow-list ====================

    def is_allowed(self, header: str) -> bool:
        if self._allowed is None:
            return True
        lowered = (header or "").lower()
        return any(h.lower() == lowered for h in self._allowed)

    def set_allowed_headers(self, headers: Iterable[str]):
        """Replace the allow-list and drop rules it no longer permits."""
        self._allowed = list(headers)
        kept = []
        for rule in self._rules:
            if self.is_allowed(rule.header):
                kept.append(rule)
            else:
                logger.error(f"Filter rule on header '{rule.header}' dropped: header not allowed")
        self._rules = kept

    def add_allowed_headers(self, headers: Iterable[str]):
        if self._allowed is None:
            self._allowed = []
        self._allowed.extend(headers)

    def clear_allowed_headers(self):
        self._allowed = None

    @property
    def allowed_headers(self) -> Optional[List[str]]:
        return None if self._allowed is None else list(self._allowed)

    # ==================== Queries ====================

    @property
    def rules(self) -> List[FilterRule]:
        return list(self._rules)

    def get_rule_headers(self) -> List[str]:
        """Distinct headers referenced by the rules, first-seen order."""
        seen = []
        for rule in self._rules:
            if rule.header not in seen:
                seen.append(rule.header)
        return seen

    def get_rule_values(self, header: str) -> List[str]:
        """Values of the EQUALS / EQUALS_IGNORE_CASE rules on a header."""
        values = []
        for rule in self._rules:
            if rule.header == header and rule.operator in (Operator.EQUALS, Operator.EQUALS_IGNORE_CASE):
                values.extend(rule.values)
        return values

    def partition(self, predicate: Callable[[FilterRule], bool]) -> Tuple['Filter', 'Filter']:
        """
        Split into (rules matching predicate, other rules), keeping order.
        """
        selected = Filter()
        rest = Filter()
        for rule in self._rules:
            (selected if predicate(rule) else rest)._rules.append(rule)
        return selected, rest

    def groups(self) -> List[List[FilterRule]]:
        """Rules grouped as evaluated: a list of OR-groups joined by AND."""
        grouped: List[List[FilterRule]] = []
        for rule in self._rules:
            if grouped and rule.concatenation is Operator.OR:
                grouped[-1].append(rule)
            else:
                grouped.append([rule])
        return grouped

    # ==================== Evaluation ====================

    def evaluate(self, check: Callable[[FilterRule], bool]) -> bool:
        """
        Evaluate the filter with a per-rule check.

        Args:
            check: Returns whether a single rule matches the current item

        Returns:
            True if the item matches (always True for an empty filter)
        """
        for group in self.groups():
            if not any(check(rule) for rule in group):
                return False
        return True

    def matches(self, lookup: Callable[[str], Optional[str]]) -> bool:
        """
        Evaluate the filter against an item exposed as header -> value.

        Args:
            lookup: Returns the value for a header, None when the header is absent
        """
        return self.evaluate(lambda rule: rule.check_value(lookup(rule.header)))

    def matches_record(self, record: Mapping[str, Optional[str]]) -> bool:
        return self.matches(record.get)

    def is_empty(self) -> bool:
        return not self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[FilterRule]:
        return iter(self._rules)

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Filter({' '.join(r.rule_string for r in self._rules)!r})"

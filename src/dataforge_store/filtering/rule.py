"""
Filter Rule - A single predicate: header, value set, operator and format.

A rule matches a candidate value if it matches ANY of its values. Rules
are validated when they are built: concatenation-only operators used as
comparators, numeric comparators with non-numeric values and invalid
regular expressions all fail at construction.
"""

import logging
import re
from typing import Iterable, Optional, Tuple, Union

from .dates import DateStrategy, get_default_date_strategy
from .operators import Operator, RuleFormat
from ..constants import WILDCARD_VALUES, NULL_LITERAL
from ..exceptions import IllegalOperatorError, IncompatibleOperatorError, NumericComparisonError

logger = logging.getLogger(__name__)


def _to_number(text: str) -> Optional[float]:
    try:
        return float(text)
    except (TypeError, ValueError):
        return None


class FilterRule:
    """
    Predicate against one header (or implicit header such as XPath).

    Args:
        header: Header name the rule applies to
        values: One value or a sequence of values (must not be empty)
        operator: Comparator, EQUALS by default
        concatenation: How the rule joins the preceding rule (AND by default)
        rule_format: STRING, QUOTED_STRING, REGEX or QUOTED_REGEX
        date_strategy: Date recognizer for date operators (process default if None)

    Raises:
        IllegalOperatorError: If a concatenation operator is used as comparator
            or a comparator is used as concatenation
        IncompatibleOperatorError: If the values do not fit the operator
    """

    def __init__(self, header: str, values: Union[str, Iterable[str]],
                 operator: Union[Operator, str] = Operator.EQUALS,
                 concatenation: Union[Operator, str] = Operator.AND,
                 rule_format: RuleFormat = RuleFormat.STRING,
                 date_strategy: Optional[DateStrategy] = None):
        operator = Operator.from_name(operator)
        concatenation = Operator.from_name(concatenation)
        if operator.is_concatenation:
            raise IllegalOperatorError(f"{operator.name} not supported as comparator")
        if not concatenation.is_concatenation:
            raise IllegalOperatorError(f"{concatenation.name} is not a concatenation operator")

        if isinstance(values, str) or values is None:
            values = [values]
        values = tuple("" if v is None else str(v) for v in values)
        if not values:
            raise IncompatibleOperatorError(f"Rule for '{header}' has no values")

        self.header = header
        self.values: Tuple[str, ...] = values
        self.operator = operator
        self.concatenation = concatenation
        self.rule_format = rule_format
        self._date_strategy = date_strategy
        self._patterns = {}
        self._validate()

    # ==================== Validation ====================

    def _validate(self):
        for value in self.values:
            if self._is_wildcard(value):
                continue
            if self.operator.is_numeric and _to_number(value) is None:
                raise IncompatibleOperatorError(
                    f"Operator {self.operator.name} requires numeric values, got '{value}'"
                )
            if self.operator.is_date and value != NULL_LITERAL and not self.date_strategy.is_date(value):
                raise IncompatibleOperatorError(
                    f"Operator {self.operator.name} requires date values, got '{value}'"
                )
            if self.rule_format.is_regex and not self.operator.is_numeric and not self.operator.is_date:
                self._pattern_for(value)

    def _pattern_for(self, value: str):
        pattern = self._patterns.get(value)
        if pattern is None:
            if self.operator in (Operator.CONTAINS, Operator.CONTAINS_IGNORE_CASE):
                source = f".*{value}.*"
            elif self.operator in (Operator.STARTS_WITH, Operator.STARTS_WITH_IGNORE_CASE):
                source = f"{value}.*"
            elif self.operator in (Operator.ENDS_WITH, Operator.ENDS_WITH_IGNORE_CASE):
                source = f".*{value}"
            else:
                source = value
            flags = re.IGNORECASE if self.operator.ignores_case else 0
            try:
                pattern = re.compile(source, flags | re.DOTALL)
            except re.error as e:
                raise IncompatibleOperatorError(f"Invalid regular expression '{value}': {e}") from e
            self._patterns[value] = pattern
        return pattern

    @property
    def date_strategy(self) -> DateStrategy:
        return self._date_strategy or get_default_date_strategy()

    @staticmethod
    def _is_wildcard(value: str) -> bool:
        return value in WILDCARD_VALUES

    # ==================== Matching ====================

    @property
    def value(self) -> Optional[str]:
        """The single value of the rule, None if it has several."""
        return self.values[0] if len(self.values) == 1 else None

    @property
    def is_wildcard(self) -> bool:
        return any(self._is_wildcard(v) for v in self.values)

    def check_value(self, candidate: Optional[str]) -> bool:
        """
        Check a candidate value against the rule.

        Args:
            candidate: Value to test (None never matches)

        Returns:
            True if the candidate matches any value of the rule

        Raises:
            NumericComparisonError: If a numeric comparator meets a non-numeric candidate
        """
        if candidate is None:
            return False
        for value in self.values:
            if self._is_wildcard(value):
                return True
            if self.is_valid_value(candidate, value):
                return True
        return False

    def is_valid_value(self, candidate: str, value: str) -> bool:
        """Compare one candidate against one rule value."""
        if candidate == NULL_LITERAL or value == NULL_LITERAL:
            return False
        candidate = candidate.strip()
        op = self.operator

        if op.is_numeric:
            number = _to_number(candidate)
            if number is None:
                raise NumericComparisonError(
                    f"Operator {op.name} cannot compare non-numeric value '{candidate}'"
                )
            limit = float(value)
            if op is Operator.GREATER_THAN:
                return number > limit
            if op is Operator.GREATER_OR_EQUAL_THAN:
                return number >= limit
            if op is Operator.LESS_THAN:
                return number < limit
            return number <= limit

        if op.is_date:
            return self._check_date(candidate, value)

        if self.rule_format.is_regex:
            matched = self._pattern_for(value).fullmatch(candidate) is not None
            return not matched if op.is_negation else matched

        if op.ignores_case:
            candidate = candidate.upper()
            value = value.upper()
        if op in (Operator.EQUALS, Operator.EQUALS_IGNORE_CASE):
            return candidate == value
        if op in (Operator.NOT_EQUALS, Operator.NOT_EQUALS_IGNORE_CASE):
            return candidate != value
        if op in (Operator.CONTAINS, Operator.CONTAINS_IGNORE_CASE):
            return value in candidate
        if op in (Operator.STARTS_WITH, Operator.STARTS_WITH_IGNORE_CASE):
            return candidate.startswith(value)
        if op in (Operator.ENDS_WITH, Operator.ENDS_WITH_IGNORE_CASE):
            return candidate.endswith(value)
        raise IllegalOperatorError(f"{op.name} not supported as comparator")

    def _check_date(self, candidate: str, value: str) -> bool:
        op = self.operator
        strategy = self.date_strategy
        if op in (Operator.CONTAINS_DATE, Operator.CONTAINS_DATE_AFTER, Operator.CONTAINS_DATE_BEFORE):
            found = strategy.find(candidate)
            if found is None:
                return False
            candidate = found
        result = strategy.compare(candidate, value)
        if result is None:
            return False
        if op in (Operator.DATE_EQUALS, Operator.CONTAINS_DATE):
            return result == 0
        if op in (Operator.DATE_AFTER, Operator.CONTAINS_DATE_AFTER):
            return result > 0
        return result < 0

    # ==================== Rendering ====================

    @property
    def rule_string(self) -> str:
        """
        SQL-like rendering, e.g. "AND B = '2'" or "OR B IN ('1','2')".
        """
        quote = "'" if self.rule_format.is_quoted else ""
        rendered = [f"{quote}{v}{quote}" for v in self.values]
        symbol = self.operator.symbol or self.operator.param_name
        if len(rendered) > 1:
            if self.operator is Operator.EQUALS:
                symbol = "IN"
            body = f"({','.join(rendered)})"
        else:
            body = rendered[0]
        return f"{self.concatenation.name} {self.header} {symbol} {body}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, FilterRule):
            return NotImplemented
        return (self.header == other.header
                and self.operator is other.operator
                and frozenset(self.values) == frozenset(other.values))

    def __hash__(self) -> int:
        return hash((self.header, self.operator, frozenset(self.values)))

    def __repr__(self) -> str:
        return f"FilterRule({self.rule_string!r})"

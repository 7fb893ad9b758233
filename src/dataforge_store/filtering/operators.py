"""
Operators - Closed set of filter comparators and rule concatenations.
"""

from enum import Enum
from typing import Union


class Operator(Enum):
    """
    Filter operators.

    Each member carries its parameter name and the symbol used when a rule
    is rendered as a rule string (empty when there is no SQL-like symbol).
    """

    CONTAINS = ("CONTAINS", "like")
    CONTAINS_DATE = ("CONTAINS_DATE", "")
    CONTAINS_DATE_AFTER = ("CONTAINS_DATE_AFTER", "")
    CONTAINS_DATE_BEFORE = ("CONTAINS_DATE_BEFORE", "")
    CONTAINS_IGNORE_CASE = ("CONTAINS_IGNORE_CASE", "")
    DATE_AFTER = ("DATE_AFTER", "")
    DATE_BEFORE = ("DATE_BEFORE", "")
    DATE_EQUALS = ("DATE_EQUALS", "")
    ENDS_WITH = ("ENDS_WITH", "")
    ENDS_WITH_IGNORE_CASE = ("ENDS_WITH_IGNORE_CASE", "")
    EQUALS = ("EQUALS", "=")
    EQUALS_IGNORE_CASE = ("EQUALS_IGNORE_CASE", "=")
    GREATER_THAN = ("GREATER_THAN", ">")
    GREATER_OR_EQUAL_THAN = ("GREATER_OR_EQUAL_THAN", ">=")
    LESS_THAN = ("LESS_THAN", "<")
    LESS_OR_EQUAL_THAN = ("LESS_OR_EQUAL_THAN", "<=")
    NOT_EQUALS = ("NOT_EQUALS", "<>")
    NOT_EQUALS_IGNORE_CASE = ("NOT_EQUALS_IGNORE_CASE", "<>")
    STARTS_WITH = ("STARTS_WITH", "")
    STARTS_WITH_IGNORE_CASE = ("STARTS_WITH_IGNORE_CASE", "")
    AND = ("AND", "AND")
    OR = ("OR", "OR")
    IN = ("IN", "IN")
    BETWEEN = ("BETWEEN", "BETWEEN")

    def __init__(self, param_name: str, symbol: str):
        self.param_name = param_name
        self.symbol = symbol

    @property
    def is_concatenation(self) -> bool:
        return self in _CONCATENATIONS

    @property
    def is_numeric(self) -> bool:
        return self in _NUMERIC

    @property
    def is_date(self) -> bool:
        return self in _DATE

    @property
    def ignores_case(self) -> bool:
        return self.param_name.endswith("_IGNORE_CASE")

    @property
    def is_negation(self) -> bool:
        return self in (Operator.NOT_EQUALS, Operator.NOT_EQUALS_IGNORE_CASE)

    @classmethod
    def from_name(cls, name: Union[str, 'Operator']) -> 'Operator':
        """
        Look up an operator by name (case-insensitive).

        Raises:
            ValueError: If the name is unknown
        """
        if isinstance(name, Operator):
            return name
        key = str(name).strip().upper()
        for member in cls:
            if member.name == key or member.param_name == key:
                return member
        raise ValueError(f"Unknown operator: {name}")


_CONCATENATIONS = frozenset({Operator.AND, Operator.OR, Operator.IN, Operator.BETWEEN})
_NUMERIC = frozenset({
    Operator.GREATER_THAN, Operator.GREATER_OR_EQUAL_THAN,
    Operator.LESS_THAN, Operator.LESS_OR_EQUAL_THAN,
})
_DATE = frozenset({
    Operator.DATE_EQUALS, Operator.DATE_BEFORE, Operator.DATE_AFTER,
    Operator.CONTAINS_DATE, Operator.CONTAINS_DATE_BEFORE, Operator.CONTAINS_DATE_AFTER,
})


class RuleFormat(Enum):
    """How rule values are interpreted and rendered."""
    STRING = "string"
    QUOTED_STRING = "quoted_string"
    REGEX = "regex"
    QUOTED_REGEX = "quoted_regex"

    @property
    def is_regex(self) -> bool:
        return self in (RuleFormat.REGEX, RuleFormat.QUOTED_REGEX)

    @property
    def is_quoted(self) -> bool:
        return self in (RuleFormat.QUOTED_STRING, RuleFormat.QUOTED_REGEX)

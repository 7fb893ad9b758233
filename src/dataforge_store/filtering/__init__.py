"""
Filtering - Operators, rules and composable filters.
"""

from .operators import Operator, RuleFormat
from .dates import DateStrategy, PatternDateStrategy, get_default_date_strategy, set_default_date_strategy
from .rule import FilterRule
from .filter import Filter

__all__ = [
    'Operator',
    'RuleFormat',
    'DateStrategy',
    'PatternDateStrategy',
    'get_default_date_strategy',
    'set_default_date_strategy',
    'FilterRule',
    'Filter',
]

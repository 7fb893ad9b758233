"""
Date Strategies - Pluggable date recognition for date filter operators.

A DateStrategy turns text into a datetime and can locate a date inside a
longer text. The default PatternDateStrategy tries an ordered list of
strptime formats, taken from StoreSettings unless given explicitly.
"""

import logging
import re
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

logger = logging.getLogger(__name__)

# Shapes looked for by find(): ISO-like, day-first and compact dates,
# each optionally followed by a time.
_TIME = r"(?:[ T]\d{1,2}:\d{2}(?::\d{2})?)?"
_DATE_CANDIDATE_RE = re.compile(
    r"(?<!\d)(?:"
    r"\d{4}[-/.]\d{1,2}[-/.]\d{1,2}" + _TIME +
    r"|\d{1,2}[-/.]\d{1,2}[-/.]\d{4}" + _TIME +
    r"|\d{8}"
    r")(?!\d)"
)


class DateStrategy(ABC):
    """Recognizes and compares dates."""

    @abstractmethod
    def parse(self, text: str) -> Optional[datetime]:
        """Parse a complete date text, None if it is not a date."""

    def find(self, text: str) -> Optional[str]:
        """
        Find the first date inside a longer text.

        Returns:
            The date substring or None
        """
        for match in _DATE_CANDIDATE_RE.finditer(text or ""):
            if self.parse(match.group(0)) is not None:
                return match.group(0)
        return None

    def is_date(self, text: str) -> bool:
        return self.parse(text) is not None

    def compare(self, left: str, right: str) -> Optional[int]:
        """
        Compare two date texts.

        Returns:
            -1, 0 or 1, or None when either side is not a date
        """
        left_date = self.parse(left)
        right_date = self.parse(right)
        if left_date is None or right_date is None:
            logger.debug(f"Cannot compare dates '{left}' and '{right}'")
            return None
        return (left_date > right_date) - (left_date < right_date)


class PatternDateStrategy(DateStrategy):
    """
    Date strategy trying strptime formats in order.

    Without explicit formats, StoreSettings.date_formats is read on every
    parse, so later changes to the setting apply.
    """

    def __init__(self, formats: Optional[List[str]] = None):
        self._formats = list(formats) if formats is not None else None

    @property
    def formats(self) -> List[str]:
        if self._formats is not None:
            return self._formats
        from ..config.store_settings import get_store_settings
        return get_store_settings().date_formats

    def parse(self, text: str) -> Optional[datetime]:
        if text is None:
            return None
        text = text.strip()
        for fmt in self.formats:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
        return None


_default_strategy: Optional[DateStrategy] = None


def get_default_date_strategy() -> DateStrategy:
    """Get the process-wide default strategy (created on first use)."""
    global _default_strategy
    if _default_strategy is None:
        _default_strategy = PatternDateStrategy()
    return _default_strategy


def set_default_date_strategy(strategy: Optional[DateStrategy]):
    """Replace the default strategy; None restores the pattern-based one."""
    global _default_strategy
    _default_strategy = strategy

"""
Headers - Ordered, disambiguating header index for tabular models.

Repeated names receive a numeric suffix (h, h_2, h_3, ...). The first
occurrence keeps the plain name and suffixes only ever grow: a name that
collides with an earlier generated suffix is itself suffixed.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Union

from ..constants import DUPLICATE_SUFFIX_START, DUPLICATE_SUFFIX_SEPARATOR

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Header:
    """
    A column header.

    Attributes:
        name: Unique (disambiguated) name
        position: 0-based column index
        base_name: Name as found in the source
        suffix: Disambiguation counter (0 when the name was unique)
    """
    name: str
    position: int
    base_name: str
    suffix: int = 0

    @property
    def is_disambiguated(self) -> bool:
        return self.suffix > 0


class HeaderIndex:
    """Ordered list of headers with O(1) name lookup."""

    def __init__(self, names: Optional[Iterable[str]] = None):
        self._headers: List[Header] = []
        self._by_name: Dict[str, int] = {}
        for name in names or []:
            self.add(name)

    # ==================== Mutation ====================

    def add(self, name: str) -> Header:
        """
        Append a header, disambiguating the name if it is already used.

        Args:
            name: Requested header name

        Returns:
            The appended Header
        """
        name = "" if name is None else str(name)
        unique, suffix = self._disambiguate(name)
        header = Header(name=unique, position=len(self._headers), base_name=name, suffix=suffix)
        self._headers.append(header)
        self._by_name[unique] = header.position
        if suffix:
            logger.debug(f"Duplicate header '{name}' renamed to '{unique}'")
        return header

    def _disambiguate(self, name: str):
        if name not in self._by_name:
            return name, 0
        counter = DUPLICATE_SUFFIX_START
        while f"{name}{DUPLICATE_SUFFIX_SEPARATOR}{counter}" in self._by_name:
            counter += 1
        return f"{name}{DUPLICATE_SUFFIX_SEPARATOR}{counter}", counter

    def move(self, old_position: int, new_position: int):
        """Move a header to another position (used when reordering columns)."""
        header = self._headers.pop(old_position)
        self._headers.insert(new_position, header)
        self._reindex()

    def _reindex(self):
        self._headers = [
            Header(h.name, i, h.base_name, h.suffix) for i, h in enumerate(self._headers)
        ]
        self._by_name = {h.name: h.position for h in self._headers}

    # ==================== Lookup ====================

    def index_of(self, name: str, ignore_case: bool = False) -> int:
        """
        Get the position of a header.

        Args:
            name: Disambiguated header name
            ignore_case: Fall back to a case-insensitive match

        Returns:
            0-based position or -1 if not found
        """
        position = self._by_name.get(name)
        if position is not None:
            return position
        if ignore_case and name is not None:
            lowered = name.lower()
            for header in self._headers:
                if header.name.lower() == lowered:
                    return header.position
        return -1

    def get(self, key: Union[int, str]) -> Optional[Header]:
        """Get a header by position or name, None when absent."""
        if isinstance(key, int):
            if 0 <= key < len(self._headers):
                return self._headers[key]
            return None
        position = self.index_of(key)
        return self._headers[position] if position >= 0 else None

    @property
    def names(self) -> List[str]:
        return [h.name for h in self._headers]

    @property
    def base_names(self) -> List[str]:
        return [h.base_name for h in self._headers]

    def copy(self) -> 'HeaderIndex':
        clone = HeaderIndex()
        clone._headers = list(self._headers)
        clone._by_name = dict(self._by_name)
        return clone

    def __len__(self) -> int:
        return len(self._headers)

    def __iter__(self) -> Iterator[Header]:
        return iter(self._headers)

    def __contains__(self, name) -> bool:
        return name in self._by_name

    def __eq__(self, other) -> bool:
        if not isinstance(other, HeaderIndex):
            return NotImplemented
        return self.names == other.names

    def __repr__(self) -> str:
        return f"HeaderIndex({self.names!r})"

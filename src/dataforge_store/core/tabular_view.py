"""
Tabular View - Row, column and cell operations on a TabularModel.

Lookups never fail on missing data: an unknown header or an index out of
range yields an empty result. Writes that cannot be honoured (rows wider
than the header set, headers that do not exist) raise.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from .headers import HeaderIndex
from .model import TabularModel, cell_text
from ..exceptions import ColumnCountError, HeaderNotFoundError

logger = logging.getLogger(__name__)

HeaderKey = Union[int, str]


class TabularView:
    """
    Operations on a TabularModel.

    Args:
        model: The model to operate on (shared, not copied)
    """

    def __init__(self, model: TabularModel):
        self.model = model

    # ==================== Headers ====================

    @property
    def headers(self) -> HeaderIndex:
        return self.model.headers

    def get_headers(self) -> List[str]:
        return self.model.headers.names

    def get_header(self, key: HeaderKey) -> Optional[str]:
        """
        Get a header name by position, or check a name exists.

        Returns:
            The (disambiguated) header name or None
        """
        header = self.model.headers.get(key)
        return header.name if header else None

    def get_header_index(self, name: str) -> int:
        """Position of a header, -1 if absent."""
        return self.model.headers.index_of(name)

    def _column_index(self, key: HeaderKey) -> int:
        if isinstance(key, int):
            return key if 0 <= key < len(self.model.headers) else -1
        return self.model.headers.index_of(key)

    def _require_column(self, key: HeaderKey) -> int:
        position = self._column_index(key)
        if position < 0:
            raise HeaderNotFoundError(key)
        return position

    def check_header(self, names: Sequence[str]) -> int:
        """
        Compare a header list with the model's headers.

        Returns:
            0 same headers in the same order, 1 same headers in another order,
            -1 different headers
        """
        other = HeaderIndex(names).names
        mine = self.get_headers()
        if other == mine:
            return 0
        if sorted(other) == sorted(mine):
            return 1
        return -1

    def add_column(self, name: str, fill: str = "") -> str:
        """
        Append a column.

        Returns:
            The unique column name (disambiguated when already used)
        """
        return self.model.add_header(name, cell_text(fill))

    def set_column(self, name: str, values: Sequence) -> str:
        """
        Create or overwrite a column.

        Rows are appended when there are more values than rows; rows beyond
        the values get an empty cell.

        Returns:
            The column name
        """
        position = self._column_index(name)
        if position < 0:
            name = self.add_column(name)
            position = self._column_index(name)
        values = [cell_text(v) for v in values]
        while len(self.model.rows) < len(values):
            self.model.append_row([])
        for row_index, row in enumerate(self.model.rows):
            row[position] = values[row_index] if row_index < len(values) else ""
        return name

    def put_metadata(self, name: str, value) -> str:
        """
        Add a metadata column: every existing row and every row added
        afterwards gets the value.
        """
        value = cell_text(value)
        if name not in self.model.headers:
            name = self.model.add_header(name, value)
        else:
            position = self._column_index(name)
            for row in self.model.rows:
                row[position] = value
        self.model.metadata[name] = value
        return name

    # ==================== Rows ====================

    def _row_matches(self, row: List[str], filter) -> bool:
        if filter is None:
            return True

        def lookup(header: str) -> Optional[str]:
            position = self.model.headers.index_of(header)
            return row[position] if position >= 0 else None

        return filter.matches(lookup)

    def get_rows_indexes(self, filter=None) -> List[int]:
        """Indexes of the rows matching a filter (all rows without filter)."""
        return [i for i, row in enumerate(self.model.rows) if self._row_matches(row, filter)]

    def _project(self, row: List[str], headers: Optional[Sequence[HeaderKey]]) -> List[str]:
        if headers is None:
            return list(row)
        projected = []
        for key in headers:
            position = self._column_index(key)
            if position >= 0:
                projected.append(row[position])
        return projected

    def get_row(self, index: int, headers: Optional[Sequence[HeaderKey]] = None,
                filter=None) -> List[str]:
        """
        Get a row.

        Args:
            index: Position among the rows matching the filter
            headers: Optional subset of columns to return, in that order
            filter: Optional Filter

        Returns:
            Row values, or an empty list when there is no such row
        """
        indexes = self.get_rows_indexes(filter)
        if not 0 <= index < len(indexes):
            return []
        return self._project(self.model.rows[indexes[index]], headers)

    def get_rows(self, filter=None, headers: Optional[Sequence[HeaderKey]] = None) -> List[List[str]]:
        return [self._project(self.model.rows[i], headers) for i in self.get_rows_indexes(filter)]

    def get_row_as_dict(self, index: int, filter=None) -> Dict[str, str]:
        row = self.get_row(index, filter=filter)
        if not row:
            return {}
        return dict(zip(self.get_headers(), row))

    def get_rows_as_dicts(self, filter=None) -> List[Dict[str, str]]:
        names = self.get_headers()
        return [dict(zip(names, row)) for row in self.get_rows(filter)]

    def _fill_metadata(self, row: List[str]) -> List[str]:
        for name, value in self.model.metadata.items():
            position = self.model.headers.index_of(name)
            if position >= 0 and not row[position]:
                row[position] = value
        return row

    def add_row(self, values: Sequence, index: Optional[int] = None) -> List[str]:
        """
        Add a row at the end or at a position.

        Narrower input is right-padded with empty cells.

        Raises:
            ColumnCountError: If there are more values than headers
        """
        row = self._fill_metadata(self.model.normalize_row(values))
        if index is None:
            self.model.rows.append(row)
        else:
            self.model.rows.insert(index, row)
        return row

    def add_rows(self, rows: Iterable[Sequence]):
        for values in rows:
            self.add_row(values)

    def set_row(self, index: int, values: Sequence) -> List[str]:
        """Replace a row (padded like add_row)."""
        row = self._fill_metadata(self.model.normalize_row(values))
        self.model.rows[index] = row
        return row

    def merge_row(self, index: int, values: Sequence) -> List[str]:
        """
        Overwrite the cells for which the incoming value is non-empty.

        Raises:
            ColumnCountError: If there are more values than headers
            IndexError: If the row does not exist
        """
        incoming = [cell_text(v) for v in values]
        if len(incoming) > self.model.width:
            raise ColumnCountError(self.model.width, len(incoming))
        row = self.model.rows[index]
        for position, value in enumerate(incoming):
            if value != "":
                row[position] = value
        return list(row)

    def create_prepared_row(self, *assignments: str) -> List[str]:
        """
        Build a row from "header=value" strings; other cells stay empty.

        Raises:
            HeaderNotFoundError: If a header does not exist
        """
        row = [""] * self.model.width
        for assignment in assignments:
            header, _, value = assignment.partition("=")
            row[self._require_column(header.strip())] = value
        return row

    def delete_row(self, target: Union[int, object]) -> int:
        """
        Delete one row by index or all rows matching a Filter.

        Returns:
            Number of deleted rows
        """
        if isinstance(target, int):
            if 0 <= target < len(self.model.rows):
                del self.model.rows[target]
                return 1
            return 0
        indexes = set(self.get_rows_indexes(target))
        self.model.rows = [row for i, row in enumerate(self.model.rows) if i not in indexes]
        if indexes:
            logger.debug(f"Deleted {len(indexes)} rows")
        return len(indexes)

    def append_model(self, other: TabularModel):
        """
        Append the rows of another tabular model, re-ordering its columns.

        Columns of this model missing in the other stay empty.

        Raises:
            HeaderNotFoundError: If the other model has a column this one lacks
        """
        other_names = other.headers.names
        mapping = []
        for name in other_names:
            mapping.append(self._require_column(name))
        for other_row in other.rows:
            row = [""] * self.model.width
            for source, target in enumerate(mapping):
                row[target] = other_row[source]
            self.model.rows.append(self._fill_metadata(row))

    # ==================== Columns & values ====================

    def get_column(self, key: HeaderKey, row_indexes: Optional[Sequence[int]] = None,
                   filter=None) -> List[str]:
        """
        Get the values of a column.

        Args:
            key: Column index or name
            row_indexes: Optional row positions to restrict to
            filter: Optional Filter

        Returns:
            Column values, empty when the column does not exist
        """
        position = self._column_index(key)
        if position < 0:
            return []
        indexes = self.get_rows_indexes(filter)
        if row_indexes is not None:
            wanted = set(row_indexes)
            indexes = [i for i in indexes if i in wanted]
        return [self.model.rows[i][position] for i in indexes]

    def get_value(self, header: HeaderKey, row: int = 0, filter=None) -> Optional[str]:
        """Value of a cell, None when the row or header does not exist."""
        values = self.get_column(header, filter=filter)
        if 0 <= row < len(values):
            return values[row]
        return None

    def set_value(self, header: HeaderKey, value, filter=None, all_occurrences: bool = False) -> int:
        """
        Set a cell in the first matching row, or in all of them.

        An empty model without filter gets a new row.

        Returns:
            Number of updated cells

        Raises:
            HeaderNotFoundError: If the header does not exist
        """
        position = self._require_column(header)
        indexes = self.get_rows_indexes(filter)
        if not indexes and filter is None and not self.model.rows:
            self.add_row([])
            indexes = [0]
        if not all_occurrences:
            indexes = indexes[:1]
        for i in indexes:
            self.model.rows[i][position] = cell_text(value)
        return len(indexes)

    def get_values_as_list(self, header: HeaderKey, filter=None) -> List[str]:
        return self.get_column(header, filter=filter)

    def get_values_as_distinct_list(self, header: HeaderKey, filter=None) -> List[str]:
        """Column values without duplicates, first-seen order."""
        return list(dict.fromkeys(self.get_column(header, filter=filter)))

    def _converted(self, header: HeaderKey, filter, convert: Callable) -> list:
        result = []
        for value in self.get_column(header, filter=filter):
            if value.strip() == "":
                continue
            result.append(convert(value))
        return result

    def get_values_as_float_list(self, header: HeaderKey, filter=None) -> List[float]:
        """Numeric column values; empty cells are skipped, other text raises ValueError."""
        return self._converted(header, filter, lambda v: float(v.strip().replace(",", ".")))

    def get_values_as_int_list(self, header: HeaderKey, filter=None) -> List[int]:
        """Integer column values; empty cells are skipped, other text raises ValueError."""
        return self._converted(header, filter, lambda v: int(float(v.strip().replace(",", "."))))

    def get_max_len(self, header: HeaderKey) -> int:
        """Longest value length of a column, header name included."""
        name = self.get_header(header)
        if name is None:
            return 0
        return max([len(name)] + [len(v) for v in self.get_column(header)])

    def row_count(self) -> int:
        return len(self.model.rows)

"""
Delimited Text Adapter - CSV-like sources with a configurable delimiter.

Column orientation (default): one header row, one row per line.
Row orientation: every line holds a header followed by its values
("key;v1;v2"), as used by properties-like listings.
"""

import csv
import io
import logging
from enum import Enum
from typing import List, Optional, Sequence

from .base import FormatAdapter, ModelKind, Source
from ..core.headers import HeaderIndex
from ..core.model import TabularModel
from ..constants import NO_HEADER_ROW
from ..exceptions import ColumnCountError, ParseError, UnsupportedOperationError
from ..utils.file_reader import detect_separator

logger = logging.getLogger(__name__)

AUTO_DELIMITER = "auto"


class Orientation(Enum):
    """Where the headers of a delimited source are."""
    COLUMN = "column"
    ROW = "row"


class DelimitedAdapter(FormatAdapter):
    """
    Adapter for delimited text.

    Args:
        delimiter: Column delimiter; "auto" detects it; StoreSettings default when None
        header_row_index: Line holding the headers (lines before it are skipped);
            -1 when the source has no header row
        headers: Explicit header names for sources without header row
        orientation: COLUMN (default) or ROW
        encoding: See FormatAdapter
    """

    format_name = "csv"
    extensions = (".csv", ".txt", ".tsv", ".dat")
    model_kind = ModelKind.TABULAR

    def __init__(self, delimiter: Optional[str] = None, header_row_index: Optional[int] = None,
                 headers: Optional[Sequence[str]] = None,
                 orientation: Orientation = Orientation.COLUMN,
                 encoding: Optional[str] = None):
        super().__init__(encoding)
        from ..config.store_settings import get_store_settings
        settings = get_store_settings()
        self.delimiter = delimiter if delimiter is not None else settings.column_delimiter
        if headers is not None and header_row_index is None:
            header_row_index = NO_HEADER_ROW
        self.header_row_index = settings.header_row_index if header_row_index is None else header_row_index
        self.headers = list(headers) if headers is not None else None
        self.orientation = Orientation(orientation)

    # ==================== Parsing ====================

    def _resolve_delimiter(self, text: str) -> str:
        if self.delimiter == AUTO_DELIMITER:
            return detect_separator(text)
        return self.delimiter

    def _read_lines(self, text: str, delimiter: str) -> List[tuple]:
        """Return (line number, values) for each record, blank lines excluded."""
        records = []
        reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
        try:
            for values in reader:
                if not values:
                    continue
                records.append((reader.line_num, values))
        except csv.Error as e:
            raise ParseError(str(e), line=reader.line_num) from e
        return records

    def parse(self, source: Source) -> TabularModel:
        text = self.decode(source)
        delimiter = self._resolve_delimiter(text)
        records = self._read_lines(text, delimiter)
        if self.orientation is Orientation.ROW:
            model = self._parse_rows_oriented(records, delimiter)
        else:
            model = self._parse_columns_oriented(records, delimiter)
        logger.info(f"Parsed delimited text: {model.width} columns, {len(model.rows)} rows")
        return model

    def _parse_columns_oriented(self, records: List[tuple], delimiter: str) -> TabularModel:
        model = TabularModel(delimiter=delimiter)
        data = records
        if self.header_row_index != NO_HEADER_ROW:
            if self.header_row_index >= len(records):
                if self.headers:
                    model.headers = HeaderIndex(self.headers)
                return model
            model.preamble = [values for _, values in records[:self.header_row_index]]
            model.headers = HeaderIndex(h.strip() for h in records[self.header_row_index][1])
            data = records[self.header_row_index + 1:]
        elif self.headers:
            model.headers = HeaderIndex(self.headers)
        else:
            width = max((len(values) for _, values in records), default=0)
            model.headers = HeaderIndex(f"column{i + 1}" for i in range(width))

        for line, values in data:
            try:
                model.append_row(values)
            except ColumnCountError as e:
                logger.warning(f"Skipped line {line}: {e}")
        return model

    def _parse_rows_oriented(self, records: List[tuple], delimiter: str) -> TabularModel:
        model = TabularModel(delimiter=delimiter)
        columns = []
        for _, values in records:
            model.headers.add(values[0].strip())
            columns.append(values[1:])
        height = max((len(c) for c in columns), default=0)
        for i in range(height):
            model.rows.append([c[i] if i < len(c) else "" for c in columns])
        return model

    # ==================== Serialization ====================

    def serialize(self, model: TabularModel) -> bytes:
        if not isinstance(model, TabularModel):
            raise UnsupportedOperationError("Delimited text can only hold tabular models")
        delimiter = model.delimiter if self.delimiter == AUTO_DELIMITER else self.delimiter
        buffer = io.StringIO()
        writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
        if self.orientation is Orientation.ROW:
            for position, header in enumerate(model.headers):
                writer.writerow([header.base_name] + [row[position] for row in model.rows])
        else:
            if self.header_row_index != NO_HEADER_ROW:
                preamble = list(model.preamble[:self.header_row_index])
                while len(preamble) < self.header_row_index:
                    preamble.append(["", ""])
                writer.writerows(preamble)
                writer.writerow(model.headers.base_names)
            for row in model.rows:
                writer.writerow(row)
        return self.encode(buffer.getvalue())

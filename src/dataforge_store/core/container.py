"""
Data Container - Facade over a canonical model and its format adapter.

A container owns one model (tabular or tree) and the adapter used to read
and write it. Operations are delegated to a TabularView or a TreeView
depending on the model; calling a tabular-only operation on a tree (or the
reverse) raises UnsupportedOperationError.

Construction:
    DataContainer()                                   empty table
    DataContainer.from_headers(["A", "B"])            table with headers
    DataContainer.from_file("data.csv", delimiter=",")
    DataContainer.from_string('{"a": 1}')             format detected
    DataContainer.from_cursor(cursor)                 live result set
    DataContainer.from_dataframe(df)
"""

import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from .dataframes import cursor_to_model, dataframe_to_model, model_to_dataframe
from .model import TabularModel, TreeModel, TreeNode
from .tabular_view import TabularView
from .tree_view import TreeView
from ..adapters.base import FormatAdapter, Model
from ..adapters.delimited import DelimitedAdapter, Orientation
from ..adapters.factory import AdapterFactory
from ..adapters.structured import value_to_tree
from ..constants import DEFAULT_COLUMN_DELIMITER
from ..exceptions import DataIOError, UnsupportedOperationError
from ..utils.file_reader import backup_file, decode_bytes, read_bytes, write_bytes

logger = logging.getLogger(__name__)

_TABULAR_OPTIONS = ("delimiter", "header_row_index", "headers", "orientation")


def _make_adapter(format_name: Optional[str] = None, path: Optional[Union[str, Path]] = None,
                  **options) -> FormatAdapter:
    """Create an adapter, passing tabular options only to the delimited adapter."""
    if format_name is None and path is not None:
        format_name = AdapterFactory.format_for_path(path)
        if format_name is not None:
            if Path(path).suffix.lower() == ".tsv" and options.get("delimiter") is None:
                options["delimiter"] = "\t"
    options = {k: v for k, v in options.items() if v is not None}
    adapter_class = AdapterFactory.get_adapter_class(format_name or "csv")
    if not issubclass(adapter_class, DelimitedAdapter):
        options = {k: v for k, v in options.items() if k not in _TABULAR_OPTIONS}
    return adapter_class(**options)


class DataContainer:
    """
    Uniform access to tabular and tree data.

    Args:
        model: The model (an empty table when None)
        adapter: Format adapter (delimited text when None)
        source_path: Backing file, if any
        filter: Filter applied when the data was read
    """

    def __init__(self, model: Optional[Model] = None, adapter: Optional[FormatAdapter] = None,
                 source_path: Optional[Union[str, Path]] = None, filter=None):
        self.adapter = adapter or _make_adapter("csv")
        if model is None:
            model = self.adapter.empty_model()
        self.model = model
        self.source_path = Path(source_path) if source_path else None
        self.filter = filter
        self._tabular: Optional[TabularView] = None
        self._tree: Optional[TreeView] = None

    # ==================== Construction ====================

    @classmethod
    def empty(cls, format_name: str = "csv", root: Optional[str] = None, **options) -> 'DataContainer':
        """
        Create an empty container of a format.

        Args:
            format_name: Target format
            root: Root tag for tree formats (anonymous when None)
        """
        adapter = _make_adapter(format_name, **options)
        model = adapter.empty_model()
        if isinstance(model, TreeModel) and root:
            model.root = TreeNode(root)
        return cls(model, adapter)

    @classmethod
    def from_headers(cls, headers: Sequence[str], format_name: str = "csv", **options) -> 'DataContainer':
        """Create an empty table with the given headers (duplicates are disambiguated)."""
        adapter = _make_adapter(format_name, **options)
        if not adapter.is_tabular:
            raise UnsupportedOperationError(f"Format {format_name} does not hold tables")
        delimiter = getattr(adapter, "delimiter", None)
        model = TabularModel.from_rows(headers)
        if delimiter and delimiter != "auto":
            model.delimiter = delimiter
        return cls(model, adapter)

    @classmethod
    def from_file(cls, path: Union[str, Path], format_name: Optional[str] = None,
                  delimiter: Optional[str] = None, header_row_index: Optional[int] = None,
                  filter=None, headers: Optional[Sequence[str]] = None,
                  encoding: Optional[str] = None,
                  orientation: Optional[Orientation] = None) -> 'DataContainer':
        """
        Read a container from a file.

        The format is taken from format_name, then from the file extension,
        then detected from the content.

        Args:
            path: Source file
            format_name: Explicit format
            delimiter: Column delimiter for delimited text
            header_row_index: Header line for delimited text (-1 = none)
            filter: Rows not matching it are not loaded (tables only)
            headers: Header names for sources without header row
            encoding: Explicit source encoding
            orientation: ROW for "key;v1;v2" listings

        Raises:
            DataIOError: If the file cannot be read
            ParseError: If the content is malformed
        """
        path = Path(path)
        raw = read_bytes(path)
        if format_name is None and AdapterFactory.format_for_path(path) is None:
            format_name = AdapterFactory.detect_format(decode_bytes(raw, encoding))
        adapter = _make_adapter(format_name, path, delimiter=delimiter, header_row_index=header_row_index,
                                headers=headers, encoding=encoding, orientation=orientation)
        container = cls(adapter.parse(raw), adapter, path, filter)
        container._apply_initial_filter()
        logger.info(f"Loaded {adapter.format_name} container from {path}")
        return container

    @classmethod
    def from_string(cls, source: Union[str, bytes], format_name: Optional[str] = None,
                    **options) -> 'DataContainer':
        """
        Read a container from in-memory text or bytes (no backing file).

        Options are those of from_file (delimiter, header_row_index, filter,
        headers, encoding, orientation).
        """
        filter = options.pop("filter", None)
        if format_name is None:
            format_name = AdapterFactory.detect_format(decode_bytes(source, options.get("encoding")))
        adapter = _make_adapter(format_name, **options)
        container = cls(adapter.parse(source), adapter, None, filter)
        container._apply_initial_filter()
        return container

    @classmethod
    def from_stream(cls, stream: Union[io.IOBase, Any], format_name: Optional[str] = None,
                    **options) -> 'DataContainer':
        """Read a container from a binary or text stream."""
        return cls.from_string(stream.read(), format_name, **options)

    @classmethod
    def from_cursor(cls, cursor, filter=None, format_name: str = "csv", **options) -> 'DataContainer':
        """Read a container from an executed DB-API 2.0 cursor."""
        adapter = _make_adapter(format_name, **options)
        container = cls(cursor_to_model(cursor, getattr(adapter, "delimiter", None)), adapter, None, filter)
        container._apply_initial_filter()
        return container

    @classmethod
    def from_dataframe(cls, df, format_name: str = "csv", **options) -> 'DataContainer':
        """Create a table from a pandas DataFrame."""
        adapter = _make_adapter(format_name, **options)
        delimiter = getattr(adapter, "delimiter", None)
        if not delimiter or delimiter == "auto":
            delimiter = DEFAULT_COLUMN_DELIMITER
        model = dataframe_to_model(df, delimiter)
        return cls(model, adapter)

    def _apply_initial_filter(self):
        if self.filter is not None and self.is_tabular:
            removed = len(self.model.rows) - len(self.tabular.get_rows_indexes(self.filter))
            if removed:
                self.model.rows = self.tabular.get_rows(self.filter)
                logger.debug(f"Initial filter skipped {removed} rows")

    # ==================== Model access ====================

    @property
    def format_name(self) -> str:
        return self.adapter.format_name

    @property
    def is_tabular(self) -> bool:
        return isinstance(self.model, TabularModel)

    @property
    def is_tree(self) -> bool:
        return isinstance(self.model, TreeModel)

    @property
    def tabular(self) -> TabularView:
        """TabularView of the model. Raises UnsupportedOperationError for trees."""
        if not self.is_tabular:
            raise UnsupportedOperationError(f"{self.format_name} container holds a tree, not a table")
        if self._tabular is None or self._tabular.model is not self.model:
            self._tabular = TabularView(self.model)
        return self._tabular

    @property
    def tree(self) -> TreeView:
        """TreeView of the model. Raises UnsupportedOperationError for tables."""
        if not self.is_tree:
            raise UnsupportedOperationError(f"{self.format_name} container holds a table, not a tree")
        if self._tree is None or self._tree.model is not self.model:
            self._tree = TreeView(self.model)
        return self._tree

    def as_table(self, path: Optional[str] = None) -> TabularModel:
        """
        Tabular view of the data: the model itself for tables, a flattened
        copy for trees.
        """
        if self.is_tabular:
            return self.model
        return self.tree.flatten(path, self.filter)

    # ==================== Uniform operations ====================

    def get(self, name: str, filter=None) -> Optional[str]:
        """First value of a column, or text of the first node with that tag."""
        if self.is_tabular:
            return self.tabular.get_value(name, 0, filter)
        return self.tree.get(name, filter)

    def get_all(self, name: str, filter=None) -> List[Optional[str]]:
        """All values of a column, or texts of all nodes with that tag."""
        if self.is_tabular:
            return self.tabular.get_column(name, filter=filter)
        return self.tree.get_all(name, filter)

    def get_headers(self) -> List[str]:
        return self.as_table().headers.names

    def row_count(self) -> int:
        return len(self.as_table().rows)

    # ==================== Tabular operations ====================

    def get_header(self, key):
        return self.tabular.get_header(key)

    def get_header_index(self, name: str) -> int:
        return self.tabular.get_header_index(name)

    def check_header(self, names: Sequence[str]) -> int:
        return self.tabular.check_header(names)

    def get_row(self, index: int, headers=None, filter=None) -> List[str]:
        return self.tabular.get_row(index, headers, filter)

    def get_rows(self, filter=None, headers=None) -> List[List[str]]:
        return self.tabular.get_rows(filter, headers)

    def get_rows_indexes(self, filter=None) -> List[int]:
        return self.tabular.get_rows_indexes(filter)

    def get_row_as_dict(self, index: int, filter=None) -> Dict[str, str]:
        return self.tabular.get_row_as_dict(index, filter)

    def get_column(self, key, row_indexes=None, filter=None) -> List[str]:
        return self.tabular.get_column(key, row_indexes, filter)

    def add_row(self, values: Sequence, index: Optional[int] = None) -> List[str]:
        return self.tabular.add_row(values, index)

    def add_rows(self, rows):
        self.tabular.add_rows(rows)

    def set_row(self, index: int, values: Sequence) -> List[str]:
        return self.tabular.set_row(index, values)

    def merge_row(self, index: int, values: Sequence) -> List[str]:
        return self.tabular.merge_row(index, values)

    def delete_row(self, target) -> int:
        return self.tabular.delete_row(target)

    def add_column(self, name: str, fill: str = "") -> str:
        return self.tabular.add_column(name, fill)

    def set_column(self, name: str, values: Sequence) -> str:
        return self.tabular.set_column(name, values)

    def put_metadata(self, name: str, value) -> str:
        return self.tabular.put_metadata(name, value)

    def create_prepared_row(self, *assignments: str) -> List[str]:
        return self.tabular.create_prepared_row(*assignments)

    def get_value(self, header, row: int = 0, filter=None) -> Optional[str]:
        return self.tabular.get_value(header, row, filter)

    def set_value(self, header, value, filter=None, all_occurrences: bool = False) -> int:
        return self.tabular.set_value(header, value, filter, all_occurrences)

    def get_values_as_list(self, header, filter=None) -> List[str]:
        return self.tabular.get_values_as_list(header, filter)

    def get_values_as_distinct_list(self, header, filter=None) -> List[str]:
        return self.tabular.get_values_as_distinct_list(header, filter)

    def get_values_as_float_list(self, header, filter=None) -> List[float]:
        return self.tabular.get_values_as_float_list(header, filter)

    def get_values_as_int_list(self, header, filter=None) -> List[int]:
        return self.tabular.get_values_as_int_list(header, filter)

    def get_max_len(self, header) -> int:
        return self.tabular.get_max_len(header)

    def append_container(self, other: 'DataContainer'):
        """
        Append the rows of another tabular container; columns are matched by
        name and re-ordered when needed.
        """
        self.tabular.append_model(other.tabular.model)

    # ==================== Tree operations ====================

    def resolve(self, path: str) -> List[TreeNode]:
        return self.tree.resolve(path)

    def get_attribute(self, path: str, attr_name: str) -> Optional[str]:
        return self.tree.get_attribute(path, attr_name)

    def get_attributes(self, path: str, attr_name: str) -> List[str]:
        return self.tree.get_attributes(path, attr_name)

    def set_attribute(self, path: str, attr_name: str, value, old_value: Optional[str] = None,
                      all_occurrences: bool = False) -> int:
        return self.tree.set_attribute(path, attr_name, value, old_value, all_occurrences)

    def add(self, path: str, name: str, value=None, attributes=None, no_duplicates: bool = False):
        return self.tree.add(path, name, value, attributes, no_duplicates)

    def set(self, path: str, value, all_occurrences: bool = False) -> int:
        return self.tree.set_value(path, value, all_occurrences)

    def delete(self, path: str, name: Optional[str] = None, attr_name: Optional[str] = None,
               attr_value: Optional[str] = None) -> int:
        return self.tree.delete(path, name, attr_name, attr_value)

    # ==================== Export ====================

    def _model_for(self, adapter: FormatAdapter) -> Model:
        """The model converted to the adapter's kind."""
        if adapter.is_tabular == self.is_tabular:
            return self.model
        if self.is_tabular:
            return _table_to_tree(self.model)
        return self.as_table()

    def serialize(self, format_name: Optional[str] = None) -> bytes:
        adapter = self.adapter if format_name is None else _make_adapter(format_name, encoding=self.adapter.encoding)
        return adapter.serialize(self._model_for(adapter))

    def as_string(self, format_name: Optional[str] = None) -> str:
        """
        Serialize to text, in the container's format or another one.

        Tables become a list of records in JSON/YAML/XML; trees are flattened
        for delimited text and properties.
        """
        adapter = self.adapter if format_name is None else _make_adapter(format_name, encoding=self.adapter.encoding)
        raw = adapter.serialize(self._model_for(adapter))
        return raw.decode(adapter.output_encoding)

    def export_container(self, path: Optional[Union[str, Path]] = None, format_name: Optional[str] = None,
                         backup: bool = False) -> Path:
        """
        Write the model to a file.

        Args:
            path: Target file (the source file when None)
            format_name: Target format (the container's format, or the one
                of the target extension when it differs)
            backup: Archive an existing target first (best effort)

        Returns:
            The written path

        Raises:
            DataIOError: If there is no target or it cannot be written
        """
        target = Path(path) if path else self.source_path
        if target is None:
            raise DataIOError("No target file: container has no backing file")
        adapter = self.adapter
        if format_name is not None:
            adapter = _make_adapter(format_name, encoding=self.adapter.encoding)
        elif path is not None:
            target_format = AdapterFactory.format_for_path(target)
            if target_format is not None and target_format != self.format_name:
                adapter = _make_adapter(target_format, target, encoding=self.adapter.encoding)
        if backup:
            backup_file(target)
        write_bytes(target, adapter.serialize(self._model_for(adapter)))
        logger.info(f"Exported {adapter.format_name} container to {target}")
        return target

    def save(self) -> Path:
        """Write the model back to its source file."""
        return self.export_container()

    def create_file(self) -> Path:
        """Write the current model to the source file if the file does not exist yet."""
        if self.source_path is None:
            raise DataIOError("No target file: container has no backing file")
        if not self.source_path.exists():
            self.export_container()
        return self.source_path

    def to_dataframe(self, path: Optional[str] = None):
        """DataFrame of the data (trees are flattened first)."""
        return model_to_dataframe(self.as_table(path))

    def __repr__(self) -> str:
        kind = "table" if self.is_tabular else "tree"
        return f"DataContainer(format={self.format_name!r}, kind={kind}, source={self.source_path})"


def _table_to_tree(model: TabularModel) -> TreeModel:
    """Tables as a list of records (one object per row)."""
    names = model.headers.names
    records = [dict(zip(names, row)) for row in model.rows]
    return value_to_tree(records)

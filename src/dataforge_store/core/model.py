"""
Canonical Model - The in-memory shapes every format adapter converges to.

A TabularModel holds ordered headers and rows of equal width. A TreeModel
holds a single root TreeNode; parents own their children and children keep a
weak reference back to their parent for upward navigation only.
"""

import logging
import weakref
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from .headers import HeaderIndex
from ..constants import ANONYMOUS_ROOT, DEFAULT_COLUMN_DELIMITER
from ..exceptions import ColumnCountError

logger = logging.getLogger(__name__)


# ==================== Tabular ====================

@dataclass
class TabularModel:
    """
    Ordered headers plus ordered rows.

    Every row always has exactly one cell per header; empty cells are "".

    Attributes:
        headers: Header index
        rows: Row values aligned with headers
        delimiter: Column delimiter used by delimited-text sources
        metadata: Metadata columns (name -> value) filled in every new row
        preamble: Delimited-text lines found before the header row
    """
    headers: HeaderIndex = field(default_factory=HeaderIndex)
    rows: List[List[str]] = field(default_factory=list)
    delimiter: str = DEFAULT_COLUMN_DELIMITER
    metadata: Dict[str, str] = field(default_factory=dict)
    preamble: List[List[str]] = field(default_factory=list)

    @classmethod
    def from_rows(cls, headers: Iterable[str], rows: Iterable[Sequence] = (),
                  delimiter: str = DEFAULT_COLUMN_DELIMITER) -> 'TabularModel':
        model = cls(headers=HeaderIndex(headers), delimiter=delimiter)
        for row in rows:
            model.append_row(row)
        return model

    @property
    def width(self) -> int:
        return len(self.headers)

    def normalize_row(self, values: Sequence) -> List[str]:
        """
        Convert values to a row of the model's width.

        Narrower input is right-padded with empty cells.

        Raises:
            ColumnCountError: If there are more values than headers
        """
        row = [cell_text(v) for v in values]
        if len(row) > self.width:
            raise ColumnCountError(self.width, len(row))
        row.extend([""] * (self.width - len(row)))
        return row

    def append_row(self, values: Sequence, index: Optional[int] = None) -> List[str]:
        row = self.normalize_row(values)
        if index is None:
            self.rows.append(row)
        else:
            self.rows.insert(index, row)
        return row

    def add_header(self, name: str, fill: str = "") -> str:
        """Append a column, filling existing rows with `fill`. Returns the unique name."""
        header = self.headers.add(name)
        for row in self.rows:
            row.append(fill)
        return header.name

    def __eq__(self, other) -> bool:
        if not isinstance(other, TabularModel):
            return NotImplemented
        return self.headers.names == other.headers.names and self.rows == other.rows

    def __len__(self) -> int:
        return len(self.rows)


def cell_text(value) -> str:
    """Render a value as cell text; None becomes the empty cell."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# ==================== Tree ====================

class TreeNode:
    """
    A tree element: tag, optional text, ordered attributes and children.

    scalar_type records the source type of a JSON/YAML scalar
    ("str", "int", "float", "bool", "null") so it can be written back
    unchanged; it is None for XML nodes and containers.
    array_item marks nodes that came from a sequence.
    """

    __slots__ = ('tag', 'text', 'attributes', '_children', '_parent', 'scalar_type',
                 'array_item', '__weakref__')

    def __init__(self, tag: str, text: Optional[str] = None,
                 attributes: Optional[Dict[str, str]] = None,
                 children: Optional[Iterable['TreeNode']] = None,
                 scalar_type: Optional[str] = None, array_item: bool = False):
        self.tag = tag
        self.text = text
        self.attributes: Dict[str, str] = dict(attributes or {})
        self._children: List[TreeNode] = []
        self._parent = None
        self.scalar_type = scalar_type
        self.array_item = array_item
        for child in children or []:
            self.append(child)

    # ==================== Navigation ====================

    @property
    def parent(self) -> Optional['TreeNode']:
        return self._parent() if self._parent is not None else None

    @property
    def children(self) -> List['TreeNode']:
        """Children in document order (read-only copy)."""
        return list(self._children)

    def child_count(self) -> int:
        return len(self._children)

    def has_children(self) -> bool:
        return bool(self._children)

    def index_in_parent(self) -> int:
        parent = self.parent
        if parent is None:
            return -1
        for i, child in enumerate(parent._children):
            if child is self:
                return i
        return -1

    def ancestors(self) -> List['TreeNode']:
        """Ancestors from the root down to the direct parent."""
        chain = []
        node = self.parent
        while node is not None:
            chain.append(node)
            node = node.parent
        chain.reverse()
        return chain

    @property
    def path(self) -> str:
        """Absolute tag path, e.g. /Themes/theme. An anonymous root contributes nothing."""
        tags = [n.tag for n in self.ancestors() + [self] if not (n.parent is None and n.tag == ANONYMOUS_ROOT)]
        return "/" + "/".join(tags)

    def iter(self) -> Iterator['TreeNode']:
        """Depth-first, document-order iteration including self."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node._children))

    def descendants(self) -> Iterator['TreeNode']:
        it = self.iter()
        next(it)
        return it

    def find_first(self, tag: str) -> Optional['TreeNode']:
        """First descendant with the given tag in document order."""
        for node in self.descendants():
            if node.tag == tag:
                return node
        return None

    def find_all(self, tag: str) -> List['TreeNode']:
        return [node for node in self.descendants() if node.tag == tag]

    def children_by_tag(self, tag: str) -> List['TreeNode']:
        return [child for child in self._children if child.tag == tag]

    # ==================== Mutation ====================

    def append(self, child: 'TreeNode') -> 'TreeNode':
        return self.insert(len(self._children), child)

    def insert(self, index: int, child: 'TreeNode') -> 'TreeNode':
        """Insert a child, detaching it from any previous parent."""
        previous = child.parent
        if previous is not None:
            previous.remove(child)
        child._parent = weakref.ref(self)
        self._children.insert(index, child)
        return child

    def remove(self, child: 'TreeNode'):
        for i, existing in enumerate(self._children):
            if existing is child:
                del self._children[i]
                child._parent = None
                return
        raise ValueError(f"{child!r} is not a child of {self!r}")

    def detach(self):
        parent = self.parent
        if parent is not None:
            parent.remove(self)

    def clear_children(self):
        for child in self._children:
            child._parent = None
        self._children = []

    def set_text(self, value: Optional[str]):
        """
        Set the text, keeping the scalar type when the new value still fits it.
        """
        if value is not None and not isinstance(value, str):
            value = cell_text(value)
        if self.scalar_type is not None:
            self.scalar_type = _retype(self.scalar_type, value)
        self.text = value

    def is_leaf(self) -> bool:
        return not self._children

    # ==================== Comparison ====================

    def signature(self) -> tuple:
        """Structural value of the subtree, used for model equality."""
        return (
            self.tag,
            self.text,
            tuple(self.attributes.items()),
            self.scalar_type,
            self.array_item,
            tuple(child.signature() for child in self._children),
        )

    def copy(self) -> 'TreeNode':
        """Deep copy without parent."""
        return TreeNode(
            self.tag, self.text, self.attributes,
            [child.copy() for child in self._children],
            self.scalar_type, self.array_item,
        )

    def __repr__(self) -> str:
        return f"TreeNode(tag={self.tag!r}, text={self.text!r}, attributes={self.attributes!r}, children={len(self._children)})"


def _retype(scalar_type: str, value: Optional[str]) -> str:
    if value is None:
        return "null"
    if scalar_type == "int":
        try:
            int(value)
            return "int"
        except ValueError:
            return "str"
    if scalar_type == "float":
        try:
            float(value)
            return "float"
        except ValueError:
            return "str"
    if scalar_type == "bool":
        return "bool" if value.lower() in ("true", "false") else "str"
    if scalar_type == "null":
        return "str"
    return scalar_type


@dataclass(eq=False)
class TreeModel:
    """
    A tree document.

    Attributes:
        root: The single root node (tag "" for JSON/YAML documents)
        encoding: Encoding declared by an XML prolog, if any
    """
    root: TreeNode = field(default_factory=lambda: TreeNode(ANONYMOUS_ROOT))
    encoding: Optional[str] = None

    @property
    def is_anonymous(self) -> bool:
        return self.root.tag == ANONYMOUS_ROOT

    def node_count(self) -> int:
        return sum(1 for _ in self.root.iter())

    def __eq__(self, other) -> bool:
        if not isinstance(other, TreeModel):
            return NotImplemented
        return self.root.signature() == other.root.signature()

    def __ne__(self, other) -> bool:
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

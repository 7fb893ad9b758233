"""
Tree View - Node lookup, mutation and flattening on a TreeModel.

Filters applied to tree nodes know two kinds of rules:
- standard rules, looked up on the node itself: its text when the header is
  the node's tag, then its attributes ("@name" or "name"), then the text of a
  child or sibling element with that tag;
- implicit rules on the synthetic "XPath" header, matched against the
  location of the node's parent. With EQUALS the value is resolved as a
  path and the parent must be one of the resolved nodes; other operators
  compare the parent's absolute path as text.
Both kinds are evaluated separately and combined with AND.
"""

import logging
from typing import Dict, List, Optional, Tuple

from . import paths
from .headers import HeaderIndex
from .model import TabularModel, TreeModel, TreeNode, cell_text
from ..filtering.operators import Operator
from ..constants import IMPLICIT_XPATH, TEXT_KEY, DUPLICATE_SUFFIX_SEPARATOR, DUPLICATE_SUFFIX_START

logger = logging.getLogger(__name__)

IMPLICIT_HEADERS = (IMPLICIT_XPATH,)


def is_implicit_header(header: str) -> bool:
    return (header or "").lower() in (h.lower() for h in IMPLICIT_HEADERS)


class TreeView:
    """
    Operations on a TreeModel.

    Args:
        model: The model to operate on (shared, not copied)
    """

    def __init__(self, model: TreeModel):
        self.model = model

    @property
    def root(self) -> TreeNode:
        return self.model.root

    # ==================== Filters ====================

    def _standard_lookup(self, node: TreeNode, header: str) -> Optional[str]:
        if header == node.tag:
            return node.text
        attr_name = header[1:] if header.startswith("@") else header
        if attr_name in node.attributes:
            return node.attributes[attr_name]
        for child in node.children:
            if child.tag == header:
                return child.text
        parent = node.parent
        if parent is not None:
            for sibling in parent.children:
                if sibling is not node and sibling.tag == header:
                    return sibling.text
        return None

    def _check_implicit(self, node: TreeNode, rule) -> bool:
        parent = node.parent
        if parent is None:
            return False
        if rule.operator is Operator.EQUALS and not rule.rule_format.is_regex:
            if rule.is_wildcard:
                return True
            for value in rule.values:
                if any(candidate is parent for candidate in paths.resolve(self.root, value)):
                    return True
            return False
        return rule.check_value(parent.path)

    def node_matches(self, node: TreeNode, filter) -> bool:
        """Check a node against a filter (standard AND implicit rules)."""
        if filter is None or filter.is_empty():
            return True
        implicit, standard = filter.partition(lambda rule: is_implicit_header(rule.header))
        if not standard.evaluate(lambda rule: rule.check_value(self._standard_lookup(node, rule.header))):
            return False
        return implicit.evaluate(lambda rule: self._check_implicit(node, rule))

    # ==================== Lookup by tag ====================

    def get_nodes(self, name: str, filter=None) -> List[TreeNode]:
        """All descendants with the given tag in document order, filtered."""
        return [node for node in self.root.descendants()
                if node.tag == name and self.node_matches(node, filter)]

    def get(self, name: str, filter=None) -> Optional[str]:
        """
        Text of the first descendant with the given tag (depth-first).

        Returns:
            The text, or None if no node matches
        """
        for node in self.root.descendants():
            if node.tag == name and self.node_matches(node, filter):
                return node.text
        return None

    def get_all(self, name: str, filter=None) -> List[Optional[str]]:
        return [node.text for node in self.get_nodes(name, filter)]

    # ==================== Lookup by path ====================

    def resolve(self, path: str) -> List[TreeNode]:
        return paths.resolve(self.root, path)

    def get_value(self, path: str, index: int = 0) -> Optional[str]:
        nodes = self.resolve(path)
        if 0 <= index < len(nodes):
            return nodes[index].text
        return None

    def get_values(self, path: str, filter=None) -> List[Optional[str]]:
        return [node.text for node in self.resolve(path) if self.node_matches(node, filter)]

    def get_attribute(self, path: str, attr_name: str) -> Optional[str]:
        """Attribute of the first node addressed by the path, None if absent."""
        for node in self.resolve(path):
            if attr_name in node.attributes:
                return node.attributes[attr_name]
        return None

    def get_attributes(self, path: str, attr_name: str) -> List[str]:
        return [node.attributes[attr_name] for node in self.resolve(path) if attr_name in node.attributes]

    # ==================== Mutation ====================

    def set_value(self, path: str, value, all_occurrences: bool = False) -> int:
        """
        Set the text of the node(s) addressed by the path, creating the path
        when it does not exist.

        Returns:
            Number of updated nodes
        """
        nodes = self.resolve(path)
        if not nodes:
            nodes = [paths.ensure_path(self.root, path)]
        if not all_occurrences:
            nodes = nodes[:1]
        for node in nodes:
            node.set_text(None if value is None else cell_text(value))
        return len(nodes)

    def set_values(self, path: str, old_value: str, new_value, all_occurrences: bool = False) -> int:
        """Replace the text of nodes whose current text equals old_value."""
        count = 0
        for node in self.resolve(path):
            if node.text == old_value:
                node.set_text(cell_text(new_value))
                count += 1
                if not all_occurrences:
                    break
        return count

    def add(self, parent_path: str, name: str, value=None,
            attributes: Optional[Dict[str, str]] = None, no_duplicates: bool = False) -> Optional[TreeNode]:
        """
        Append a child element under the first node addressed by parent_path.

        The parent path is created when missing.

        Args:
            parent_path: Location of the parent
            name: Tag of the new node
            value: Optional text
            attributes: Optional attributes
            no_duplicates: Skip when an equal child (tag, text and attributes) exists

        Returns:
            The new node, or None when skipped as duplicate
        """
        parents = self.resolve(parent_path)
        parent = parents[0] if parents else paths.ensure_path(self.root, parent_path)
        text = None if value is None else cell_text(value)
        attributes = {k: cell_text(v) for k, v in (attributes or {}).items()}
        if no_duplicates:
            for child in parent.children:
                if child.tag == name and child.text == text and child.attributes == attributes:
                    logger.debug(f"Skipped duplicate <{name}> under {parent.path}")
                    return None
        siblings = parent.children_by_tag(name)
        node = TreeNode(name, text, attributes)
        if siblings and any(s.array_item for s in siblings):
            node.array_item = True
        return parent.append(node)

    def set_attribute(self, path: str, attr_name: str, value, old_value: Optional[str] = None,
                      all_occurrences: bool = False) -> int:
        """
        Set an attribute on the node(s) addressed by the path.

        With old_value only nodes whose attribute currently equals it are
        changed; otherwise a missing path is created.

        Returns:
            Number of updated nodes
        """
        nodes = self.resolve(path)
        if old_value is not None:
            nodes = [n for n in nodes if n.attributes.get(attr_name) == old_value]
        elif not nodes:
            nodes = [paths.ensure_path(self.root, path)]
        if not all_occurrences:
            nodes = nodes[:1]
        for node in nodes:
            node.attributes[attr_name] = cell_text(value)
        return len(nodes)

    def delete(self, path: str, name: Optional[str] = None,
               attr_name: Optional[str] = None, attr_value: Optional[str] = None) -> int:
        """
        Delete nodes.

        Args:
            path: Location of the nodes (or of their parent when name is given)
            name: Optional tag of the children of path to delete
            attr_name: Only delete nodes having this attribute...
            attr_value: ...with this value (any value when None)

        Returns:
            Number of deleted nodes
        """
        nodes = self.resolve(path)
        if name is not None:
            nodes = [child for node in nodes for child in node.children if child.tag == name]
        if attr_name is not None:
            nodes = [n for n in nodes if attr_name in n.attributes
                     and (attr_value is None or n.attributes[attr_name] == attr_value)]
        count = 0
        for node in nodes:
            if node.parent is None:
                node.clear_children()
                node.text = None
                node.attributes.clear()
            else:
                node.detach()
            count += 1
        return count

    def delete_nodes(self, name: str, filter=None) -> int:
        """Delete every descendant with the given tag matching the filter."""
        nodes = self.get_nodes(name, filter)
        for node in nodes:
            node.detach()
        return len(nodes)

    # ==================== Flattening ====================

    def find_record_nodes(self) -> List[TreeNode]:
        """
        Locate the nodes acting as rows: the first (breadth-first) group of
        repeated or sequence siblings; the root's children otherwise.
        """
        queue = [self.root]
        while queue:
            node = queue.pop(0)
            children = node.children
            tags = [c.tag for c in children]
            for tag in dict.fromkeys(tags):
                group = [c for c in children if c.tag == tag]
                if len(group) > 1 or any(c.array_item for c in group):
                    return group
            queue.extend(children)
        if self.root.is_leaf():
            return [self.root] if (self.root.text is not None or self.root.attributes) else []
        return [self.root]

    @staticmethod
    def _record_cells(record: TreeNode) -> List[Tuple[str, str]]:
        cells: List[Tuple[str, str]] = []
        if record.is_leaf():
            cells.append((TEXT_KEY, cell_text(record.text)))
        for attr_name, attr_value in record.attributes.items():
            cells.append((f"@{attr_name}", attr_value))

        def walk(node: TreeNode, prefix: str):
            for child in node.children:
                name = f"{prefix}{child.tag}"
                for attr_name, attr_value in child.attributes.items():
                    cells.append((f"{name}/@{attr_name}", attr_value))
                if child.is_leaf():
                    cells.append((name, cell_text(child.text)))
                else:
                    walk(child, f"{name}/")

        walk(record, "")
        return cells

    def flatten(self, path: Optional[str] = None, filter=None) -> TabularModel:
        """
        Flattened tabular view: each record node is a row and its leaf
        descendants (relative path) and attributes ("@name") are columns.

        Args:
            path: Location of the record nodes (detected when None)
            filter: Optional node filter applied to the records

        Returns:
            A new TabularModel (changes to it do not affect the tree)
        """
        records = self.resolve(path) if path else self.find_record_nodes()
        records = [r for r in records if self.node_matches(r, filter)]

        rows: List[Dict[str, str]] = []
        order: Dict[str, None] = {}
        for record in records:
            row: Dict[str, str] = {}
            seen: Dict[str, int] = {}
            for name, value in self._record_cells(record):
                count = seen.get(name, 0)
                seen[name] = count + 1
                if count:
                    name = f"{name}{DUPLICATE_SUFFIX_SEPARATOR}{count + DUPLICATE_SUFFIX_START - 1}"
                row[name] = value
                order.setdefault(name, None)
            rows.append(row)

        model = TabularModel(headers=HeaderIndex(order.keys()))
        for row in rows:
            model.append_row([row.get(name, "") for name in model.headers.names])
        return model

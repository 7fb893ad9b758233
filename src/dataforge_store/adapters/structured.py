"""
Structured Values - Conversion between JSON/YAML values and tree nodes.

Mapping rules:
- the document root is an anonymous node (tag "");
- an object key becomes a child node with that tag;
- a list under a key becomes repeated sibling nodes with that tag, flagged
  as array items; a list anywhere else becomes a node of scalar type
  "array" holding "item" children;
- keys starting with "@" are attributes and "#text" is the node text, so
  documents converted from XML keep their attributes;
- scalars keep their type in TreeNode.scalar_type.
"""

import datetime
import logging
from typing import Any, Dict, Optional

from ..core.model import TreeModel, TreeNode
from ..constants import ANONYMOUS_ROOT, ARRAY_ITEM_TAG

logger = logging.getLogger(__name__)

ATTRIBUTE_PREFIX = "@"
TEXT_FIELD = "#text"
ARRAY = "array"
OBJECT = "object"


# ==================== Values -> Tree ====================

def _scalar(value: Any):
    """Return (text, scalar_type) for a scalar value."""
    if value is None:
        return None, "null"
    if isinstance(value, bool):
        return ("true" if value else "false"), "bool"
    if isinstance(value, int):
        return str(value), "int"
    if isinstance(value, float):
        return repr(value), "float"
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat(), "str"
    return str(value), "str"


def _fill(node: TreeNode, value: Any):
    if isinstance(value, dict):
        if not value:
            node.scalar_type = OBJECT
        for key, item in value.items():
            key = str(key)
            if key.startswith(ATTRIBUTE_PREFIX) and not isinstance(item, (dict, list)):
                node.attributes[key[1:]] = _scalar(item)[0] or ""
            elif key == TEXT_FIELD and not isinstance(item, (dict, list)):
                node.text, node.scalar_type = _scalar(item)
            elif isinstance(item, list):
                if not item:
                    node.append(TreeNode(key, scalar_type=ARRAY))
                for element in item:
                    child = node.append(TreeNode(key, array_item=True))
                    _fill(child, element)
            else:
                child = node.append(TreeNode(key))
                _fill(child, item)
    elif isinstance(value, list):
        node.scalar_type = ARRAY
        for element in value:
            child = node.append(TreeNode(ARRAY_ITEM_TAG, array_item=True))
            _fill(child, element)
    else:
        node.text, node.scalar_type = _scalar(value)


def value_to_tree(value: Any) -> TreeModel:
    """Build a tree from a parsed JSON/YAML value."""
    root = TreeNode(ANONYMOUS_ROOT)
    _fill(root, value)
    return TreeModel(root=root)


# ==================== Tree -> Values ====================

def _leaf_value(node: TreeNode) -> Any:
    text = node.text
    kind = node.scalar_type
    if kind == OBJECT:
        return {}
    if kind == ARRAY:
        return []
    if kind == "null" or (text is None and kind is None):
        return None
    if kind == "bool":
        return text.strip().lower() == "true"
    if kind == "int":
        try:
            return int(text)
        except ValueError:
            return text
    if kind == "float":
        try:
            return float(text)
        except ValueError:
            return text
    return text


def node_to_value(node: TreeNode) -> Any:
    """Convert a node (and its subtree) back to a JSON/YAML value."""
    if node.scalar_type == ARRAY:
        return [node_to_value(child) for child in node.children]
    if not node.has_children() and not node.attributes:
        return _leaf_value(node)

    result: Dict[str, Any] = {}
    for name, value in node.attributes.items():
        result[f"{ATTRIBUTE_PREFIX}{name}"] = value
    if node.text is not None:
        result[TEXT_FIELD] = _leaf_value(node)
    repeated = _repeated_keys(node)
    for child in node.children:
        value = node_to_value(child)
        if child.array_item or child.tag in repeated:
            # Repeated plain siblings (e.g. from XML) are written as a list
            result.setdefault(child.tag, []).append(value)
        else:
            result[child.tag] = value
    return result


def _repeated_keys(node: TreeNode):
    seen = set()
    repeated = set()
    for child in node.children:
        if child.tag in seen:
            repeated.add(child.tag)
        seen.add(child.tag)
    return repeated


def tree_to_value(model: TreeModel) -> Optional[Any]:
    """Convert a tree model to a JSON/YAML value."""
    root = model.root
    if root.tag == ANONYMOUS_ROOT:
        return node_to_value(root)
    return {root.tag: node_to_value(root)}

"""
Paths - Parser and resolver for tree path expressions.

Supported syntax (no expression functions):
    /Root/element              absolute path, first segment names the root
    element/child              relative to the root
    element[@name='X']         attribute equality predicate (several allowed)
    element[2]                 1-based position among matching siblings
    people/0/name              numeric segment: 0-based index into the matches so far
    *                          any tag

Parsed expressions are kept in an LRU cache since dispatch fields resolve the
same handful of paths over and over.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from cachetools import LRUCache, cached

from .model import TreeNode
from ..constants import PATH_CACHE_MAXSIZE, ANONYMOUS_ROOT
from ..exceptions import TemplateError

logger = logging.getLogger(__name__)

_PREDICATE_RE = re.compile(r"""\[\s*@([^=\]\s]+)\s*=\s*(?:'([^']*)'|"([^"]*)")\s*\]""")
_POSITION_RE = re.compile(r"\[\s*(\d+)\s*\]")


def quote_literal(value: str) -> str:
    """
    Quote a predicate value, with double quotes when it holds a single quote.

    Raises:
        TemplateError: If the value holds both quote characters
    """
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    raise TemplateError(f"Predicate value cannot hold both quote characters: {value}")


@dataclass(frozen=True)
class PathSegment:
    """
    One step of a path expression.

    Attributes:
        tag: Element tag ("*" for any), empty for index segments
        predicates: (attribute, value) pairs that must all be equal
        position: 1-based position among matches from [n], or None
        index: 0-based index into the current match set for numeric segments
    """
    tag: str
    predicates: Tuple[Tuple[str, str], ...] = ()
    position: Optional[int] = None
    index: Optional[int] = None

    @property
    def is_index(self) -> bool:
        return self.index is not None

    def matches(self, node: TreeNode) -> bool:
        if self.tag != "*" and node.tag != self.tag:
            return False
        for attr_name, attr_value in self.predicates:
            if node.attributes.get(attr_name) != attr_value:
                return False
        return True

    def __str__(self) -> str:
        if self.is_index:
            return str(self.index)
        text = self.tag
        for attr_name, attr_value in self.predicates:
            text += f"[@{attr_name}={quote_literal(attr_value)}]"
        if self.position is not None:
            text += f"[{self.position}]"
        return text


@dataclass(frozen=True)
class PathExpression:
    absolute: bool
    segments: Tuple[PathSegment, ...]

    def __str__(self) -> str:
        body = "/".join(str(s) for s in self.segments)
        return ("/" + body) if self.absolute else body


def split_segments(expression: str) -> List[str]:
    """
    Split a path on '/' outside of brackets and quotes.

    Raises:
        TemplateError: On unbalanced brackets or quotes
    """
    parts = []
    current = []
    depth = 0
    quote = None
    for char in expression:
        if quote:
            current.append(char)
            if char == quote:
                quote = None
            continue
        if char in ("'", '"') and depth > 0:
            quote = char
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth < 0:
                raise TemplateError(f"Unbalanced ']' in path: {expression}")
        elif char == "/" and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    if depth != 0 or quote:
        raise TemplateError(f"Unterminated predicate in path: {expression}")
    parts.append("".join(current))
    return parts


def _parse_segment(raw: str, expression: str) -> PathSegment:
    raw = raw.strip()
    if raw.isdigit():
        return PathSegment(tag="", index=int(raw))

    bracket = raw.find("[")
    tag = raw if bracket < 0 else raw[:bracket]
    tail = "" if bracket < 0 else raw[bracket:]
    tag = tag.strip()
    if not tag:
        raise TemplateError(f"Empty element name in path: {expression}")

    predicates = []
    position = None
    while tail:
        match = _PREDICATE_RE.match(tail)
        if match:
            value = match.group(2) if match.group(2) is not None else match.group(3)
            predicates.append((match.group(1), value))
            tail = tail[match.end():]
            continue
        match = _POSITION_RE.match(tail)
        if match:
            position = int(match.group(1))
            if position < 1:
                raise TemplateError(f"Positions are 1-based: {expression}")
            tail = tail[match.end():]
            continue
        raise TemplateError(f"Unsupported predicate '{tail}' in path: {expression}")

    return PathSegment(tag=tag, predicates=tuple(predicates), position=position)


@cached(cache=LRUCache(maxsize=PATH_CACHE_MAXSIZE))
def parse_path(expression: str) -> PathExpression:
    """
    Parse a path expression.

    Args:
        expression: Path such as "/Themes/theme[@name='Dark']"

    Returns:
        Parsed PathExpression (cached)

    Raises:
        TemplateError: If the expression is malformed
    """
    expression = (expression or "").strip()
    absolute = expression.startswith("/")
    body = expression.strip("/")
    if not body:
        return PathExpression(absolute=absolute, segments=())
    segments = tuple(_parse_segment(raw, expression) for raw in split_segments(body))
    return PathExpression(absolute=absolute, segments=segments)


def _step(nodes: List[TreeNode], segment: PathSegment) -> List[TreeNode]:
    if segment.is_index:
        return [nodes[segment.index]] if segment.index < len(nodes) else []
    result = []
    for node in nodes:
        matches = [child for child in node.children if segment.matches(child)]
        if segment.position is not None:
            matches = matches[segment.position - 1:segment.position]
        result.extend(matches)
    return result


def _starting_point(root: TreeNode, path: PathExpression):
    """Return (start nodes, remaining segments) for a parsed path."""
    segments = list(path.segments)
    if root.tag == ANONYMOUS_ROOT or not segments:
        return [root], segments

    first = segments[0]
    consumes_root = not first.is_index and first.matches(root) and first.position in (None, 1)
    if path.absolute:
        if consumes_root:
            return [root], segments[1:]
        return [], segments
    if consumes_root and not any(first.matches(child) for child in root.children):
        return [root], segments[1:]
    return [root], segments


def resolve(root: TreeNode, expression: str) -> List[TreeNode]:
    """
    Resolve a path expression against a tree.

    Args:
        root: Root node of the document
        expression: Path expression

    Returns:
        Matching nodes in document order (empty when nothing matches)
    """
    path = parse_path(expression)
    nodes, segments = _starting_point(root, path)
    for position, segment in enumerate(segments):
        if not nodes:
            break
        if position == 0 and segment.is_index:
            # Leading index selects among the children of the start node
            nodes = [child for node in nodes for child in node.children]
        nodes = _step(nodes, segment)
    return nodes


def resolve_first(root: TreeNode, expression: str) -> Optional[TreeNode]:
    nodes = resolve(root, expression)
    return nodes[0] if nodes else None


def ensure_path(root: TreeNode, expression: str) -> TreeNode:
    """
    Resolve a path, creating missing nodes along the way.

    Created nodes carry the attributes named by the segment's predicates.
    A numeric segment past the end of the matches creates a new sibling
    with the tag of the preceding segment.

    Args:
        root: Root node of the document
        expression: Path expression

    Returns:
        The first node addressed by the path

    Raises:
        TemplateError: If the path starts outside of the document or
            a missing node cannot be created from the expression
    """
    path = parse_path(expression)
    nodes, segments = _starting_point(root, path)
    if not nodes:
        raise TemplateError(f"Path {expression} does not start at root <{root.tag}>")

    current = nodes[0]
    previous: Optional[PathSegment] = None
    matched = current.children if segments and segments[0].is_index else [current]
    for segment in segments:
        if segment.is_index:
            if segment.index < len(matched):
                current = matched[segment.index]
            else:
                if previous is None or previous.is_index:
                    raise TemplateError(f"Cannot create index segment without element name: {expression}")
                parent = current.parent or current
                for existing in matched:
                    existing.array_item = True
                while len(matched) <= segment.index:
                    matched.append(parent.append(_new_node(previous, expression, array_item=True)))
                current = matched[segment.index]
            matched = [current]
        else:
            matched = _step([current], segment)
            if not matched:
                matched = [current.append(_new_node(segment, expression))]
            current = matched[0]
        previous = segment
    return current


def _new_node(segment: PathSegment, expression: str, array_item: bool = False) -> TreeNode:
    if segment.tag == "*":
        raise TemplateError(f"Cannot create a node for wildcard segment: {expression}")
    return TreeNode(segment.tag, attributes=dict(segment.predicates), array_item=array_item)

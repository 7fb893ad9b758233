"""
XML Adapter - Elements and attributes mapped to tree nodes.

Whitespace-only text is treated as absent; comments, processing
instructions and tail text are not kept. The encoding named in the XML
declaration is kept on the model and reused when writing.
"""

import logging
import re
import xml.etree.ElementTree as ET
from typing import Optional

from .base import FormatAdapter, ModelKind, Source
from ..core.model import TreeModel, TreeNode
from ..constants import ANONYMOUS_ROOT, ARRAY_ITEM_TAG
from ..exceptions import EncodingError, ParseError, UnsupportedOperationError

logger = logging.getLogger(__name__)

_DECLARATION_RE = re.compile(r"""^\s*<\?xml[^>]*?encoding\s*=\s*["']([A-Za-z0-9._-]+)["']""")
DEFAULT_ROOT_TAG = "root"


class XmlAdapter(FormatAdapter):
    """Adapter for XML documents."""

    format_name = "xml"
    extensions = (".xml",)
    model_kind = ModelKind.TREE

    def __init__(self, encoding: Optional[str] = None, indent: str = "    "):
        super().__init__(encoding)
        self.indent = indent

    # ==================== Parsing ====================

    @staticmethod
    def declared_encoding(head: str) -> Optional[str]:
        match = _DECLARATION_RE.match(head)
        return match.group(1) if match else None

    def parse(self, source: Source) -> TreeModel:
        if isinstance(source, bytes):
            head = source[:200].decode("ascii", errors="ignore")
            declared = self.declared_encoding(head)
            if declared is None or self.encoding is not None:
                # No declaration: decode ourselves so detection and strict
                # explicit encodings behave like the other adapters
                text = self.decode(source)
                data = _strip_declaration(text)
            else:
                data = source
        else:
            declared = self.declared_encoding(source[:200])
            data = _strip_declaration(source)

        try:
            element = ET.fromstring(data)
        except ET.ParseError as e:
            line = e.position[0] if getattr(e, "position", None) else None
            raise ParseError(str(e), line=line) from e
        except (LookupError, UnicodeDecodeError) as e:
            raise EncodingError(f"Cannot decode XML content: {e}") from e

        model = TreeModel(root=self._to_node(element), encoding=declared)
        logger.info(f"Parsed XML: root <{model.root.tag}>, {model.node_count()} nodes")
        return model

    def _to_node(self, element: ET.Element) -> TreeNode:
        text = element.text
        if text is not None and text.strip() == "":
            text = None
        node = TreeNode(element.tag, text, dict(element.attrib))
        for child in element:
            if not isinstance(child.tag, str):
                continue
            node.append(self._to_node(child))
        return node

    # ==================== Serialization ====================

    def _to_element(self, node: TreeNode, tag: Optional[str] = None) -> ET.Element:
        element = ET.Element(tag or node.tag or ARRAY_ITEM_TAG, dict(node.attributes))
        element.text = node.text
        for child in node.children:
            element.append(self._to_element(child))
        return element

    def serialize(self, model: TreeModel) -> bytes:
        if not isinstance(model, TreeModel):
            raise UnsupportedOperationError("XML can only hold tree models")
        root_tag = model.root.tag if model.root.tag != ANONYMOUS_ROOT else DEFAULT_ROOT_TAG
        element = self._to_element(model.root, root_tag)
        if self.indent:
            ET.indent(element, space=self.indent)

        from ..config.store_settings import get_store_settings
        declaration = get_store_settings().get('xml_declaration', True)
        encoding = self.encoding or model.encoding or self.output_encoding
        try:
            body = ET.tostring(element, encoding="unicode")
        except ValueError as e:
            raise UnsupportedOperationError(f"Cannot serialize tree as XML: {e}") from e
        header = f'<?xml version="1.0" encoding="{encoding}"?>\n' if declaration else ""
        try:
            return (header + body + "\n").encode(encoding, errors="xmlcharrefreplace")
        except LookupError as e:
            raise EncodingError(f"Unknown encoding {encoding}") from e


def _strip_declaration(text: str) -> str:
    if text.lstrip().startswith("<?xml"):
        end = text.find("?>")
        if end >= 0:
            return text[end + 2:]
    return text

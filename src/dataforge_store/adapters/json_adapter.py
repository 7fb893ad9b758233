"""
JSON Adapter - Objects and arrays mapped to tree nodes.
"""

import json
import logging
from typing import Optional

from .base import FormatAdapter, ModelKind, Source
from .structured import tree_to_value, value_to_tree
from ..core.model import TreeModel
from ..exceptions import ParseError, UnsupportedOperationError

logger = logging.getLogger(__name__)


class JsonAdapter(FormatAdapter):
    """Adapter for JSON documents."""

    format_name = "json"
    extensions = (".json",)
    model_kind = ModelKind.TREE

    def __init__(self, encoding: Optional[str] = None, indent: Optional[int] = None):
        super().__init__(encoding)
        self.indent = indent

    def parse(self, source: Source) -> TreeModel:
        text = self.decode(source)
        if not text.strip():
            return value_to_tree(None)
        try:
            value = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(e.msg, line=e.lineno) from e
        model = value_to_tree(value)
        logger.info(f"Parsed JSON: {model.node_count()} nodes")
        return model

    def serialize(self, model: TreeModel) -> bytes:
        if not isinstance(model, TreeModel):
            raise UnsupportedOperationError("JSON adapter serializes tree models; use DataContainer.as_string('json') for tables")
        indent = self.indent
        if indent is None:
            from ..config.store_settings import get_store_settings
            indent = get_store_settings().get('json_indent', 2)
        text = json.dumps(tree_to_value(model), indent=indent, ensure_ascii=False)
        return self.encode(text + "\n")

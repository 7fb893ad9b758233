"""
YAML Adapter - Block mappings and sequences mapped to tree nodes (PyYAML).
"""

import logging

import yaml

from .base import FormatAdapter, ModelKind, Source
from .structured import tree_to_value, value_to_tree
from ..core.model import TreeModel
from ..exceptions import ParseError, UnsupportedOperationError

logger = logging.getLogger(__name__)


class YamlAdapter(FormatAdapter):
    """Adapter for YAML documents (single document, safe loader)."""

    format_name = "yaml"
    extensions = (".yaml", ".yml")
    model_kind = ModelKind.TREE

    def parse(self, source: Source) -> TreeModel:
        text = self.decode(source)
        if not text.strip():
            return value_to_tree(None)
        try:
            value = yaml.safe_load(text)
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            line = mark.line + 1 if mark is not None else None
            raise ParseError(str(e), line=line) from e
        model = value_to_tree(value)
        logger.info(f"Parsed YAML: {model.node_count()} nodes")
        return model

    def serialize(self, model: TreeModel) -> bytes:
        if not isinstance(model, TreeModel):
            raise UnsupportedOperationError("YAML adapter serializes tree models")
        text = yaml.safe_dump(
            tree_to_value(model),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
        return self.encode(text)

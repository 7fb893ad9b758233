"""
Path Template - Parameterized paths declared by dispatch fields.

Placeholders:
    {param_N}       replaced by the N-th parameter (a literal, usually a predicate value)
    {attribute_N}   replaced by the N-th attribute name

    /Rules/rule[@name='{param_1}']/filter[@{attribute_1}='{param_2}']

Resolving without any parameter drops the predicates that hold
placeholders, so the template addresses every node of that shape.
"""

import logging
import re
from typing import List, Optional, Sequence, Union

from ..constants import ATTRIBUTE_PLACEHOLDER, PARAM_PLACEHOLDER
from ..core.paths import parse_path, quote_literal, split_segments
from ..exceptions import MissingParameterError, TemplateError

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\{([^{}]*)\}")
_NAME_RE = re.compile(rf"^({PARAM_PLACEHOLDER}|{ATTRIBUTE_PLACEHOLDER})_([1-9][0-9]*)$")
_PLACEHOLDER_PREDICATE_RE = re.compile(
    rf"\[[^\[\]]*\{{(?:{PARAM_PLACEHOLDER}|{ATTRIBUTE_PLACEHOLDER})_[0-9]+\}}[^\[\]]*\]")
_SUBSTITUTION_RE = re.compile(r"""(?P<quote>['"])\{(?P<quoted>[^{}]*)\}(?P=quote)|\{(?P<plain>[^{}]*)\}""")

Params = Union[str, Sequence[str], None]


def _as_list(values: Params) -> List[str]:
    if values is None:
        return []
    if isinstance(values, str):
        return [values]
    return [str(v) for v in values]


class PathTemplate:
    """
    A path with ordinal placeholders.

    Args:
        template: Path template, empty for the document root

    Raises:
        TemplateError: If a placeholder or the path itself is malformed
    """

    def __init__(self, template: Optional[str] = ""):
        self.template = (template or "").strip()
        self.param_count = 0
        self.attribute_count = 0
        self._scan()

    def _scan(self):
        for match in _PLACEHOLDER_RE.finditer(self.template):
            name = _NAME_RE.match(match.group(1).strip())
            if name is None:
                raise TemplateError(f"Unknown placeholder {match.group(0)} in template: {self.template}")
            position = int(name.group(2))
            if name.group(1) == PARAM_PLACEHOLDER:
                self.param_count = max(self.param_count, position)
            else:
                self.attribute_count = max(self.attribute_count, position)

        rest = _PLACEHOLDER_RE.sub("", self.template)
        if "{" in rest or "}" in rest:
            raise TemplateError(f"Unbalanced braces in template: {self.template}")

        # Placeholders filled with sample values must give a valid path
        sample = _PLACEHOLDER_RE.sub("x", self.template)
        parse_path(sample)

    @property
    def has_placeholders(self) -> bool:
        return bool(self.param_count or self.attribute_count)

    @property
    def root_tag(self) -> Optional[str]:
        """Tag of the first segment of an absolute template, None otherwise."""
        if not self.template.startswith("/"):
            return None
        body = self.template.strip("/")
        if not body:
            return None
        first = split_segments(body)[0].split("[")[0].strip()
        if not first or "{" in first or first.isdigit() or first == "*":
            return None
        return first

    def resolve(self, params: Params = None, attributes: Params = None) -> str:
        """
        Substitute the placeholders.

        Args:
            params: Values for {param_N}, in order (a single string is one value)
            attributes: Attribute names for {attribute_N}, in order

        Returns:
            The resolved path

        Raises:
            MissingParameterError: If fewer values than placeholders are supplied
                (supplying none at all drops the predicates instead)
            TemplateError: If a quoted value holds both quote characters
        """
        params = _as_list(params)
        attributes = _as_list(attributes)
        if not self.has_placeholders:
            return self.template

        if not params and not attributes:
            path = _PLACEHOLDER_PREDICATE_RE.sub("", self.template)
            if _PLACEHOLDER_RE.search(path):
                raise MissingParameterError(f"Template needs parameters outside predicates: {self.template}")
            return path

        if len(params) < self.param_count:
            raise MissingParameterError(
                f"Template expects {self.param_count} parameters, got {len(params)}: {self.template}")
        if len(attributes) < self.attribute_count:
            raise MissingParameterError(
                f"Template expects {self.attribute_count} attribute names, got {len(attributes)}: {self.template}")

        def substitute(match) -> str:
            name = match.group("quoted") if match.group("quote") else match.group("plain")
            kind, position = _NAME_RE.match(name.strip()).groups()
            values = params if kind == PARAM_PLACEHOLDER else attributes
            value = values[int(position) - 1]
            if match.group("quote"):
                # Whole quoted literal replaced, quotes chosen for the value
                return quote_literal(value)
            return value

        return _SUBSTITUTION_RE.sub(substitute, self.template)

    def __bool__(self) -> bool:
        return bool(self.template)

    def __str__(self) -> str:
        return self.template

    def __repr__(self) -> str:
        return f"PathTemplate({self.template!r})"

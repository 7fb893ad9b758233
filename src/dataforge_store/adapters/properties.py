"""
Properties Adapter - "key = value" files.

Each key becomes a header and the file maps to a single row. Lines starting
with '#' or '!' are comments, a trailing backslash continues a value on the
next line, and "key: value" is accepted as well as "key = value".
"""

import logging
import re
from typing import List, Tuple

from .base import FormatAdapter, ModelKind, Source
from ..core.model import TabularModel
from ..exceptions import ParseError, UnsupportedOperationError

logger = logging.getLogger(__name__)

_SEPARATOR_RE = re.compile(r"(?<!\\)[=:]")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", "=": "=", ":": ":", "#": "#", "!": "!", " ": " "}


def _unescape(text: str) -> str:
    result = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\\" and i + 1 < len(text):
            result.append(_ESCAPES.get(text[i + 1], text[i + 1]))
            i += 2
            continue
        result.append(char)
        i += 1
    return "".join(result)


def _trailing_backslashes(text: str) -> int:
    return len(text) - len(text.rstrip("\\"))


def _strip(text: str) -> str:
    """Strip surrounding whitespace, keeping escaped trailing whitespace."""
    text = text.lstrip()
    end = len(text)
    while end and text[end - 1] in " \t\f" and _trailing_backslashes(text[:end - 1]) % 2 == 0:
        end -= 1
    return text[:end]


def _escape(text: str, is_key: bool = False) -> str:
    text = text.replace("\\", "\\\\").replace("\n", "\\n").replace("\t", "\\t").replace("\r", "\\r")
    if is_key:
        text = text.replace("=", "\\=").replace(":", "\\:").replace(" ", "\\ ")
        if text[:1] in ("#", "!"):
            text = "\\" + text
        return text
    if text.endswith(" "):
        text = text[:-1] + "\\ "
    if text[:1] == " ":
        text = "\\" + text
    return text


class PropertiesAdapter(FormatAdapter):
    """Adapter for key/value properties files."""

    format_name = "properties"
    extensions = (".properties", ".conf", ".cfg")
    model_kind = ModelKind.TABULAR

    def _logical_lines(self, text: str) -> List[Tuple[int, str]]:
        lines = []
        buffer = ""
        start = 0
        for number, raw in enumerate(text.splitlines(), start=1):
            line = raw.lstrip()
            if not buffer:
                start = number
                if not line.strip() or line[0] in ("#", "!"):
                    continue
            if _trailing_backslashes(line) % 2 == 1:
                buffer += line[:-1]
                continue
            lines.append((start, buffer + line))
            buffer = ""
        if buffer:
            lines.append((start, buffer))
        return lines

    def parse(self, source: Source) -> TabularModel:
        text = self.decode(source)
        model = TabularModel()
        values = []
        for number, line in self._logical_lines(text):
            match = _SEPARATOR_RE.search(line)
            if match is None:
                key, value = line, ""
            else:
                key, value = line[:match.start()], line[match.end():]
            key = _unescape(_strip(key))
            if not key:
                raise ParseError("Missing key before separator", line=number)
            model.headers.add(key)
            values.append(_unescape(_strip(value)))
        if values:
            model.rows.append(values)
        logger.info(f"Parsed properties: {model.width} keys")
        return model

    def serialize(self, model: TabularModel) -> bytes:
        if not isinstance(model, TabularModel):
            raise UnsupportedOperationError("Properties can only hold tabular models")
        if len(model.rows) > 1:
            logger.warning(f"Properties hold a single row; {len(model.rows) - 1} rows not written")
        row = model.rows[0] if model.rows else [""] * model.width
        lines = [f"{_escape(header.base_name, True)} = {_escape(value)}"
                 for header, value in zip(model.headers, row)]
        return self.encode("\n".join(lines) + ("\n" if lines else ""))

"""
Adapter Factory - Create the appropriate format adapter by name, file
extension or content.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Type, Union

from .base import FormatAdapter
from ..exceptions import UnsupportedFormatError

logger = logging.getLogger(__name__)

_PROPERTIES_LINE_RE = re.compile(r"^[^\s:=#!\[{<][^:=]*?\s*=")
_YAML_LINE_RE = re.compile(r"^(?:-\s|---|[^\s:#][^:]*:(?:\s|$))")


class AdapterFactory:
    """
    Factory for creating format adapters.

    Usage:
        adapter = AdapterFactory.create("csv", delimiter=",")
        adapter = AdapterFactory.for_path("settings.xml")
    """

    # Registry of supported formats
    _adapters: Dict[str, Type[FormatAdapter]] = {}

    @classmethod
    def create(cls, format_name: str, **options: Any) -> FormatAdapter:
        """
        Create an adapter for the specified format.

        Args:
            format_name: Format (csv, properties, xml, json, yaml) or an alias
            **options: Adapter options (encoding, delimiter, ...)

        Returns:
            FormatAdapter instance

        Raises:
            UnsupportedFormatError: If the format is not registered
        """
        return cls.get_adapter_class(format_name)(**options)

    @classmethod
    def get_adapter_class(cls, format_name: str) -> Type[FormatAdapter]:
        """Adapter class registered for a format name or alias."""
        adapter_class = cls._adapters.get((format_name or "").lower().lstrip("."))
        if adapter_class is None:
            raise UnsupportedFormatError(f"No adapter for format: {format_name}")
        return adapter_class

    @classmethod
    def format_for_path(cls, path: Union[str, Path]) -> Optional[str]:
        """Format name registered for a file extension, None if unknown."""
        suffix = Path(path).suffix.lower()
        for name, adapter_class in cls._adapters.items():
            if suffix in adapter_class.extensions:
                return adapter_class.format_name
        return None

    @classmethod
    def for_path(cls, path: Union[str, Path], **options: Any) -> FormatAdapter:
        """
        Create an adapter from a file extension.

        Raises:
            UnsupportedFormatError: If the extension is unknown
        """
        format_name = cls.format_for_path(path)
        if format_name is None:
            raise UnsupportedFormatError(f"Cannot infer format from file name: {path}")
        if Path(path).suffix.lower() == ".tsv" and options.get("delimiter") is None:
            options["delimiter"] = "\t"
        return cls.create(format_name, **options)

    @classmethod
    def detect_format(cls, text: str) -> str:
        """
        Guess the format of a text.

        '<' means XML, '{' or '[' JSON, "key = value" lines properties,
        "key: value" or "- item" lines YAML, anything else delimited text.
        """
        stripped = text.lstrip("\ufeff \t\r\n")
        if stripped.startswith("<"):
            return "xml"
        if stripped.startswith("{") or stripped.startswith("["):
            return "json"
        lines = [line for line in stripped.splitlines()
                 if line.strip() and not line.lstrip().startswith(("#", "!"))]
        if not lines:
            return "csv"
        first = lines[0]
        if _PROPERTIES_LINE_RE.match(first):
            return "properties"
        if _YAML_LINE_RE.match(first):
            return "yaml"
        return "csv"

    @classmethod
    def is_supported(cls, format_name: str) -> bool:
        """Check if a format is supported."""
        return (format_name or "").lower().lstrip(".") in cls._adapters

    @classmethod
    def supported_types(cls) -> list:
        """Get list of supported format names and aliases."""
        return list(cls._adapters.keys())

    @classmethod
    def register(cls, format_name: str, adapter_class: Type[FormatAdapter]):
        """
        Register a new adapter type.

        Args:
            format_name: Format identifier
            adapter_class: FormatAdapter subclass
        """
        cls._adapters[format_name.lower()] = adapter_class
        logger.debug(f"Registered adapter for: {format_name}")


def _register_default_adapters():
    """Register built-in adapters. Called on module import."""
    from .delimited import DelimitedAdapter
    from .properties import PropertiesAdapter
    from .xml_adapter import XmlAdapter
    from .json_adapter import JsonAdapter
    from .yaml_adapter import YamlAdapter

    AdapterFactory.register("csv", DelimitedAdapter)
    AdapterFactory.register("delimited", DelimitedAdapter)  # Alias
    AdapterFactory.register("txt", DelimitedAdapter)  # Alias
    AdapterFactory.register("properties", PropertiesAdapter)
    AdapterFactory.register("xml", XmlAdapter)
    AdapterFactory.register("json", JsonAdapter)
    AdapterFactory.register("yaml", YamlAdapter)
    AdapterFactory.register("yml", YamlAdapter)  # Alias


# Register on module import
_register_default_adapters()

"""
Settings Bootstrap - Fill a runtime registry from startup values and a
settings document.

Startup values (a name -> value map, e.g. parsed command line arguments)
are written to the runtime fields with the same name, ignoring case. When
the map holds a non-empty SETTINGSFILE entry, that file is bound to the
settings registry. Runtime fields still empty afterwards are then filled
once from the settings field with the same name; later changes of the
settings document are not propagated.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional

from .registry import DispatchRegistry
from ..constants import SETTINGS_FILE_KEY

logger = logging.getLogger(__name__)


def parse_args(args: Iterable[str]) -> Dict[str, str]:
    """
    Parse "-name=value" / "name=value" arguments into a map.

    Arguments without "=" are ignored.
    """
    values = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if not sep:
            logger.warning(f"Ignored argument without value: {arg}")
            continue
        values[key.lstrip("-").strip()] = value
    return values


def _lookup(values: Mapping[str, str], key: str) -> Optional[str]:
    lowered = key.lower()
    for name, value in values.items():
        if name.lower() == lowered:
            return value
    return None


def apply_values(registry: DispatchRegistry, values: Mapping[str, str]) -> List[str]:
    """
    Write values to the fields of the same name (case-insensitive).

    Returns:
        Keys of the updated fields
    """
    updated = []
    for name, value in values.items():
        field = registry.find_field(name)
        if field is None:
            logger.debug(f"No field {name} in schema {registry.schema.name}")
            continue
        field.set_value(value)
        updated.append(field.key)
    return updated


def fill_defaults(runtime: DispatchRegistry, settings: DispatchRegistry) -> List[str]:
    """
    Copy settings values into runtime fields that resolve to empty.

    Returns:
        Keys of the filled runtime fields
    """
    filled = []
    for field in runtime:
        if field.template.has_placeholders:
            continue
        if field.get_value():
            continue
        source = settings.find_field(field.key) or settings.find_field(field.name)
        if source is None or source.template.has_placeholders:
            continue
        value = source.get_value()
        if value:
            field.set_value(value)
            filled.append(field.key)
    if filled:
        logger.info(f"Filled {len(filled)} runtime fields from schema {settings.schema.name}")
    return filled


def bootstrap_settings(runtime: DispatchRegistry, settings: DispatchRegistry,
                       values: Optional[Mapping[str, str]] = None, create: bool = False) -> List[str]:
    """
    Initialise a runtime registry.

    Args:
        runtime: Registry receiving the startup values
        settings: Registry of the settings document
        values: Startup values; a SETTINGSFILE entry names the settings document
        create: Create a missing settings document

    Returns:
        Keys of the runtime fields filled from the settings document

    Raises:
        DataIOError: If the settings document is missing and create is False
        ParseError: If the settings document is malformed
    """
    values = dict(values or {})
    apply_values(runtime, values)

    settings_file = _lookup(values, SETTINGS_FILE_KEY)
    if not settings_file:
        field = runtime.find_field(SETTINGS_FILE_KEY)
        settings_file = field.get_value() if field is not None else None
    if settings_file:
        settings.bind_file(settings_file, create=create)

    return fill_defaults(runtime, settings)

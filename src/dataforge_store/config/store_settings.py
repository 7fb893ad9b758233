"""
Store Settings - Process-level defaults for containers and adapters
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..constants import DEFAULT_COLUMN_DELIMITER, DEFAULT_ENCODING, DEFAULT_HEADER_ROW_INDEX

logger = logging.getLogger(__name__)


class StoreSettings:
    """
    Manages the defaults used when a container is built without explicit options

    Settings include:
    - column_delimiter: Delimiter for delimited text sources
    - header_row_index: Line holding the headers (-1 = no header row)
    - encoding: Encoding used to write files
    - json_indent: Indentation of serialized JSON
    - xml_declaration: Whether serialized XML starts with a declaration
    - date_formats: strptime patterns tried by the default date strategy
    - log_level: Level used by setup_logging() when none is given
    """

    DEFAULT_SETTINGS = {
        'column_delimiter': DEFAULT_COLUMN_DELIMITER,
        'header_row_index': DEFAULT_HEADER_ROW_INDEX,
        'encoding': DEFAULT_ENCODING,
        'json_indent': 2,
        'xml_declaration': True,
        'date_formats': [
            '%Y-%m-%d %H:%M:%S',
            '%Y-%m-%dT%H:%M:%S',
            '%Y-%m-%d',
            '%d.%m.%Y %H:%M:%S',
            '%d.%m.%Y',
            '%d/%m/%Y',
            '%Y/%m/%d',
            '%Y%m%d',
            '%H:%M:%S',
            '%H:%M',
        ],
        'log_level': 'INFO',
    }

    _instance: Optional['StoreSettings'] = None

    def __init__(self):
        """Initialize settings with defaults"""
        self._settings = json.loads(json.dumps(self.DEFAULT_SETTINGS))
        self._settings_file: Optional[Path] = None

    @classmethod
    def get_instance(cls) -> 'StoreSettings':
        """Get singleton instance of StoreSettings"""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a setting value

        Args:
            key: Setting key
            default: Default value if key not found

        Returns:
            Setting value or default
        """
        return self._settings.get(key, default)

    def set(self, key: str, value: Any, save: bool = False):
        """
        Set a setting value

        Args:
            key: Setting key
            value: New value
            save: Whether to save to the settings file immediately
        """
        self._settings[key] = value

        if save:
            self.save()

        logger.debug(f"Setting changed: {key} = {value}")

    @property
    def column_delimiter(self) -> str:
        return self.get('column_delimiter', DEFAULT_COLUMN_DELIMITER)

    @property
    def header_row_index(self) -> int:
        return int(self.get('header_row_index', DEFAULT_HEADER_ROW_INDEX))

    @property
    def encoding(self) -> str:
        return self.get('encoding', DEFAULT_ENCODING)

    @property
    def date_formats(self) -> List[str]:
        return list(self.get('date_formats', []))

    def load(self, settings_file: Union[str, Path]):
        """
        Load settings from a JSON file, merged over the defaults.

        A missing file keeps the defaults; an unreadable one is logged and
        also falls back to the defaults.
        """
        self._settings_file = Path(settings_file)
        try:
            if self._settings_file.exists():
                with open(self._settings_file, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)
                self._settings = json.loads(json.dumps(self.DEFAULT_SETTINGS))
                self._settings.update(loaded)
                logger.info(f"Loaded store settings from {self._settings_file}")
            else:
                logger.info("No store settings file found, using defaults")
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading store settings: {e}")
            self._settings = json.loads(json.dumps(self.DEFAULT_SETTINGS))

    def save(self):
        """Save settings to the file given to load()"""
        if self._settings_file is None:
            logger.warning("StoreSettings.save() called without a settings file")
            return
        try:
            self._settings_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self._settings_file, 'w', encoding='utf-8') as f:
                json.dump(self._settings, f, indent=2)
            logger.info(f"Saved store settings to {self._settings_file}")
        except OSError as e:
            logger.error(f"Error saving store settings: {e}")

    def reset_to_defaults(self):
        """Reset all settings to default values"""
        self._settings = json.loads(json.dumps(self.DEFAULT_SETTINGS))
        logger.info("Store settings reset to defaults")

    def get_all(self) -> Dict[str, Any]:
        """Get all settings as a dictionary"""
        return dict(self._settings)


def get_store_settings() -> StoreSettings:
    """Get the global StoreSettings instance"""
    return StoreSettings.get_instance()

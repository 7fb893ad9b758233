"""
Logging Module - Opt-in logging bootstrap with coloured console output and file output

Library modules only call logging.getLogger(__name__); applications call
setup_logging() once to attach handlers to the package logger.
"""
import logging
from pathlib import Path
from typing import Optional, Union

from colorama import init, Fore, Style

# Initialize colorama for Windows compatibility
init(autoreset=True)

PACKAGE_LOGGER = "dataforge_store"
LOG_FORMAT = "[%(asctime)s] [%(levelname)-8s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Formatter adding a colour per log level"""

    COLOR_MAP = {
        logging.CRITICAL: Fore.MAGENTA,
        logging.ERROR: Fore.RED,
        logging.WARNING: Fore.YELLOW,
        logging.INFO: Fore.RESET,
        logging.DEBUG: Fore.CYAN,
    }

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = self.COLOR_MAP.get(record.levelno, Fore.RESET)
        return f"{color}{message}{Style.RESET_ALL}"


def setup_logging(level: Union[str, int, None] = None,
                  log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Log level name or number (defaults to StoreSettings.log_level)
        log_file: Optional path of a plain-text log file

    Returns:
        The configured package logger
    """
    if level is None:
        from ..config.store_settings import get_store_settings
        level = get_store_settings().get('log_level', 'INFO')
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)

    # Replace handlers installed by a previous call
    for handler in list(package_logger.handlers):
        if getattr(handler, '_dataforge_store', False):
            package_logger.removeHandler(handler)
            handler.close()

    console = logging.StreamHandler()
    console.setFormatter(ColoredFormatter(LOG_FORMAT, DATE_FORMAT))
    console._dataforge_store = True
    package_logger.addHandler(console)

    if log_file:
        from .file_reader import ensure_directory
        log_path = Path(log_file)
        ensure_directory(log_path.parent)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        file_handler._dataforge_store = True
        package_logger.addHandler(file_handler)
        package_logger.info(f"Log file created: {log_path}")

    return package_logger


__all__ = ['setup_logging', 'ColoredFormatter']

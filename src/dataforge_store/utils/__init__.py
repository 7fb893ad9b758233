"""
Utility modules for DataForge Store
"""

from .file_reader import decode_bytes, detect_encoding, detect_separator, ensure_directory
from .logger import setup_logging

__all__ = ['decode_bytes', 'detect_encoding', 'detect_separator', 'ensure_directory', 'setup_logging']

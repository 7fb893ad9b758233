"""
File Reader - Byte decoding, separator detection and best-effort file housekeeping
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..constants import (
    DEFAULT_ENCODING, FALLBACK_ENCODINGS, ENCODING_SAMPLE_SIZE, SEPARATOR_CANDIDATES,
    DEFAULT_COLUMN_DELIMITER,
)
from ..exceptions import EncodingError, DataIOError

logger = logging.getLogger(__name__)


def detect_encoding(raw: bytes, sample_size: int = ENCODING_SAMPLE_SIZE) -> str:
    """
    Detect the encoding of raw bytes by trying common encodings.

    Args:
        raw: Raw bytes
        sample_size: Number of bytes inspected

    Returns:
        Detected encoding name

    Raises:
        EncodingError: If no candidate encoding can decode the sample
    """
    sample = raw[:sample_size]

    # Check for BOM markers first
    if sample.startswith(b'\xef\xbb\xbf'):
        return 'utf-8-sig'
    if sample.startswith(b'\xff\xfe') or sample.startswith(b'\xfe\xff'):
        return 'utf-16'

    for encoding in [DEFAULT_ENCODING] + FALLBACK_ENCODINGS:
        try:
            sample.decode(encoding)
            return encoding
        except UnicodeDecodeError as e:
            # A multi-byte sequence cut by the sample boundary is not a failure
            if encoding == DEFAULT_ENCODING and len(raw) > sample_size and e.start >= len(sample) - 3:
                return encoding
            continue

    raise EncodingError("Could not decode content with any candidate encoding")


def decode_bytes(raw: Union[bytes, str], encoding: Optional[str] = None) -> str:
    """
    Decode raw bytes to text.

    Args:
        raw: Raw bytes (text is returned unchanged)
        encoding: Explicit encoding, decoded strictly; detected when None

    Returns:
        Decoded text without BOM

    Raises:
        EncodingError: If the bytes cannot be decoded
    """
    if isinstance(raw, str):
        return raw
    if encoding is None:
        encoding = detect_encoding(raw)
    try:
        text = raw.decode(encoding)
    except (UnicodeDecodeError, LookupError) as e:
        raise EncodingError(f"Cannot decode content as {encoding}: {e}") from e
    if text.startswith('\ufeff'):
        text = text[1:]
    return text


def read_bytes(file_path: Union[str, Path]) -> bytes:
    """
    Read a file as bytes.

    Raises:
        DataIOError: If the file cannot be read
    """
    try:
        with open(file_path, 'rb') as f:
            return f.read()
    except OSError as e:
        raise DataIOError(f"Error reading file {file_path}: {e}") from e


def write_bytes(file_path: Union[str, Path], content: bytes):
    """
    Write bytes to a file, creating missing parent directories.

    Raises:
        DataIOError: If the file cannot be written
    """
    file_path = Path(file_path)
    ensure_directory(file_path.parent)
    try:
        with open(file_path, 'wb') as f:
            f.write(content)
    except OSError as e:
        raise DataIOError(f"Error writing file {file_path}: {e}") from e


def detect_separator(text: str, default: str = DEFAULT_COLUMN_DELIMITER) -> str:
    """
    Detect a column separator by analyzing the first few lines.

    Args:
        text: Delimited text
        default: Separator returned when no candidate occurs

    Returns:
        Detected separator character
    """
    sample = "\n".join(text.splitlines()[:5])
    counts = {sep: sample.count(sep) for sep in SEPARATOR_CANDIDATES}
    max_sep = max(counts, key=counts.get)
    if counts[max_sep] > 0:
        return max_sep
    return default


def ensure_directory(directory: Union[str, Path]) -> bool:
    """
    Create a directory if missing. Failures are logged, never raised.

    Returns:
        True if the directory exists afterwards
    """
    directory = Path(directory)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        return True
    except OSError as e:
        logger.warning(f"Could not create directory {directory}: {e}")
        return False


def backup_file(file_path: Union[str, Path]) -> Optional[Path]:
    """
    Copy an existing file to a timestamped sibling before it is overwritten.
    Failures are logged, never raised.

    Returns:
        Path of the backup, or None if nothing was archived
    """
    file_path = Path(file_path)
    if not file_path.exists():
        return None
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    target = file_path.with_name(f"{file_path.stem}_{timestamp}{file_path.suffix}.bak")
    try:
        shutil.copy2(file_path, target)
        logger.debug(f"Archived {file_path} to {target}")
        return target
    except OSError as e:
        logger.warning(f"Could not archive {file_path}: {e}")
        return None

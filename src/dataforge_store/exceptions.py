"""
Exceptions - Error taxonomy shared by containers, adapters, filters and dispatchers.

Structural problems (bad templates, operators that do not fit their values)
are raised when the object is built. Missing optional data is never an error:
lookups return empty results instead.
"""
from typing import Optional


class DataStoreError(Exception):
    """Base class for all dataforge_store errors."""


class ParseError(DataStoreError, ValueError):
    """Raised when a source cannot be parsed into a model."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        self.message = message
        if line is not None:
            super().__init__(f"line {line}: {message}")
        else:
            super().__init__(message)


class EncodingError(DataStoreError, UnicodeError):
    """Raised when raw bytes cannot be decoded with any candidate encoding."""


class ColumnCountError(DataStoreError, ValueError):
    """Raised when a row holds more values than the table has headers."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Row has {actual} values but the table has {expected} columns")


class HeaderNotFoundError(DataStoreError, KeyError):
    """Raised when an operation requires a header that does not exist."""

    def __init__(self, header):
        self.header = header
        super().__init__(header)

    def __str__(self) -> str:
        return f"Header not found: {self.header!r}"


class MissingParameterError(DataStoreError, ValueError):
    """Raised when a path template is resolved with too few parameters."""


class TemplateError(DataStoreError, ValueError):
    """Raised when a path template or path expression is malformed."""


class IllegalOperatorError(DataStoreError, ValueError):
    """Raised when a concatenation operator is used as a comparator."""


class IncompatibleOperatorError(IllegalOperatorError):
    """Raised when a rule's operator does not fit its values (e.g. numeric on text)."""


class NumericComparisonError(DataStoreError, TypeError):
    """Raised when a numeric comparator meets a non-numeric candidate value."""


class UnsupportedFormatError(DataStoreError, ValueError):
    """Raised when no adapter exists for the requested format."""


class UnsupportedOperationError(DataStoreError, TypeError):
    """Raised when an operation is not available for the container's model shape."""


class DataIOError(DataStoreError, OSError):
    """Raised when reading or writing a backing file fails."""


__all__ = [
    'DataStoreError',
    'ParseError',
    'EncodingError',
    'ColumnCountError',
    'HeaderNotFoundError',
    'MissingParameterError',
    'TemplateError',
    'IllegalOperatorError',
    'IncompatibleOperatorError',
    'NumericComparisonError',
    'UnsupportedFormatError',
    'UnsupportedOperationError',
    'DataIOError',
]

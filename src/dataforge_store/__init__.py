"""
DataForge Store - Format-agnostic data containers
CSV, properties, XML, JSON and YAML behind one API
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("data-forge-store")
except PackageNotFoundError:
    # Package not installed (running from a source checkout)
    __version__ = "0.6.0"  # Fallback version

__author__ = "Lestat2Lioncourt"

from .exceptions import (
    DataStoreError, ParseError, EncodingError, ColumnCountError, HeaderNotFoundError,
    MissingParameterError, TemplateError, IllegalOperatorError, IncompatibleOperatorError,
    NumericComparisonError, UnsupportedFormatError, UnsupportedOperationError, DataIOError,
)
from .config import StoreSettings, get_store_settings
from .core import DataContainer, HeaderIndex, TabularModel, TreeModel, TreeNode
from .adapters import AdapterFactory, Orientation
from .filtering import Filter, FilterRule, Operator, RuleFormat
from .dispatch import DispatchRegistry, FieldSchema, PathTemplate, bootstrap_settings
from .utils.logger import setup_logging

__all__ = [
    "__version__",
    "DataContainer",
    "HeaderIndex",
    "TabularModel",
    "TreeModel",
    "TreeNode",
    "AdapterFactory",
    "Orientation",
    "Filter",
    "FilterRule",
    "Operator",
    "RuleFormat",
    "DispatchRegistry",
    "FieldSchema",
    "PathTemplate",
    "bootstrap_settings",
    "StoreSettings",
    "get_store_settings",
    "setup_logging",
    "DataStoreError",
    "ParseError",
    "EncodingError",
    "ColumnCountError",
    "HeaderNotFoundError",
    "MissingParameterError",
    "TemplateError",
    "IllegalOperatorError",
    "IncompatibleOperatorError",
    "NumericComparisonError",
    "UnsupportedFormatError",
    "UnsupportedOperationError",
    "DataIOError",
]

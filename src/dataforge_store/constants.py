"""
Centralized constants for DataForge Store.

Eliminates magic strings scattered across the codebase.
Import from here instead of hardcoding values.
"""

# ===========================================================================
# Delimited text
# ===========================================================================
DEFAULT_COLUMN_DELIMITER = ";"
DEFAULT_HEADER_ROW_INDEX = 0
NO_HEADER_ROW = -1              # Source has no header row at all
SEPARATOR_CANDIDATES = [";", ",", "\t", "|"]

# ===========================================================================
# Encodings
# ===========================================================================
DEFAULT_ENCODING = "utf-8"
FALLBACK_ENCODINGS = ["cp1252", "iso-8859-1"]
ENCODING_SAMPLE_SIZE = 100_000  # Bytes inspected for BOM / decode checks

# ===========================================================================
# Headers
# ===========================================================================
DUPLICATE_SUFFIX_START = 2      # h, h_2, h_3, ...
DUPLICATE_SUFFIX_SEPARATOR = "_"

# ===========================================================================
# Filters
# ===========================================================================
WILDCARD_VALUES = ("*", "%")
IMPLICIT_XPATH = "XPath"        # Synthetic header: location of a tree node
NULL_LITERAL = "null"

# ===========================================================================
# Trees
# ===========================================================================
ANONYMOUS_ROOT = ""             # JSON / YAML documents have no named root
ARRAY_ITEM_TAG = "item"         # Tag for items of nested / top-level arrays
TEXT_KEY = "#text"              # Column name for node text in flattened views

# ===========================================================================
# Dispatcher
# ===========================================================================
PARAM_PLACEHOLDER = "param"
ATTRIBUTE_PLACEHOLDER = "attribute"
SETTINGS_FILE_KEY = "SETTINGSFILE"

# ===========================================================================
# Caches
# ===========================================================================
PATH_CACHE_MAXSIZE = 512

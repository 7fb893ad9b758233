"""
Format adapters - parse raw sources into canonical models and back.
"""

from .base import FormatAdapter, ModelKind
from .delimited import DelimitedAdapter, Orientation
from .properties import PropertiesAdapter
from .xml_adapter import XmlAdapter
from .json_adapter import JsonAdapter
from .yaml_adapter import YamlAdapter
from .factory import AdapterFactory

__all__ = [
    'FormatAdapter',
    'ModelKind',
    'DelimitedAdapter',
    'Orientation',
    'PropertiesAdapter',
    'XmlAdapter',
    'JsonAdapter',
    'YamlAdapter',
    'AdapterFactory',
]

"""
Path dispatch - declared fields mapped to templated locations of a container.
"""

from .template import PathTemplate
from .field import DispatchField
from .registry import DispatchRegistry, FieldDefinition, FieldSchema
from .settings import apply_values, bootstrap_settings, fill_defaults, parse_args

__all__ = [
    'PathTemplate',
    'DispatchField',
    'DispatchRegistry',
    'FieldDefinition',
    'FieldSchema',
    'apply_values',
    'bootstrap_settings',
    'fill_defaults',
    'parse_args',
]

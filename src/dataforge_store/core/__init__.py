"""
Core - canonical models, their views and the DataContainer facade.
"""

from .headers import Header, HeaderIndex
from .model import TabularModel, TreeModel, TreeNode
from .tabular_view import TabularView
from .tree_view import TreeView
from .container import DataContainer

__all__ = [
    'Header',
    'HeaderIndex',
    'TabularModel',
    'TreeModel',
    'TreeNode',
    'TabularView',
    'TreeView',
    'DataContainer',
]

"""
Config module - Process-level defaults.
"""

from .store_settings import StoreSettings, get_store_settings

__all__ = ['StoreSettings', 'get_store_settings']

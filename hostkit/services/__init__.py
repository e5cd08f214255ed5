"""
Service layer for hostkit.

This module contains configuration loading and the JSON-backed stores that
the tools share between their background work and their HTTP APIs.
"""

from .config_manager import ConfigurationManager
from .device_store import DeviceStore
from .history_store import HistoryStore
from .preference_store import PreferenceStore
from .repository_cache import RepositoryCache
from .scan_state import ScanState

__all__ = [
    "ConfigurationManager",
    "DeviceStore",
    "HistoryStore",
    "PreferenceStore",
    "RepositoryCache",
    "ScanState",
]

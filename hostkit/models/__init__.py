"""
Data models for hostkit.

This module contains the data classes used by the four tools for
representing branches, files, devices, ports and configuration.
"""

from .config import (
    BranchesConfig,
    Configuration,
    DownloadsConfig,
    LoggingConfig,
    NetworkConfig,
    PortsConfig,
    ScanRange,
    ServerConfig,
)
from .files import DuplicateGroup, FileFingerprint, HistoryEntry, SortedFile, SortStats
from .git import (
    Branch,
    DeletionResult,
    LastCommit,
    RepositoryBranchReport,
    RepositoryStatus,
)
from .network import ArpRecord, Device, DeviceAlert
from .ports import KillResult, PortConflict, PortEntry

__all__ = [
    "Branch",
    "LastCommit",
    "RepositoryBranchReport",
    "RepositoryStatus",
    "DeletionResult",
    "FileFingerprint",
    "DuplicateGroup",
    "SortedFile",
    "HistoryEntry",
    "SortStats",
    "ArpRecord",
    "Device",
    "DeviceAlert",
    "PortEntry",
    "PortConflict",
    "KillResult",
    "Configuration",
    "DownloadsConfig",
    "BranchesConfig",
    "NetworkConfig",
    "PortsConfig",
    "ScanRange",
    "LoggingConfig",
    "ServerConfig",
]

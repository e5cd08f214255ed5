"""
Core components for hostkit.

This module contains the components that classify git branches, find
duplicate files, sort downloads and scrape the ARP and listening-socket
tables.
"""

from .branch_classifier import BranchClassifier
from .download_sorter import DownloadSorter
from .duplicate_finder import find_duplicates, fingerprint
from .git_agent import GitAgent, GitCommandError
from .network_scanner import NetworkScanner
from .port_scanner import PortScanner, find_conflicts
from .repo_scanner import discover_repositories

__all__ = [
    "BranchClassifier",
    "DownloadSorter",
    "GitAgent",
    "GitCommandError",
    "NetworkScanner",
    "PortScanner",
    "discover_repositories",
    "find_conflicts",
    "find_duplicates",
    "fingerprint",
]

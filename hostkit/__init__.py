"""
hostkit: local-machine utility tools.

A download-folder sorter with duplicate detection, a multi-repository git
branch cleaner, a LAN device monitor and a listening-port inspector, each
paired with a small HTTP JSON API.
"""

__version__ = "0.1.0"
__author__ = "hostkit maintainers"

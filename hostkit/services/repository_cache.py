"""
Cached list of discovered repositories for the branch cleaner API.
"""

import os
from typing import List, Optional, Union

from ..components.repo_scanner import discover_repositories


class RepositoryCache:
    """
    Repository paths below ``scan_path``, discovered lazily.

    Repository indexes used by the HTTP API refer to positions in this list,
    so it only changes on an explicit ``refresh``.
    """

    def __init__(self, scan_path: Union[str, os.PathLike]):
        self.scan_path = scan_path
        self._repos: Optional[List[str]] = None

    def repositories(self) -> List[str]:
        if not self._repos:
            self._repos = discover_repositories(self.scan_path)
        return self._repos

    def refresh(self) -> List[str]:
        self._repos = discover_repositories(self.scan_path)
        return self._repos

    def get(self, index: int) -> str:
        """
        Repository path at ``index``.

        Raises:
            IndexError: If no repository has that index
        """
        repos = self.repositories()
        if index < 0 or index >= len(repos):
            raise IndexError(f"Repository index out of range: {index}")
        return repos[index]

"""
Discovery of git repositories below a directory.
"""

import os
from pathlib import Path
from typing import List, Union

from ..utils.logging import get_logger

logger = get_logger("branches.scanner")

MAX_DEPTH = 3
SKIPPED_DIRECTORIES = {"node_modules"}


def discover_repositories(
    scan_path: Union[str, os.PathLike], max_depth: int = MAX_DEPTH
) -> List[str]:
    """
    Find git repositories at most ``max_depth`` levels below ``scan_path``.

    A directory holding a ``.git`` directory is reported and not searched
    further. Dependency caches and hidden directories are skipped, as are
    directories that cannot be read.

    Returns:
        Repository root paths in walk order
    """
    repositories: List[str] = []

    def walk(directory: Path, depth: int) -> None:
        if depth > max_depth:
            return

        try:
            entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
        except OSError as e:
            logger.debug(f"Skipping unreadable directory {directory}: {e}")
            return

        subdirectories = []
        for entry in entries:
            try:
                is_dir = entry.is_dir()
            except OSError:
                continue
            if not is_dir:
                continue
            if entry.name == ".git":
                repositories.append(str(directory))
                return
            subdirectories.append(entry)

        for entry in subdirectories:
            if entry.name in SKIPPED_DIRECTORIES or entry.name.startswith("."):
                continue
            walk(Path(entry.path), depth + 1)

    walk(Path(scan_path), 0)
    logger.info(
        f"Found {len(repositories)} git repositories",
        extra={"scan_path": str(scan_path)},
    )
    return repositories

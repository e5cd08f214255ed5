"""
Content-addressed duplicate detection.

Files are grouped by the SHA-256 digest of their bytes. Names and
modification times play no part; digest collisions are not disambiguated.
"""

import os
from pathlib import Path
from typing import Dict, Iterator, List, Union

from ..models.files import DuplicateGroup, FileFingerprint
from ..utils.error_handling import ErrorCategory, ErrorSeverity, get_error_tracker
from ..utils.hashing import hash_file
from ..utils.logging import get_logger

logger = get_logger("downloads.duplicates")


def fingerprint(path: Union[str, os.PathLike]) -> FileFingerprint:
    """Hash one file and capture its size."""
    file_path = os.path.abspath(path)
    return FileFingerprint(
        path=file_path,
        hash=hash_file(file_path),
        size=os.stat(file_path).st_size,
    )


def _iter_files(root: Path, is_root: bool = True) -> Iterator[str]:
    """Yield regular files below ``root`` depth first, in name order."""
    try:
        entries = sorted(os.scandir(root), key=lambda entry: entry.name)
    except OSError as e:
        if is_root:
            raise
        logger.warning(f"Skipping unreadable directory {root}: {e}")
        return

    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                yield from _iter_files(Path(entry.path), is_root=False)
            elif entry.is_file(follow_symlinks=False):
                yield entry.path
        except OSError as e:
            logger.warning(f"Skipping unreadable entry {entry.path}: {e}")


def find_duplicates(root_directory: Union[str, os.PathLike]) -> List[DuplicateGroup]:
    """
    Group files below ``root_directory`` by content digest.

    Args:
        root_directory: Directory to walk recursively

    Returns:
        One DuplicateGroup per digest shared by two or more files, in the
        order each digest was first seen

    Raises:
        OSError: If the root directory itself cannot be read
    """
    root = Path(root_directory).resolve()
    by_hash: Dict[str, List[str]] = {}

    for file_path in _iter_files(root):
        try:
            digest = hash_file(file_path)
        except OSError as e:
            get_error_tracker().record_error(
                component="downloads.duplicates",
                category=ErrorCategory.FILESYSTEM,
                severity=ErrorSeverity.LOW,
                message=f"Error hashing {file_path}: {e}",
                exception=e,
                context={"path": file_path},
            )
            continue

        by_hash.setdefault(digest, []).append(file_path)

    groups = []
    for digest, files in by_hash.items():
        if len(files) < 2:
            continue
        try:
            size = os.stat(files[0]).st_size
        except OSError as e:
            logger.warning(f"Could not stat {files[0]}: {e}")
            size = 0
        groups.append(DuplicateGroup(hash=digest, files=files, size=size))

    logger.info(
        f"Duplicate scan found {len(groups)} groups",
        extra={"root": str(root), "distinct_hashes": len(by_hash)},
    )
    return groups

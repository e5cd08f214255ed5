"""
Extension-based file categorisation.
"""

from pathlib import PurePath
from typing import Dict, Iterable, List

FALLBACK_CATEGORY = "other"


def _extension(filename: str) -> str:
    return PurePath(filename).suffix.lower()


def categorize_file(filename: str, categories: Dict[str, List[str]]) -> str:
    """Return the first category listing the file's extension, else 'other'."""
    extension = _extension(filename)

    for category, extensions in categories.items():
        if extension in (ext.lower() for ext in extensions):
            return category

    return FALLBACK_CATEGORY


def should_ignore_file(filename: str, ignored_extensions: Iterable[str]) -> bool:
    """True for partial downloads and other extensions the sorter must leave alone."""
    return _extension(filename) in {ext.lower() for ext in ignored_extensions}

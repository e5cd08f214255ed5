"""
JSON-backed history of files moved by the download sorter.
"""

import json
from pathlib import Path
from typing import List, Union
import os

from ..models.files import HistoryEntry
from ..utils.logging import get_logger

logger = get_logger("downloads.history")

MAX_HISTORY_ENTRIES = 1000


class HistoryStore:
    """
    Newest-first list of HistoryEntry records persisted to one JSON file.

    The sorter is the only writer; API handlers only read. The whole file is
    rewritten on every change.
    """

    def __init__(
        self,
        history_file: Union[str, os.PathLike],
        max_entries: int = MAX_HISTORY_ENTRIES,
    ):
        self.history_file = Path(history_file)
        self.max_entries = max_entries
        self._entries: List[HistoryEntry] = []
        self._load()

    def _load(self) -> None:
        if not self.history_file.exists():
            return

        try:
            with open(self.history_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._entries = [HistoryEntry.from_dict(item) for item in data]
            logger.debug(f"Loaded {len(self._entries)} history entries")
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Error loading history from {self.history_file}: {e}")
            self._entries = []

    def _save(self) -> None:
        try:
            self.history_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.history_file, "w", encoding="utf-8") as f:
                json.dump([entry.to_dict() for entry in self._entries], f, indent=2)
        except OSError as e:
            logger.error(f"Error saving history to {self.history_file}: {e}")

    def add(self, entry: HistoryEntry) -> None:
        self._entries.insert(0, entry)
        del self._entries[self.max_entries:]
        self._save()

    def recent(self, limit: int = 100) -> List[HistoryEntry]:
        return self._entries[:max(limit, 0)]

    def clear(self) -> None:
        self._entries = []
        self._save()

    def __len__(self) -> int:
        return len(self._entries)

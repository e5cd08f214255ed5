"""
Download folder sorter.

This module provides the DownloadSorter class, which moves new files from a
watched download directory into per-category directories, records each move
in the history store and keeps running counters.
"""

import asyncio
import os
import shutil
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from watchfiles import Change, awatch

from ..models.config import DownloadsConfig
from ..models.files import HistoryEntry, SortedFile, SortStats
from ..services.history_store import HistoryStore
from ..utils.error_handling import ErrorCategory, ErrorSeverity, get_error_tracker
from ..utils.hashing import hash_file
from ..utils.logging import get_logger
from .categorizer import FALLBACK_CATEGORY, categorize_file, should_ignore_file

logger = get_logger("downloads.sorter")

STABILITY_POLL_SECONDS = 0.1


class DownloadSorter:
    """Sorts downloaded files into category directories."""

    def __init__(self, config: DownloadsConfig, history: HistoryStore):
        """
        Initialize the sorter.

        Args:
            config: Download sorter configuration with absolute paths
            history: Store receiving one entry per moved file
        """
        self.config = config
        self.history = history
        self.watch_path = Path(config.watch_path).resolve()
        self.sorted_path = Path(config.sorted_path).resolve()
        self.stats = SortStats()
        self.is_watching = False

    @property
    def category_names(self) -> List[str]:
        return list(self.config.categories)

    def prepare_directories(self) -> None:
        """Create the watch, sorted and category directories."""
        for directory in [self.watch_path, self.sorted_path] + [
            self.sorted_path / category for category in self.category_names
        ]:
            if not directory.exists():
                directory.mkdir(parents=True, exist_ok=True)
                logger.info(f"Created directory: {directory}")

    def _is_inside_sorted(self, path: Path) -> bool:
        try:
            path.relative_to(self.sorted_path)
            return True
        except ValueError:
            return False

    def _is_hidden(self, path: Path) -> bool:
        try:
            parts = path.relative_to(self.watch_path).parts
        except ValueError:
            parts = (path.name,)
        return any(part.startswith(".") for part in parts)

    def should_sort(self, path: Union[str, os.PathLike]) -> bool:
        """Whether a newly seen path is a candidate for sorting."""
        file_path = Path(path).resolve()

        if self._is_inside_sorted(file_path) or self._is_hidden(file_path):
            return False

        if should_ignore_file(file_path.name, self.config.ignored_extensions):
            return False

        return file_path.is_file()

    @staticmethod
    def _free_destination(dest_dir: Path, filename: str) -> Path:
        """``dest_dir/filename``, or ``name_1.ext``, ``name_2.ext``... if taken."""
        destination = dest_dir / filename
        stem, suffix = os.path.splitext(filename)
        counter = 1
        while destination.exists():
            destination = dest_dir / f"{stem}_{counter}{suffix}"
            counter += 1
        return destination

    def sort_file(self, path: Union[str, os.PathLike]) -> Optional[HistoryEntry]:
        """
        Move one file into its category directory.

        Returns:
            The recorded HistoryEntry, or None when the file was skipped or
            could not be moved
        """
        file_path = Path(path).resolve()
        if not self.should_sort(file_path):
            return None

        filename = file_path.name
        category = categorize_file(filename, self.config.categories)
        dest_dir = self.sorted_path / category

        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            destination = self._free_destination(dest_dir, filename)

            file_hash = None
            if self.config.duplicate_check_enabled:
                try:
                    file_hash = hash_file(file_path)
                except OSError as e:
                    logger.error(f"Error hashing file {file_path}: {e}")

            shutil.move(str(file_path), str(destination))
            size = destination.stat().st_size
        except OSError as e:
            get_error_tracker().record_error(
                component="downloads.sorter",
                category=ErrorCategory.FILESYSTEM,
                severity=ErrorSeverity.MEDIUM,
                message=f"Error sorting {filename}: {e}",
                exception=e,
                context={"path": str(file_path)},
            )
            return None

        self.stats.record(category)
        entry = HistoryEntry(
            filename=filename,
            original_path=str(file_path),
            sorted_path=str(destination),
            category=category,
            size=size,
            hash=file_hash,
        )
        self.history.add(entry)

        logger.info(f"{filename} -> {category}/", extra={"destination": str(destination)})
        return entry

    def sort_existing(self) -> List[HistoryEntry]:
        """Sort files already sitting in the watch directory."""
        entries = []
        for root, dirs, files in os.walk(self.watch_path):
            root_path = Path(root)
            dirs[:] = sorted(
                d for d in dirs
                if not d.startswith(".") and not self._is_inside_sorted((root_path / d).resolve())
            )
            for name in sorted(files):
                entry = self.sort_file(root_path / name)
                if entry is not None:
                    entries.append(entry)
        return entries

    async def _wait_until_stable(self, path: Path) -> bool:
        """Wait until the file size stops changing for the stability threshold."""
        threshold = self.config.stability_threshold_ms / 1000
        last_size = -1
        stable_since = time.monotonic()

        while True:
            try:
                size = path.stat().st_size
            except OSError:
                return False

            now = time.monotonic()
            if size != last_size:
                last_size = size
                stable_since = now
            elif now - stable_since >= threshold:
                return True

            await asyncio.sleep(STABILITY_POLL_SECONDS)

    async def handle_added(self, path: Union[str, os.PathLike]) -> Optional[HistoryEntry]:
        """Sort a file reported by the watcher once writing has finished."""
        file_path = Path(path)
        if not self.should_sort(file_path):
            return None

        if not await self._wait_until_stable(file_path):
            return None

        return await asyncio.get_running_loop().run_in_executor(
            None, self.sort_file, file_path
        )

    async def watch(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Watch the download directory until ``stop_event`` is set."""
        self.is_watching = True
        logger.info(f"Watching {self.watch_path}", extra={"sorted_path": str(self.sorted_path)})

        try:
            async for changes in awatch(self.watch_path, stop_event=stop_event):
                for change, path in sorted(changes, key=lambda item: item[1]):
                    if change != Change.added:
                        continue
                    try:
                        await self.handle_added(path)
                    except Exception as e:
                        logger.error(f"Watcher error for {path}: {e}", exc_info=True)
        finally:
            self.is_watching = False

    def list_files(self, category: Optional[str] = None) -> List[SortedFile]:
        """Files in one category directory, or in every category plus 'other'."""
        if category and category != "all":
            categories = [category]
        else:
            categories = self.category_names + [FALLBACK_CATEGORY]

        files = []
        for name in categories:
            category_path = (self.sorted_path / name).resolve()
            if category_path.parent != self.sorted_path:
                logger.warning(f"Refusing to list outside the sorted directory: {name}")
                continue
            if not category_path.is_dir():
                continue
            for entry in sorted(os.scandir(category_path), key=lambda e: e.name):
                if not entry.is_file():
                    continue
                stat = entry.stat()
                files.append(
                    SortedFile(
                        name=entry.name,
                        path=entry.path,
                        category=name,
                        size=stat.st_size,
                        modified=datetime.fromtimestamp(stat.st_mtime),
                    )
                )
        return files

    def delete_file(self, category: str, filename: str) -> bool:
        """
        Delete a sorted file.

        Returns:
            True if deleted, False if it does not exist

        Raises:
            ValueError: If the path would leave the sorted directory
        """
        target = (self.sorted_path / category / filename).resolve()
        if target.parent.parent != self.sorted_path:
            raise ValueError("Invalid category or filename")

        if not target.is_file():
            return False

        target.unlink()
        logger.info(f"Deleted {category}/{filename}")
        return True

    def get_status(self) -> dict:
        return {
            "running": True,
            "watching": self.is_watching,
            "watch_path": str(self.watch_path),
            "sorted_path": str(self.sorted_path),
            "stats": self.stats.to_dict(),
        }

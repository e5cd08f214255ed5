"""
File data models for the download sorter and duplicate finder.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

SHA256_HEX_LENGTH = 64


@dataclass
class FileFingerprint:
    """Content identity of one file."""

    path: str
    hash: str
    size: int

    def validate(self) -> bool:
        """Validate fingerprint data."""
        if not self.path:
            raise ValueError("Fingerprint path cannot be empty")

        if len(self.hash) != SHA256_HEX_LENGTH:
            raise ValueError("Fingerprint hash must be a hex SHA-256 digest")

        if self.size < 0:
            raise ValueError("File size cannot be negative")

        return True


@dataclass
class DuplicateGroup:
    """Files sharing one content digest."""

    hash: str
    files: List[str]
    size: int

    @property
    def count(self) -> int:
        return len(self.files)

    def validate(self) -> bool:
        """Validate group data."""
        if len(self.files) < 2:
            raise ValueError("A duplicate group needs at least two files")

        if self.size < 0:
            raise ValueError("File size cannot be negative")

        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hash": self.hash,
            "files": list(self.files),
            "size": self.size,
            "count": self.count,
        }


@dataclass
class SortedFile:
    """A file sitting in a category directory."""

    name: str
    path: str
    category: str
    size: int
    modified: datetime

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["modified"] = self.modified.isoformat()
        return data


@dataclass
class HistoryEntry:
    """Record of one file moved by the sorter."""

    filename: str
    original_path: str
    sorted_path: str
    category: str
    size: int
    hash: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def validate(self) -> bool:
        """Validate history entry data."""
        if not self.filename or not self.filename.strip():
            raise ValueError("History entry filename cannot be empty")

        if not self.category:
            raise ValueError("History entry category cannot be empty")

        if self.size < 0:
            raise ValueError("File size cannot be negative")

        return True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        return cls(
            filename=data["filename"],
            original_path=data.get("original_path", ""),
            sorted_path=data.get("sorted_path", ""),
            category=data.get("category", "other"),
            size=int(data.get("size", 0)),
            hash=data.get("hash"),
            timestamp=data.get("timestamp") or datetime.now().isoformat(),
        )


@dataclass
class SortStats:
    """Counters kept by the sorter since start-up."""

    total_sorted: int = 0
    by_category: Dict[str, int] = field(default_factory=dict)

    def record(self, category: str) -> None:
        self.total_sorted += 1
        self.by_category[category] = self.by_category.get(category, 0) + 1

    def to_dict(self) -> Dict[str, Any]:
        return {"total_sorted": self.total_sorted, "by_category": dict(self.by_category)}

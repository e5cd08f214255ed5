"""
Listening port data models.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class PortEntry:
    """A listening socket and the process owning it."""

    port: int
    pid: int
    process: str
    protocol: str = "TCP"
    state: str = "LISTEN"
    user: Optional[str] = None

    def validate(self) -> bool:
        """Validate port entry data."""
        if not (0 < self.port <= 65535):
            raise ValueError(f"Port out of range: {self.port}")

        if self.pid < 0:
            raise ValueError("PID cannot be negative")

        return True

    @property
    def key(self) -> tuple:
        return (self.port, self.pid)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.user is None:
            del data["user"]
        return data


@dataclass
class PortConflict:
    """A listening port for which the user recorded an expectation."""

    port: int
    expected: Dict[str, Any]
    actual: PortEntry

    def to_dict(self) -> Dict[str, Any]:
        return {
            "port": self.port,
            "expected": self.expected,
            "actual": self.actual.to_dict(),
        }


@dataclass
class KillResult:
    """Outcome of terminating a process."""

    success: bool
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

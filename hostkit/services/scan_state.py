"""
Shared state of a periodic scanner.
"""

import threading
from datetime import datetime
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ScanState(Generic[T]):
    """
    Last result of a background scanner plus its "scan in progress" flag.

    Scans run on worker threads (executor jobs, background tasks and sync
    API handlers), so ``begin`` claims a non-blocking lock and ``complete``
    or ``fail`` releases it. At most one scan holds it at a time. API
    handlers only read ``result``, ``last_scan`` and ``scanning``.
    """

    def __init__(self, initial: T):
        self.result: T = initial
        self.last_scan: Optional[datetime] = None
        self._lock = threading.Lock()

    @property
    def scanning(self) -> bool:
        return self._lock.locked()

    def begin(self) -> bool:
        """Mark a scan as started; False if one is already running."""
        return self._lock.acquire(blocking=False)

    def complete(self, result: T) -> None:
        self.result = result
        self.last_scan = datetime.now()
        self._release()

    def fail(self) -> None:
        """End the running scan, keeping the previous result."""
        self._release()

    def _release(self) -> None:
        # complete() is also used to seed a result before any scan began
        if self._lock.locked():
            self._lock.release()

    @property
    def last_scan_iso(self) -> Optional[str]:
        return self.last_scan.isoformat() if self.last_scan else None

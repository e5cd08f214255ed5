"""
Listening port scanner.

This module provides the PortScanner class, which lists listening TCP
sockets with the owning process, and helpers to compare them against user
preferences and to terminate processes.
"""

import asyncio
import sys
from typing import Any, Dict, List, Optional

import psutil

from ..models.ports import KillResult, PortConflict, PortEntry
from ..services.scan_state import ScanState
from ..utils.commands import CommandError, check_output
from ..utils.error_handling import ErrorCategory, ErrorSeverity, get_error_tracker
from ..utils.logging import get_logger
from .port_parsers import parse_netstat_windows, parse_unix_output

logger = get_logger("ports.scanner")

UNIX_COMMANDS = [
    ["lsof", "-iTCP", "-sTCP:LISTEN", "-n", "-P"],
    ["netstat", "-tlnp"],
    ["ss", "-tlnp"],
]
WINDOWS_COMMAND = ["netstat", "-ano"]


def find_conflicts(
    ports: List[PortEntry], preferences: Dict[str, Dict[str, Any]]
) -> List[PortConflict]:
    """Listening ports that have a user preference recorded against them."""
    return [
        PortConflict(port=entry.port, expected=preferences[str(entry.port)], actual=entry)
        for entry in ports
        if str(entry.port) in preferences
    ]


def filter_range(ports: List[PortEntry], start: int = 1, end: int = 65535) -> List[PortEntry]:
    return [entry for entry in ports if start <= entry.port <= end]


class PortScanner:
    """Lists listening ports, keeping the last result for readers."""

    def __init__(self, scan_state: Optional[ScanState] = None, platform: Optional[str] = None):
        self.state: ScanState[List[PortEntry]] = scan_state or ScanState([])
        self.platform = platform or sys.platform

    def _read_unix(self) -> List[PortEntry]:
        last_error: Optional[CommandError] = None
        for command in UNIX_COMMANDS:
            try:
                output = check_output(command)
            except CommandError as e:
                last_error = e
                logger.debug(f"{command[0]} failed: {e}")
                continue
            if output.strip():
                return parse_unix_output(output)

        if last_error is not None:
            raise last_error
        return []

    def _read_windows(self) -> List[PortEntry]:
        entries = parse_netstat_windows(check_output(WINDOWS_COMMAND))
        for entry in entries:
            try:
                entry.process = psutil.Process(entry.pid).name()
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                pass
        return entries

    def list_listening(self) -> List[PortEntry]:
        """
        Run the platform's listing command and parse it.

        Raises:
            CommandError: If no listing command succeeded
            ValueError: If the platform is not supported
        """
        if self.platform.startswith(("linux", "darwin")):
            return self._read_unix()
        if self.platform.startswith("win32"):
            return self._read_windows()
        raise ValueError(f"Unsupported platform: {self.platform}")

    def scan(self) -> List[PortEntry]:
        """
        Refresh the listening ports.

        While another scan is running, or when this one fails, the previously
        cached result is returned instead.
        """
        if not self.state.begin():
            return self.state.result

        try:
            ports = self.list_listening()
        except Exception as e:
            self.state.fail()
            get_error_tracker().record_error(
                component="ports.scanner",
                category=ErrorCategory.SUBPROCESS,
                severity=ErrorSeverity.MEDIUM,
                message=f"Error scanning ports: {e}",
                exception=e,
            )
            return self.state.result

        self.state.complete(ports)
        logger.debug(f"Found {len(ports)} listening ports")
        return ports

    def cached(self) -> List[PortEntry]:
        return self.state.result

    def kill_process(self, pid: int) -> KillResult:
        """Forcefully terminate ``pid``."""
        try:
            psutil.Process(pid).kill()
        except psutil.Error as e:
            logger.warning(f"Failed to kill process {pid}: {e}")
            return KillResult(success=False, message=str(e) or f"Failed to kill process {pid}")

        logger.info(f"Process {pid} killed")
        return KillResult(success=True, message=f"Process {pid} killed")

    async def run_periodic(
        self, interval: float, stop_event: Optional[asyncio.Event] = None
    ) -> None:
        """Scan now and then every ``interval`` seconds until stopped."""
        stop_event = stop_event or asyncio.Event()
        loop = asyncio.get_running_loop()

        while not stop_event.is_set():
            await loop.run_in_executor(None, self.scan)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

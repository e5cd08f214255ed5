"""
Parsers for listening-socket listings (lsof, netstat, ss).

Every parser returns PortEntries deduplicated by (port, pid) and sorted by
port number.
"""

import re
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..models.ports import PortEntry

LSOF_LINE = re.compile(r"^(\S+)\s+(\d+)\s+(\S+).*:(\d+)\s+\(LISTEN\)")
NETSTAT_UNIX_LINE = re.compile(r"tcp6?\s+\d+\s+\d+\s+\S*:(\d+)\s+.*LISTEN\s+(\d+)/(\S+)")
SS_LINE = re.compile(r"LISTEN\s+\d+\s+\d+\s+\S*:(\d+)\s+.*users:\(\(\"([^\"]+)\",pid=(\d+)")
NETSTAT_WINDOWS_LINE = re.compile(r"TCP\s+\S*:(\d+)\s+.*LISTENING\s+(\d+)")

LineParser = Callable[[str], Optional[PortEntry]]


def _finish(entries: Iterable[PortEntry]) -> List[PortEntry]:
    unique: Dict[Tuple[int, int], PortEntry] = {}
    for entry in entries:
        if entry.key not in unique:
            unique[entry.key] = entry
    return sorted(unique.values(), key=lambda e: e.port)


def _lsof_line(line: str) -> Optional[PortEntry]:
    match = LSOF_LINE.match(line)
    if not match:
        return None
    command, pid, user, port = match.groups()
    return PortEntry(port=int(port), pid=int(pid), process=command, user=user)


def _netstat_unix_line(line: str) -> Optional[PortEntry]:
    match = NETSTAT_UNIX_LINE.search(line)
    if not match:
        return None
    port, pid, process = match.groups()
    return PortEntry(port=int(port), pid=int(pid), process=process)


def _ss_line(line: str) -> Optional[PortEntry]:
    match = SS_LINE.search(line)
    if not match:
        return None
    port, process, pid = match.groups()
    return PortEntry(port=int(port), pid=int(pid), process=process)


def _parse(output: str, line_parsers: List[LineParser]) -> List[PortEntry]:
    entries = []
    for line in output.splitlines():
        if not line or line.startswith(("COMMAND", "Proto")):
            continue
        for line_parser in line_parsers:
            entry = line_parser(line)
            if entry is not None:
                entries.append(entry)
                break
    return _finish(entries)


def parse_lsof(output: str) -> List[PortEntry]:
    """Parse ``lsof -iTCP -sTCP:LISTEN -n -P`` output."""
    return _parse(output, [_lsof_line])


def parse_netstat_unix(output: str) -> List[PortEntry]:
    """Parse ``netstat -tlnp`` output."""
    return _parse(output, [_netstat_unix_line])


def parse_ss(output: str) -> List[PortEntry]:
    """Parse ``ss -tlnp`` output."""
    return _parse(output, [_ss_line])


def parse_unix_output(output: str) -> List[PortEntry]:
    """Parse output of any Unix variant, trying each format per line."""
    return _parse(output, [_lsof_line, _netstat_unix_line, _ss_line])


def parse_netstat_windows(output: str) -> List[PortEntry]:
    """Parse ``netstat -ano`` output; process names are not available here."""
    entries = []
    for line in output.splitlines():
        match = NETSTAT_WINDOWS_LINE.search(line)
        if match:
            port, pid = match.groups()
            entries.append(
                PortEntry(port=int(port), pid=int(pid), process="Unknown", state="LISTENING")
            )
    return _finish(entries)

"""
Parsers for ARP / neighbour table dumps.

Each parser is a pure function from command output to ArpRecords,
deduplicated by MAC address in first-seen order.
"""

import re
import sys
from typing import Callable, Dict, Iterable, List, Optional

from ..models.network import ArpRecord

# hostname (192.168.1.1) at aa:bb:cc:dd:ee:ff [ether] on eth0
BSD_STYLE = re.compile(r"(\S+)\s+\(([0-9.]+)\)\s+at\s+([0-9a-f:]+)", re.IGNORECASE)

# 192.168.1.1 dev eth0 lladdr aa:bb:cc:dd:ee:ff REACHABLE
IP_NEIGH = re.compile(r"([0-9.]+)\s+dev\s+\S+\s+lladdr\s+([0-9a-f:]+)", re.IGNORECASE)

# 192.168.1.1           aa-bb-cc-dd-ee-ff     dynamic
WINDOWS = re.compile(r"([0-9.]+)\s+([0-9a-f]{2}(?:-[0-9a-f]{2}){5})\s+\w+", re.IGNORECASE)

ArpParser = Callable[[str], List[ArpRecord]]


def _hostname(value: str) -> Optional[str]:
    return None if value == "?" else value


def _dedupe(records: Iterable[ArpRecord]) -> List[ArpRecord]:
    seen: Dict[str, ArpRecord] = {}
    for record in records:
        if record.mac not in seen:
            seen[record.mac] = record
    return list(seen.values())


def parse_unix_arp(output: str) -> List[ArpRecord]:
    """Parse ``arp -a`` (net-tools) or ``ip neigh show`` output."""
    records = []
    for line in output.splitlines():
        match = BSD_STYLE.search(line)
        if match:
            hostname, ip, mac = match.groups()
            records.append(ArpRecord(ip=ip, mac=mac.lower(), hostname=_hostname(hostname)))
            continue

        match = IP_NEIGH.search(line)
        if match:
            ip, mac = match.groups()
            records.append(ArpRecord(ip=ip, mac=mac.lower()))

    return _dedupe(records)


def parse_darwin_arp(output: str) -> List[ArpRecord]:
    """Parse macOS ``arp -a`` output, ignoring incomplete entries."""
    records = []
    for line in output.splitlines():
        if "(incomplete)" in line:
            continue
        match = BSD_STYLE.search(line)
        if match:
            hostname, ip, mac = match.groups()
            records.append(ArpRecord(ip=ip, mac=mac.lower(), hostname=_hostname(hostname)))
    return _dedupe(records)


def parse_windows_arp(output: str) -> List[ArpRecord]:
    """Parse Windows ``arp -a`` output; MACs are normalised to colon form."""
    records = []
    for line in output.splitlines():
        match = WINDOWS.search(line)
        if match:
            ip, mac = match.groups()
            records.append(ArpRecord(ip=ip, mac=mac.replace("-", ":").lower()))
    return _dedupe(records)


PARSERS: Dict[str, ArpParser] = {
    "linux": parse_unix_arp,
    "darwin": parse_darwin_arp,
    "win32": parse_windows_arp,
}


def parser_for_platform(platform: Optional[str] = None) -> ArpParser:
    """
    Select the ARP parser for a ``sys.platform`` value.

    Raises:
        ValueError: If the platform is not supported
    """
    platform = platform or sys.platform
    for prefix, parser in PARSERS.items():
        if platform.startswith(prefix):
            return parser
    raise ValueError(f"Unsupported platform: {platform}")

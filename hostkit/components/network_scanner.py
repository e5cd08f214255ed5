"""
LAN device scanner.

This module provides the NetworkScanner class, which reads the operating
system's ARP table, enriches each neighbour with a hostname and vendor and
records the sightings in the device store.
"""

import asyncio
import re
import sys
from typing import List, Optional

from ..models.config import NetworkConfig
from ..models.network import ArpRecord, Device
from ..services.device_store import DeviceStore
from ..services.scan_state import ScanState
from ..utils.commands import CommandError, check_output, run_command
from ..utils.error_handling import ErrorCategory, ErrorSeverity, get_error_tracker
from ..utils.logging import get_logger
from .arp_parsers import parser_for_platform
from .mac_vendors import lookup_vendor, lookup_vendor_online

logger = get_logger("network.scanner")

HOST_POINTER = re.compile(r"domain name pointer (.+)\.")
NSLOOKUP_NAME = re.compile(r"Name:\s+(.+)")


class NetworkScanner:
    """Scans the ARP table and feeds the device store."""

    def __init__(
        self,
        config: NetworkConfig,
        device_store: DeviceStore,
        scan_state: Optional[ScanState] = None,
        platform: Optional[str] = None,
    ):
        """
        Initialize the scanner.

        Args:
            config: Network monitor configuration
            device_store: Store receiving every sighting
            scan_state: Shared last-scan state; created when omitted
            platform: ``sys.platform`` value to scan for
        """
        self.config = config
        self.device_store = device_store
        self.state: ScanState[List[Device]] = scan_state or ScanState([])
        self.platform = platform or sys.platform
        self.parser = parser_for_platform(self.platform)

    @property
    def is_windows(self) -> bool:
        return self.platform.startswith("win32")

    def read_arp_table(self) -> str:
        """
        Dump the neighbour table.

        On Linux ``ip neigh show`` is used when ``arp`` is missing or prints
        nothing.
        """
        commands = [["arp", "-a"]]
        if self.platform.startswith("linux"):
            commands.append(["ip", "neigh", "show"])

        output = ""
        for index, command in enumerate(commands):
            try:
                output = check_output(command)
            except CommandError:
                if index == len(commands) - 1:
                    raise
                logger.debug(f"{command[0]} unavailable, trying {commands[index + 1][0]}")
                continue
            if output.strip():
                break
        return output

    def resolve_hostname(self, ip: str) -> Optional[str]:
        """Reverse-resolve ``ip``; None when the lookup fails."""
        if self.is_windows:
            command, pattern = ["nslookup", ip], NSLOOKUP_NAME
        else:
            command, pattern = ["host", ip], HOST_POINTER

        try:
            result = run_command(command)
        except CommandError as e:
            logger.debug(f"Hostname lookup unavailable for {ip}: {e}")
            return None

        match = pattern.search(result.stdout)
        return match.group(1).strip() if match else None

    def vendor_for(self, mac: str) -> str:
        if self.config.vendor_lookup_online:
            return lookup_vendor_online(mac)
        return lookup_vendor(mac)

    def _enrich(self, record: ArpRecord) -> ArpRecord:
        if record.hostname is None and self.config.resolve_hostnames:
            record.hostname = self.resolve_hostname(record.ip)
        return record

    def scan(self) -> List[Device]:
        """
        Run one scan.

        Returns:
            Devices seen in this scan, or an empty list when a scan is
            already running or the scan failed
        """
        if not self.state.begin():
            logger.info("Scan already in progress, skipping")
            return []

        logger.info("Scanning network")
        try:
            records = self.parser(self.read_arp_table())
            devices = []
            for record in records:
                record = self._enrich(record)
                devices.append(
                    self.device_store.update_device(
                        record.mac,
                        record.ip,
                        hostname=record.hostname,
                        vendor=self.vendor_for(record.mac),
                    )
                )
        except Exception as e:
            self.state.fail()
            get_error_tracker().record_error(
                component="network.scanner",
                category=ErrorCategory.SUBPROCESS,
                severity=ErrorSeverity.MEDIUM,
                message=f"Scan error: {e}",
                exception=e,
            )
            return []

        self.state.complete(devices)
        logger.info(f"Scan complete: found {len(devices)} devices")
        return devices

    async def run_periodic(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Scan now and then every ``scan_interval`` seconds until stopped."""
        stop_event = stop_event or asyncio.Event()
        loop = asyncio.get_running_loop()

        while not stop_event.is_set():
            await loop.run_in_executor(None, self.scan)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.config.scan_interval)
            except asyncio.TimeoutError:
                pass

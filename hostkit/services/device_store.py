"""
JSON-backed store of LAN devices and new-device alerts.
"""

import json
import os
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Union

from dateutil import parser as date_parser

from ..models.network import Device, DeviceAlert
from ..utils.logging import get_logger

logger = get_logger("network.devices")

MAX_ALERTS = 50


class DeviceStore:
    """
    Known devices keyed by lowercase MAC address.

    The network scanner is the single writer of device sightings; API
    handlers read, rename devices and clear the "new" flags. Scans and
    handlers run on worker threads, so every access holds ``_lock`` and
    readers get snapshot lists. The devices file is rewritten wholesale after
    every change.
    """

    def __init__(self, devices_file: Union[str, os.PathLike], max_alerts: int = MAX_ALERTS):
        self.devices_file = Path(devices_file)
        self.max_alerts = max_alerts
        self._devices: Dict[str, Device] = {}
        self._alerts: List[DeviceAlert] = []
        self._lock = threading.RLock()
        self.load()

    def load(self) -> None:
        if not self.devices_file.exists():
            return

        try:
            with open(self.devices_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            devices = {
                mac: Device.from_dict(device)
                for mac, device in data.get("devices", {}).items()
            }
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"Error loading devices from {self.devices_file}: {e}")
            devices = {}

        with self._lock:
            self._devices = devices
        logger.info(f"Loaded {len(devices)} known devices")

    def save(self) -> None:
        with self._lock:
            data = {
                "devices": {mac: d.to_dict() for mac, d in self._devices.items()},
                "last_saved": datetime.now().isoformat(),
            }
            try:
                self.devices_file.parent.mkdir(parents=True, exist_ok=True)
                with open(self.devices_file, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
            except OSError as e:
                logger.error(f"Error saving devices to {self.devices_file}: {e}")

    def update_device(
        self,
        mac: str,
        ip: str,
        hostname: Optional[str] = None,
        vendor: str = "Unknown",
        seen_at: Optional[datetime] = None,
    ) -> Device:
        """Record a sighting; the first sighting of a MAC raises an alert."""
        mac = mac.lower()
        now = (seen_at or datetime.now()).isoformat()

        with self._lock:
            device = self._devices.get(mac)

            if device is None:
                device = Device(
                    mac=mac,
                    ip=ip,
                    hostname=hostname,
                    vendor=vendor,
                    first_seen=now,
                    last_seen=now,
                    is_new=True,
                )
                self._devices[mac] = device
                self._alerts.insert(
                    0, DeviceAlert(type="new_device", device=device, timestamp=now)
                )
                del self._alerts[self.max_alerts:]
                logger.info(f"New device detected: {ip} ({mac})", extra={"vendor": vendor})
            else:
                device.ip = ip
                device.hostname = hostname
                device.vendor = vendor
                device.last_seen = now
                device.is_new = False

            self.save()
        return device

    def get(self, mac: str) -> Optional[Device]:
        with self._lock:
            return self._devices.get(mac.lower())

    def all(self) -> List[Device]:
        with self._lock:
            return list(self._devices.values())

    def online(self, timeout_minutes: int = 5, now: Optional[datetime] = None) -> List[Device]:
        """Devices seen within the last ``timeout_minutes``."""
        return self._online(self.all(), timeout_minutes, now)

    @staticmethod
    def _online(
        devices: List[Device], timeout_minutes: int, now: Optional[datetime] = None
    ) -> List[Device]:
        cutoff = (now or datetime.now()) - timedelta(minutes=timeout_minutes)
        result = []
        for device in devices:
            if not device.last_seen:
                continue
            try:
                last_seen = date_parser.isoparse(device.last_seen)
            except ValueError:
                logger.warning(f"Unparseable last_seen for {device.mac}: {device.last_seen}")
                continue
            if last_seen.tzinfo is not None:
                last_seen = last_seen.replace(tzinfo=None)
            if last_seen > cutoff:
                result.append(device)
        return result

    def set_name(self, mac: str, name: str) -> bool:
        with self._lock:
            device = self._devices.get(mac.lower())
            if device is None:
                return False
            device.custom_name = name
            self.save()
        return True

    def alerts(self, limit: int = 20) -> List[DeviceAlert]:
        with self._lock:
            return self._alerts[:max(limit, 0)]

    def clear_new_flags(self) -> None:
        with self._lock:
            for device in self._devices.values():
                device.is_new = False
            self.save()

    def stats(self, timeout_minutes: int = 5) -> Dict[str, int]:
        with self._lock:
            devices = list(self._devices.values())
            recent_alerts = len(self._alerts)

        online = len(self._online(devices, timeout_minutes))
        return {
            "total": len(devices),
            "online": online,
            "offline": len(devices) - online,
            "new": sum(1 for d in devices if d.is_new),
            "recent_alerts": recent_alerts,
        }

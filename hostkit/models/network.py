"""
LAN device data models.
"""

import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

MAC_PATTERN = re.compile(r"^([0-9a-f]{1,2}:){5}[0-9a-f]{1,2}$")


@dataclass
class ArpRecord:
    """One neighbour parsed from an ARP table dump."""

    ip: str
    mac: str
    hostname: Optional[str] = None


@dataclass
class Device:
    """A device known to the network monitor, keyed by MAC address."""

    mac: str
    ip: str
    hostname: Optional[str] = None
    vendor: str = "Unknown"
    custom_name: Optional[str] = None
    first_seen: Optional[str] = None
    last_seen: Optional[str] = None
    is_new: bool = False

    def validate(self) -> bool:
        """Validate device data."""
        if not MAC_PATTERN.match(self.mac):
            raise ValueError(f"Invalid MAC address: {self.mac}")

        if not self.ip:
            raise ValueError("Device IP cannot be empty")

        return True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Device":
        return cls(
            mac=data["mac"],
            ip=data.get("ip", ""),
            hostname=data.get("hostname"),
            vendor=data.get("vendor") or "Unknown",
            custom_name=data.get("custom_name"),
            first_seen=data.get("first_seen"),
            last_seen=data.get("last_seen"),
            is_new=bool(data.get("is_new", False)),
        )


@dataclass
class DeviceAlert:
    """Notification raised the first time a MAC address is seen."""

    type: str
    device: Device
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "device": self.device.to_dict(),
            "timestamp": self.timestamp,
        }

"""
MAC address vendor lookup.

A small offline OUI table covering common consumer hardware, with an
optional online lookup against macvendors.com.
"""

import requests

from ..utils.logging import get_logger

logger = get_logger("network.vendors")

UNKNOWN_VENDOR = "Unknown"
ONLINE_LOOKUP_URL = "https://api.macvendors.com/{prefix}"

_OUI_BY_VENDOR = {
    "Apple": [
        "00:03:93", "00:0a:27", "00:0a:95", "00:0d:93", "00:16:cb", "00:17:f2",
        "00:1b:63", "00:1c:b3", "00:1d:4f", "00:1e:52", "00:1f:5b", "00:1f:f3",
        "00:21:e9", "00:22:41", "00:23:12", "00:23:32", "00:23:6c", "00:23:df",
        "00:24:36", "00:25:00", "00:25:4b", "00:25:bc", "00:26:08", "00:26:4a",
        "00:26:b0", "00:26:bb",
    ],
    "Samsung": [
        "00:00:f0", "00:07:ab", "00:12:fb", "00:13:77", "00:15:b9", "00:16:32",
        "00:16:6b", "00:16:6c", "00:17:c9", "00:17:d5", "00:18:af", "00:1a:8a",
    ],
    "Google": ["00:1a:11", "3c:5a:b4", "f4:f5:d8"],
    "Amazon": ["00:71:47", "68:37:e9", "f0:d2:f1"],
    "Roku": ["00:0d:4b", "b0:a7:37", "dc:3a:5e"],
    "TP-Link": ["00:27:19", "50:c7:bf", "f4:ec:38"],
    "Raspberry Pi": ["b8:27:eb", "dc:a6:32"],
    "Intel": ["00:02:b3", "00:03:47", "00:04:23", "00:0e:0c"],
    "Microsoft": ["00:03:ff", "00:0d:3a", "00:12:5a"],
    "Sony": ["00:04:1f", "00:0a:d9", "00:13:15"],
    "Xiaomi": ["34:ce:00", "64:09:80", "78:11:dc"],
}

MAC_VENDORS = {
    prefix: vendor for vendor, prefixes in _OUI_BY_VENDOR.items() for prefix in prefixes
}


def lookup_vendor(mac: str) -> str:
    """Vendor for the first three octets of ``mac``, or "Unknown"."""
    if not mac:
        return UNKNOWN_VENDOR
    return MAC_VENDORS.get(mac.lower()[:8], UNKNOWN_VENDOR)


def lookup_vendor_online(mac: str, timeout: float = 5.0) -> str:
    """Ask macvendors.com, falling back to the offline table."""
    if not mac:
        return UNKNOWN_VENDOR

    prefix = mac.replace(":", "").replace("-", "")[:6]
    try:
        response = requests.get(ONLINE_LOOKUP_URL.format(prefix=prefix), timeout=timeout)
        if response.ok and response.text.strip():
            return response.text.strip()
    except requests.RequestException as e:
        logger.debug(f"Online vendor lookup failed for {mac}: {e}")

    return lookup_vendor(mac)

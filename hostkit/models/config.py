"""
Configuration models for the system.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def default_categories() -> Dict[str, List[str]]:
    return {
        "images": [".jpg", ".jpeg", ".png", ".gif", ".bmp", ".svg", ".webp", ".heic"],
        "documents": [".pdf", ".doc", ".docx", ".txt", ".md", ".odt", ".rtf", ".xls", ".xlsx", ".ppt", ".pptx", ".csv"],
        "videos": [".mp4", ".mkv", ".avi", ".mov", ".wmv", ".webm"],
        "audio": [".mp3", ".wav", ".flac", ".aac", ".ogg", ".m4a"],
        "archives": [".zip", ".tar", ".gz", ".rar", ".7z", ".bz2", ".xz"],
        "installers": [".exe", ".msi", ".dmg", ".pkg", ".deb", ".rpm", ".appimage"],
        "code": [".py", ".js", ".ts", ".json", ".html", ".css", ".sh", ".yaml", ".yml"],
    }


def _validate_port(port: Any, label: str) -> None:
    if not isinstance(port, int) or not (0 < port <= 65535):
        raise ValueError(f"{label} port must be an integer between 1 and 65535")


def _validate_name_list(values: Any, label: str) -> None:
    if not isinstance(values, list):
        raise ValueError(f"{label} must be a list")

    for value in values:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"All {label} must be non-empty strings")


@dataclass
class DownloadsConfig:
    """Configuration for the download sorter."""

    watch_path: str = "downloads"
    sorted_path: str = "downloads/sorted"
    categories: Dict[str, List[str]] = field(default_factory=default_categories)
    ignored_extensions: List[str] = field(
        default_factory=lambda: [".crdownload", ".part", ".tmp", ".download"]
    )
    duplicate_check_enabled: bool = True
    stability_threshold_ms: int = 2000
    history_file: str = "data/history.json"
    port: int = 3001

    def validate(self) -> bool:
        """Validate download sorter configuration."""
        if not self.watch_path or not self.sorted_path:
            raise ValueError("watch_path and sorted_path cannot be empty")

        if not isinstance(self.categories, dict) or not self.categories:
            raise ValueError("At least one download category must be configured")

        for category, extensions in self.categories.items():
            if not category or category == "other":
                raise ValueError("Category names must be non-empty and not 'other'")
            _validate_name_list(extensions, f"extensions of '{category}'")
            for extension in extensions:
                if not extension.startswith("."):
                    raise ValueError(f"Extension must start with '.': {extension}")

        _validate_name_list(self.ignored_extensions, "ignored extensions")

        if not isinstance(self.stability_threshold_ms, int) or self.stability_threshold_ms < 0:
            raise ValueError("stability_threshold_ms must be a non-negative integer")

        _validate_port(self.port, "Downloads")
        return True


@dataclass
class BranchesConfig:
    """Configuration for the git branch cleaner."""

    scan_path: str = "."
    base_branches: List[str] = field(
        default_factory=lambda: ["main", "master", "develop"]
    )
    protected_branches: List[str] = field(
        default_factory=lambda: ["main", "master", "develop", "staging", "production"]
    )
    show_unmerged: bool = True
    port: int = 3002

    def validate(self) -> bool:
        """Validate branch cleaner configuration."""
        if not self.scan_path:
            raise ValueError("scan_path cannot be empty")

        _validate_name_list(self.base_branches, "base branches")
        if not self.base_branches:
            raise ValueError("At least one base branch must be configured")

        _validate_name_list(self.protected_branches, "protected branches")
        _validate_port(self.port, "Branches")
        return True


@dataclass
class NetworkConfig:
    """Configuration for the LAN device monitor."""

    scan_interval: int = 60  # seconds
    enable_alerts: bool = True
    alert_sound: bool = False
    auto_scan: bool = True
    online_timeout_minutes: int = 5
    devices_file: str = "data/devices.json"
    resolve_hostnames: bool = True
    vendor_lookup_online: bool = False
    port: int = 3003

    def validate(self) -> bool:
        """Validate network monitor configuration."""
        if not isinstance(self.scan_interval, int) or self.scan_interval <= 0:
            raise ValueError("Network scan interval must be a positive integer")

        if self.scan_interval < 10:
            raise ValueError("Network scan interval must be at least 10 seconds")

        if (
            not isinstance(self.online_timeout_minutes, int)
            or self.online_timeout_minutes <= 0
        ):
            raise ValueError("online_timeout_minutes must be a positive integer")

        if not self.devices_file:
            raise ValueError("devices_file cannot be empty")

        _validate_port(self.port, "Network")
        return True


@dataclass
class ScanRange:
    """A named port range shown by the port inspector."""

    name: str
    start: int
    end: int

    def validate(self) -> bool:
        if not self.name:
            raise ValueError("Scan range name cannot be empty")

        if not (1 <= self.start <= self.end <= 65535):
            raise ValueError(f"Invalid scan range {self.start}-{self.end}")

        return True


def default_scan_ranges() -> List[ScanRange]:
    return [
        ScanRange(name="Web development", start=3000, end=3999),
        ScanRange(name="Alternative HTTP", start=8000, end=8999),
        ScanRange(name="Databases", start=5000, end=6999),
    ]


@dataclass
class PortsConfig:
    """Configuration for the listening port inspector."""

    refresh_interval: int = 30  # seconds
    scan_ranges: List[ScanRange] = field(default_factory=default_scan_ranges)
    preferences_file: str = "data/preferences.json"
    default_preferences_file: str = ""
    port: int = 3004

    def validate(self) -> bool:
        """Validate port inspector configuration."""
        if not isinstance(self.refresh_interval, int) or self.refresh_interval <= 0:
            raise ValueError("Port refresh interval must be a positive integer")

        for scan_range in self.scan_ranges:
            scan_range.validate()

        if not self.preferences_file:
            raise ValueError("preferences_file cannot be empty")

        _validate_port(self.port, "Ports")
        return True


@dataclass
class LoggingConfig:
    """Logging settings."""

    log_dir: str = "logs"
    log_level: str = "INFO"

    def validate(self) -> bool:
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"Log level must be one of: {VALID_LOG_LEVELS}")
        return True


@dataclass
class ServerConfig:
    """HTTP server settings shared by every tool."""

    host: str = "127.0.0.1"

    def validate(self) -> bool:
        if not self.host:
            raise ValueError("Server host cannot be empty")
        return True


@dataclass
class Configuration:
    """System configuration."""

    downloads: DownloadsConfig = field(default_factory=DownloadsConfig)
    branches: BranchesConfig = field(default_factory=BranchesConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    ports: PortsConfig = field(default_factory=PortsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    def validate(self) -> bool:
        """Validate every section."""
        self.downloads.validate()
        self.branches.validate()
        self.network.validate()
        self.ports.validate()
        self.logging.validate()
        self.server.validate()

        tool_ports = [
            self.downloads.port,
            self.branches.port,
            self.network.port,
            self.ports.port,
        ]
        if len(set(tool_ports)) != len(tool_ports):
            raise ValueError("Each tool must listen on a distinct port")

        return True

"""
Configuration management for hostkit.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..models.config import (
    BranchesConfig,
    Configuration,
    DownloadsConfig,
    LoggingConfig,
    NetworkConfig,
    PortsConfig,
    ScanRange,
    ServerConfig,
    default_categories,
    default_scan_ranges,
)


class ConfigurationManager:
    """Manages loading, validation, and reloading of system configuration."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file. If None, uses default paths.
        """
        self.config_path = config_path or self._find_config_file()
        self._config: Optional[Configuration] = None
        self._last_modified: Optional[float] = None

    def _find_config_file(self) -> str:
        """Find the configuration file in standard locations."""
        possible_paths = [
            "config/config.yaml",
            "config/config.yml",
            "config/config.json",
            "config.yaml",
            "config.yml",
            "config.json",
        ]

        for path in possible_paths:
            if os.path.exists(path):
                return path

        if os.path.exists("config/config.example.yaml"):
            raise ValueError(
                "No configuration file found. Please copy 'config/config.example.yaml' "
                "to 'config/config.yaml' and customize it for your needs."
            )

        raise ValueError(
            "No configuration file found. Please create a configuration file "
            "at one of these locations: " + ", ".join(possible_paths)
        )

    @property
    def base_dir(self) -> Path:
        """Directory relative paths in the configuration are resolved against."""
        return Path(self.config_path).resolve().parent

    def _read_raw(self, config_path: str) -> Dict[str, Any]:
        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.endswith(".json"):
                raw_config = json.load(f)
            else:
                raw_config = yaml.safe_load(f)
        if raw_config is None:
            return {}
        if not isinstance(raw_config, dict):
            raise ValueError("Configuration root must be a mapping")
        return raw_config

    def load_config(self) -> Configuration:
        """
        Load configuration from file.

        Returns:
            Configuration object with validated settings.

        Raises:
            ValueError: If configuration is invalid or file cannot be read.
            FileNotFoundError: If configuration file doesn't exist.
        """
        if not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            raw_config = self._read_raw(self.config_path)
            raw_config = self._expand_env_vars(raw_config)
            config = self._parse_config(raw_config)
            config.validate()

            self._config = config
            self._last_modified = os.path.getmtime(self.config_path)

            return config

        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {e}")
        except Exception as e:
            raise ValueError(f"Error loading configuration: {e}")

    def _expand_env_vars(self, obj: Any) -> Any:
        """Recursively expand ${VAR_NAME} values from the environment."""
        if isinstance(obj, dict):
            return {key: self._expand_env_vars(value) for key, value in obj.items()}
        elif isinstance(obj, list):
            return [self._expand_env_vars(item) for item in obj]
        elif isinstance(obj, str):
            if obj.startswith("${") and obj.endswith("}"):
                var_name = obj[2:-1]
                env_value = os.getenv(var_name)
                if env_value is None:
                    raise ValueError(f"Environment variable '{var_name}' not found")
                return env_value
            return os.path.expanduser(obj) if obj.startswith("~") else obj
        else:
            return obj

    def _resolve_path(self, value: str) -> str:
        path = Path(value)
        if not path.is_absolute():
            path = self.base_dir / path
        return str(path)

    def _parse_config(self, raw_config: Dict[str, Any]) -> Configuration:
        """Parse raw configuration dictionary into Configuration object."""
        downloads_data = raw_config.get("downloads") or {}
        downloads = DownloadsConfig(
            watch_path=self._resolve_path(downloads_data.get("watch_path", "downloads")),
            sorted_path=self._resolve_path(
                downloads_data.get("sorted_path", "downloads/sorted")
            ),
            categories=downloads_data.get("categories") or default_categories(),
            ignored_extensions=downloads_data.get(
                "ignored_extensions", DownloadsConfig().ignored_extensions
            ),
            duplicate_check_enabled=downloads_data.get("duplicate_check_enabled", True),
            stability_threshold_ms=downloads_data.get("stability_threshold_ms", 2000),
            history_file=self._resolve_path(
                downloads_data.get("history_file", "data/history.json")
            ),
            port=downloads_data.get("port", 3001),
        )

        branches_data = raw_config.get("branches") or {}
        branch_defaults = BranchesConfig()
        branches = BranchesConfig(
            scan_path=self._resolve_path(branches_data.get("scan_path", ".")),
            base_branches=branches_data.get("base_branches", branch_defaults.base_branches),
            protected_branches=branches_data.get(
                "protected_branches", branch_defaults.protected_branches
            ),
            show_unmerged=branches_data.get("show_unmerged", True),
            port=branches_data.get("port", 3002),
        )

        network_data = raw_config.get("network") or {}
        network = NetworkConfig(
            scan_interval=network_data.get("scan_interval", 60),
            enable_alerts=network_data.get("enable_alerts", True),
            alert_sound=network_data.get("alert_sound", False),
            auto_scan=network_data.get("auto_scan", True),
            online_timeout_minutes=network_data.get("online_timeout_minutes", 5),
            devices_file=self._resolve_path(
                network_data.get("devices_file", "data/devices.json")
            ),
            resolve_hostnames=network_data.get("resolve_hostnames", True),
            vendor_lookup_online=network_data.get("vendor_lookup_online", False),
            port=network_data.get("port", 3003),
        )

        ports_data = raw_config.get("ports") or {}
        if "scan_ranges" in ports_data:
            scan_ranges = [
                ScanRange(name=item["name"], start=item["start"], end=item["end"])
                for item in ports_data["scan_ranges"]
            ]
        else:
            scan_ranges = default_scan_ranges()
        default_preferences = ports_data.get("default_preferences_file", "")
        ports = PortsConfig(
            refresh_interval=ports_data.get("refresh_interval", 30),
            scan_ranges=scan_ranges,
            preferences_file=self._resolve_path(
                ports_data.get("preferences_file", "data/preferences.json")
            ),
            default_preferences_file=(
                self._resolve_path(default_preferences) if default_preferences else ""
            ),
            port=ports_data.get("port", 3004),
        )

        logging_data = raw_config.get("logging") or {}
        logging_config = LoggingConfig(
            log_dir=self._resolve_path(logging_data.get("log_dir", "logs")),
            log_level=logging_data.get("log_level", "INFO"),
        )

        server_data = raw_config.get("server") or {}
        server = ServerConfig(host=server_data.get("host", "127.0.0.1"))

        return Configuration(
            downloads=downloads,
            branches=branches,
            network=network,
            ports=ports,
            logging=logging_config,
            server=server,
        )

    def get_config(self) -> Configuration:
        """
        Get current configuration, loading if necessary.

        Returns:
            Current configuration object.
        """
        if self._config is None:
            return self.load_config()
        return self._config

    def reload_if_changed(self) -> bool:
        """
        Reload configuration if file has been modified.

        Returns:
            True if configuration was reloaded, False otherwise.
        """
        if not os.path.exists(self.config_path):
            return False

        current_modified = os.path.getmtime(self.config_path)

        if self._last_modified is None or current_modified > self._last_modified:
            try:
                self.load_config()
                return True
            except ValueError:
                # keep the last good configuration
                return False

        return False

    def validate_config_file(self, config_path: str) -> bool:
        """
        Validate a configuration file without making it current.

        Raises:
            ValueError: If configuration is invalid with detailed error message.
        """
        if not os.path.exists(config_path):
            raise ValueError(f"Configuration file not found: {config_path}")

        try:
            raw_config = self._read_raw(config_path)
            try:
                raw_config = self._expand_env_vars(raw_config)
            except ValueError:
                # missing env vars are tolerated when only validating
                pass

            self._parse_config(raw_config).validate()
            return True

        except Exception as e:
            raise ValueError(f"Configuration validation failed: {e}")

    def get_config_template(self) -> Dict[str, Any]:
        """
        Get a template configuration dictionary.

        Returns:
            Dictionary with example configuration structure.
        """
        return {
            "server": {"host": "127.0.0.1"},
            "logging": {"log_dir": "logs", "log_level": "INFO"},
            "downloads": {
                "watch_path": "~/Downloads",
                "sorted_path": "~/Downloads/sorted",
                "categories": default_categories(),
                "ignored_extensions": [".crdownload", ".part", ".tmp", ".download"],
                "duplicate_check_enabled": True,
                "stability_threshold_ms": 2000,
                "history_file": "data/history.json",
                "port": 3001,
            },
            "branches": {
                "scan_path": "~/projects",
                "base_branches": ["main", "master", "develop"],
                "protected_branches": ["main", "master", "develop", "staging", "production"],
                "show_unmerged": True,
                "port": 3002,
            },
            "network": {
                "scan_interval": 60,
                "enable_alerts": True,
                "alert_sound": False,
                "auto_scan": True,
                "online_timeout_minutes": 5,
                "devices_file": "data/devices.json",
                "resolve_hostnames": True,
                "vendor_lookup_online": False,
                "port": 3003,
            },
            "ports": {
                "refresh_interval": 30,
                "scan_ranges": [
                    {"name": r.name, "start": r.start, "end": r.end}
                    for r in default_scan_ranges()
                ],
                "preferences_file": "data/preferences.json",
                "port": 3004,
            },
        }

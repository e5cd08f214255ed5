"""
User expectations about which process should own a port.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..utils.logging import get_logger

logger = get_logger("ports.preferences")

Preferences = Dict[str, Dict[str, Any]]


class PreferenceStore:
    """
    Port preferences keyed by port number (as a string), persisted as JSON.

    Reads fall back to ``default_file`` until the user saves preferences of
    their own.
    """

    def __init__(
        self,
        preferences_file: Union[str, os.PathLike],
        default_file: Optional[Union[str, os.PathLike]] = None,
    ):
        self.preferences_file = Path(preferences_file)
        self.default_file = Path(default_file) if default_file else None

    def load(self) -> Preferences:
        """
        Load preferences.

        Raises:
            ValueError: If the preferences file holds invalid JSON
        """
        for path in (self.preferences_file, self.default_file):
            if path is not None and path.exists():
                with open(path, "r", encoding="utf-8") as f:
                    try:
                        data = json.load(f)
                    except json.JSONDecodeError as e:
                        raise ValueError(f"Invalid JSON in {path}: {e}") from e
                if not isinstance(data, dict):
                    raise ValueError(f"Preferences in {path} must be a JSON object")
                return data
        return {}

    def save(self, preferences: Preferences) -> None:
        if not isinstance(preferences, dict):
            raise ValueError("Preferences must be an object keyed by port")

        self.preferences_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.preferences_file, "w", encoding="utf-8") as f:
            json.dump(preferences, f, indent=2)
        logger.info(f"Saved {len(preferences)} port preferences")

    def set(self, port: Union[int, str], preference: Dict[str, Any]) -> None:
        preferences = self.load()
        preferences[str(port)] = preference
        self.save(preferences)

    def delete(self, port: Union[int, str]) -> bool:
        preferences = self.load()
        if str(port) not in preferences:
            return False
        del preferences[str(port)]
        self.save(preferences)
        return True

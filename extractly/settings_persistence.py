"""Persistent per-list user preferences.

Preferences such as the page size of the key points table or the
directory exports are written to are stored in a JSON file in the
OS-appropriate config directory, indexed by list name.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import DashboardConstants

logger = logging.getLogger(__name__)


class SettingsPersistence:
    """Manages persistent storage of per-list settings."""

    def __init__(self, config_dir: Optional[Path] = None):
        self._config_dir = config_dir or Path(platformdirs.user_config_dir("extractly"))
        self._settings_file = self._config_dir / "settings.json"
        self._settings_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @property
    def settings_file(self) -> Path:
        return self._settings_file

    def _load_all_settings(self) -> Dict[str, Dict[str, Any]]:
        """Load all settings from disk, or an empty dict if unreadable."""
        if self._settings_cache is not None:
            return self._settings_cache

        data: Any = {}
        if self._settings_file.exists():
            try:
                with open(self._settings_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Could not load settings from {self._settings_file}: {e}")
                data = {}

        if not isinstance(data, dict):
            logger.warning("Settings file has invalid format (not a dict), ignoring")
            data = {}
        self._settings_cache = data
        return self._settings_cache

    def _save_all_settings(self, settings: Dict[str, Dict[str, Any]]) -> bool:
        """Write all settings atomically (temp file + rename)."""
        temp_file = self._settings_file.with_suffix('.tmp')
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(settings, f, indent=2)
            temp_file.replace(self._settings_file)
        except OSError as e:
            logger.warning(f"Could not save settings to {self._settings_file}: {e}")
            try:
                if temp_file.exists():
                    temp_file.unlink()
            except OSError:
                pass
            return False

        self._settings_cache = settings
        return True

    def load_settings(self, list_name: str) -> Dict[str, Any]:
        """Load the settings of one list view.

        Args:
            list_name: e.g. "key_points" or "history".

        Returns:
            A copy of the stored settings, or an empty dict.
        """
        list_settings = self._load_all_settings().get(list_name, {})
        if not isinstance(list_settings, dict):
            logger.warning(f"Settings for {list_name} are not a dict, ignoring")
            return {}
        return list_settings.copy()

    def save_settings(self, list_name: str, settings: Dict[str, Any]) -> bool:
        """Replace the stored settings of one list view.

        Invalid values are dropped with a warning before saving.
        """
        valid = {}
        for key, value in settings.items():
            if self.validate_setting(key, value):
                valid[key] = value
            else:
                logger.warning(f"Ignoring invalid setting {key}={value!r} for {list_name}")

        all_settings = dict(self._load_all_settings())
        all_settings[list_name] = valid
        return self._save_all_settings(all_settings)

    def get_page_size(self, list_name: str, default: int) -> int:
        value = self.load_settings(list_name).get("page_size")
        if value is None or not self.validate_setting("page_size", value):
            return default
        return value

    def validate_setting(self, key: str, value: Any) -> bool:
        """Validate a setting value. Unknown keys are accepted."""
        if value is None:
            return True

        if key == 'page_size':
            # bool is an int subclass; reject it explicitly
            if not isinstance(value, int) or isinstance(value, bool):
                return False
            return DashboardConstants.MIN_PAGE_SIZE <= value <= DashboardConstants.MAX_PAGE_SIZE

        if key == 'export_directory':
            return isinstance(value, str)

        return True

    def clear_cache(self) -> None:
        """Clear the in-memory cache of settings."""
        self._settings_cache = None


_persistence: Optional[SettingsPersistence] = None


def get_persistence() -> SettingsPersistence:
    """Get the global settings persistence instance."""
    global _persistence
    if _persistence is None:
        _persistence = SettingsPersistence()
    return _persistence

"""
Application settings and configuration.

Settings are persisted as JSON in the per-user data directory:

- Windows: %APPDATA%/LocalLow/kapeviewer/settings.json
- macOS: ~/Library/Application Support/kapeviewer/settings.json
- Linux: ~/.config/kapeviewer/settings.json

Example:
    from kapeviewer.config.settings import get_settings, get_settings_manager

    settings = get_settings()
    print(settings.max_workers)

    # Update settings (auto-saves)
    manager = get_settings_manager()
    manager.update(max_workers=4)
    manager.add_recent_case_folder("/cases/host01")
"""

import json
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional

from ..infrastructure.paths import get_settings_file_path


@dataclass
class AppSettings:
    """Application-wide settings."""

    # Logging settings
    log_level: int = logging.INFO
    log_to_file: bool = True
    log_file_path: Optional[Path] = None  # None = log.txt in the data directory

    # Timeline settings
    max_workers: int = 0  # 0 = pick automatically from the CPU count

    # Recent case folders
    recent_case_folders: list[str] = field(default_factory=list)
    max_recent_items: int = 10


def _to_posix(path) -> str:
    return str(Path(path)).replace('\\', '/')


class SettingsManager:
    """
    Manages loading and saving application settings.
    """

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize the settings manager.

        Args:
            config_file: Path to configuration file. If None, uses default location.
        """
        if config_file is None:
            config_file = get_settings_file_path()

        self.config_file = config_file
        self._settings = AppSettings()
        self._logger = logging.getLogger(__name__)

    def load(self) -> AppSettings:
        """
        Load settings from configuration file.

        Unknown keys are ignored; a missing or corrupt file leaves the
        defaults in place.

        Returns:
            The loaded settings object.
        """
        if not self.config_file.exists():
            self._logger.info(f"Settings file not found at {self.config_file}, using defaults")
            return self._settings

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)

            if data.get('log_file_path'):
                data['log_file_path'] = Path(data['log_file_path'])

            if data.get('recent_case_folders'):
                data['recent_case_folders'] = [_to_posix(p) for p in data['recent_case_folders']]

            for key, value in data.items():
                if hasattr(self._settings, key):
                    setattr(self._settings, key, value)

            self._logger.info(f"Settings loaded from {self.config_file}")

        except json.JSONDecodeError as e:
            self._logger.error(f"Failed to parse settings file: {e}. Using defaults.")
        except OSError as e:
            self._logger.error(f"Failed to load settings: {e}. Using defaults.")

        return self._settings

    def save(self, settings: Optional[AppSettings] = None) -> None:
        """
        Save settings to configuration file.

        Args:
            settings: Settings object to save. If None, saves current settings.
        """
        if settings is not None:
            self._settings = settings

        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)

            data = asdict(self._settings)
            if data.get('log_file_path'):
                data['log_file_path'] = _to_posix(data['log_file_path'])

            # Atomic write: write to temp file, then rename
            temp_file = self.config_file.with_suffix('.tmp')
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)

            temp_file.replace(self.config_file)

            self._logger.info(f"Settings saved to {self.config_file}")

        except (OSError, TypeError) as e:
            self._logger.error(f"Failed to save settings: {e}")

    def get(self) -> AppSettings:
        """
        Get the current settings.

        Returns:
            The current settings object.
        """
        return self._settings

    def update(self, **kwargs) -> None:
        """
        Update specific settings and auto-save.

        Args:
            **kwargs: Setting names and values to update.
        """
        for key, value in kwargs.items():
            if hasattr(self._settings, key):
                setattr(self._settings, key, value)
            else:
                self._logger.warning(f"Ignoring unknown setting: {key}")

        self.save()

    def add_recent_case_folder(self, path: str) -> None:
        """
        Move a case folder to the front of the recent list and auto-save.

        Args:
            path: Path to the case folder.
        """
        normalized_path = _to_posix(path)
        recent = self._settings.recent_case_folders

        if normalized_path in recent:
            recent.remove(normalized_path)
        recent.insert(0, normalized_path)

        del recent[self._settings.max_recent_items:]

        self.save()

    def reset_to_defaults(self) -> None:
        """Reset all settings to their default values and save."""
        self._settings = AppSettings()
        self.save()


# Global settings instance
_settings_manager: Optional[SettingsManager] = None


def get_settings_manager() -> SettingsManager:
    """
    Get the global settings manager instance.

    Returns:
        The global SettingsManager.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
        _settings_manager.load()
    return _settings_manager


def get_settings() -> AppSettings:
    """
    Get the current application settings.

    Returns:
        The current AppSettings object.
    """
    return get_settings_manager().get()

"""
User settings stored as TOML in the application data directory.

Only logging behaviour is configurable here; the parameter block registry
itself takes no configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import rtoml

from extrinsic_cal import APP_SETTINGS_PATH, LOG_DIR

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SettingsError(Exception):
    """Raised when the settings file cannot be read, written or validated."""

    pass


@dataclass
class Settings:
    log_level: str = "INFO"
    log_to_file: bool = True
    log_dir: Path = field(default_factory=lambda: LOG_DIR)

    def __post_init__(self) -> None:
        self.log_level = str(self.log_level).upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise SettingsError(f"Invalid log level {self.log_level!r}; expected one of {VALID_LOG_LEVELS}")
        self.log_dir = Path(self.log_dir)

    def to_dict(self) -> dict:
        return {
            "log_level": self.log_level,
            "log_to_file": self.log_to_file,
            "log_dir": str(self.log_dir),
        }


def load_settings(path: Path = APP_SETTINGS_PATH) -> Settings:
    """
    Load settings from a TOML file.

    A missing file yields default settings. Keys other than those on
    `Settings` are ignored.

    Raises:
        SettingsError: If the file is not valid TOML or holds an invalid value
    """
    if not path.exists():
        logger.info(f"No settings file at {path}; using defaults")
        return Settings()

    try:
        data = rtoml.load(path)
    except Exception as e:
        raise SettingsError(f"Failed to load settings from {path}: {e}") from e

    known = {key: data[key] for key in ("log_level", "log_to_file", "log_dir") if key in data}
    return Settings(**known)


def save_settings(settings: Settings, path: Path = APP_SETTINGS_PATH) -> None:
    """
    Save settings to a TOML file, creating parent directories as needed.

    Raises:
        SettingsError: If the write fails
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            rtoml.dump(settings.to_dict(), f)
    except Exception as e:
        raise SettingsError(f"Failed to write {path}: {e}") from e
    logger.info(f"Saved settings to {path}")

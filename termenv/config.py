"""User settings loading and validation."""

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from .errors import ConfigError, format_field_error

_logging = logging.getLogger(__name__)

KNOWN_KEYS = {"notes_dir", "backup_dir", "package_manager", "skip_casks"}

DEFAULT_SETTINGS_TEXT = """\
# termenv settings
#
# notes_dir: where the notes skeleton lives (default ~/notes)
# backup_dir: parent directory for per-run backups (default ~/.termenv/backups)
# package_manager: brew or apt
# skip_casks: skip Nerd Font casks during a full install
notes_dir: ~/notes
backup_dir: ~/.termenv/backups
package_manager: brew
skip_casks: false
"""


@dataclass
class Settings:
    """Validated user settings. Empty values fall back to context defaults."""
    notes_dir: str | None = None
    backup_dir: str | None = None
    package_manager: str = "brew"
    skip_casks: bool = False

    def __post_init__(self):
        if not self.package_manager or not isinstance(self.package_manager, str):
            raise ValueError("package_manager must be a non-empty string")
        if not isinstance(self.skip_casks, bool):
            raise ValueError("skip_casks must be a boolean")


def validate_settings(data) -> Settings:
    """Validate and convert a raw mapping to Settings.

    Raises:
        ConfigError: If validation fails, naming the offending field
    """
    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ConfigError(f"Settings must be a mapping, got {type(data).__name__}")

    unknown = sorted(set(data) - KNOWN_KEYS)
    if unknown:
        _logging.warning(f"Ignoring unknown settings: {', '.join(unknown)}")

    for key in ("notes_dir", "backup_dir", "package_manager"):
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            raise ConfigError(format_field_error("Settings", key, "must be a string"))

    try:
        return Settings(
            notes_dir=data.get("notes_dir"),
            backup_dir=data.get("backup_dir"),
            package_manager=data.get("package_manager") or "brew",
            skip_casks=data.get("skip_casks", False),
        )
    except ValueError as e:
        raise ConfigError(f"Settings: {e}")


def load_settings(path: Path) -> Settings:
    """Load settings from a YAML file. A missing file yields defaults."""
    if not path.exists():
        _logging.debug(f"No settings file at {path}, using defaults")
        return Settings()

    try:
        text = path.read_text(encoding="utf-8")
    except PermissionError:
        raise ConfigError(f"Permission denied reading settings file: {path}")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Error reading settings file {path}: {e}")

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Settings syntax error in {path}: {e}") from e

    return validate_settings(data)


def write_default_settings(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_SETTINGS_TEXT, encoding="utf-8")


__all__ = [
    "Settings",
    "validate_settings",
    "load_settings",
    "write_default_settings",
    "DEFAULT_SETTINGS_TEXT",
]

"""Filesystem context for one termenv run.

Every probe, mutation and component operation receives an EnvContext instead
of reading HOME or PATH from the process environment, so a whole run can be
pointed at a fabricated root.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from .execution import CommandRunner, run_command

MANAGED_TAG = "managed by termenv"


def get_home() -> Path:
    """Return the home root, honouring TERMENV_HOME."""
    if os.environ.get("TERMENV_HOME"):
        return Path(os.environ["TERMENV_HOME"]).expanduser()
    return Path.home()


def get_config_dir(home: Path | None = None) -> Path:
    """Return XDG-style config directory: ~/.config/termenv"""
    return (home or get_home()) / ".config" / "termenv"


def get_config_path(home: Path | None = None) -> Path:
    """Return path to the user settings file.

    Priority:
    1. TERMENV_CONFIG environment variable (if set)
    2. ~/.config/termenv/config.yaml
    """
    if os.environ.get("TERMENV_CONFIG"):
        return Path(os.environ["TERMENV_CONFIG"]).expanduser()
    return get_config_dir(home) / "config.yaml"


@dataclass(frozen=True)
class EnvContext:
    home: Path
    path_env: str
    notes_dir: Path
    backup_parent: Path
    package_manager: str = "brew"
    skip_casks: bool = False
    runner: CommandRunner = run_command
    started: datetime = field(default_factory=datetime.now)

    @property
    def state_dir(self) -> Path:
        return self.home / ".termenv"

    @property
    def version_file(self) -> Path:
        return self.state_dir / "version.json"

    @property
    def zshrc(self) -> Path:
        return self.home / ".zshrc"

    @property
    def nvim_dir(self) -> Path:
        return self.home / ".config" / "nvim"

    @property
    def nvim_init(self) -> Path:
        return self.nvim_dir / "init.lua"

    def resolve(self, relative: str) -> Path:
        """Resolve a payload path relative to the home root."""
        path = Path(relative).expanduser()
        if path.is_absolute():
            return path
        return self.home / path


def build_context(settings=None, home: Path | None = None, **overrides) -> EnvContext:
    """Build the run context from settings and the process environment."""
    home = home or get_home()
    notes_dir = home / "notes"
    backup_parent = home / ".termenv" / "backups"
    package_manager = "brew"
    skip_casks = False

    if settings is not None:
        if settings.notes_dir:
            notes_dir = _under_home(settings.notes_dir, home)
        if settings.backup_dir:
            backup_parent = _under_home(settings.backup_dir, home)
        package_manager = settings.package_manager
        skip_casks = settings.skip_casks

    values = dict(
        home=home,
        path_env=os.environ.get("PATH", os.defpath),
        notes_dir=notes_dir,
        backup_parent=backup_parent,
        package_manager=package_manager,
        skip_casks=skip_casks,
    )
    values.update(overrides)
    return EnvContext(**values)


def _under_home(value: str, home: Path) -> Path:
    if value.startswith("~/"):
        return home / value[2:]
    path = Path(value)
    return path if path.is_absolute() else home / path


__all__ = [
    "MANAGED_TAG",
    "EnvContext",
    "build_context",
    "get_home",
    "get_config_dir",
    "get_config_path",
]

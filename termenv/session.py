"""Per-run handle passed to component operations."""

import logging
import os
import shutil
import stat
from pathlib import Path
from typing import Callable

from . import console
from .backup import BackupManager
from .errors import MutationError
from .execution import DEFAULT_TIMEOUT
from .models import InstallStyle, MutationResult, RunReport
from .mutator import Mutator
from .paths import EnvContext

_logging = logging.getLogger(__name__)

ConfirmFn = Callable[[str], bool]


def _always(_question: str) -> bool:
    return True


class Session:
    """Everything a component needs to inspect and change one machine.

    Filesystem changes are recorded on the report; external commands are
    listed separately so that best-effort installs do not count as changes.
    """

    def __init__(
        self,
        ctx: EnvContext,
        backups: BackupManager,
        report: RunReport,
        style: InstallStyle | None = None,
        confirm: ConfirmFn | None = None,
        full_uninstall: bool = False,
    ):
        self.ctx = ctx
        self.backups = backups
        self.mutator = Mutator(backups)
        self.report = report
        self.style = style
        self.confirm = confirm or _always
        self.full_uninstall = full_uninstall

    @property
    def clean(self) -> bool:
        return self.style == InstallStyle.CLEAN

    def record(self, result: MutationResult) -> MutationResult:
        if result.changed:
            self.report.changes.append(result)
            console.success(f"{result.detail}: {result.target}")
        else:
            _logging.debug(f"{result.target}: {result.detail}")
        return result

    def warn(self, message: str) -> None:
        self.report.warnings.append(message)
        console.warning(message)

    def write(self, content: str, path: Path) -> MutationResult:
        return self.record(self.mutator.write_file(content, path))

    def ensure_directory(self, path: Path) -> MutationResult:
        if path.is_dir():
            return self.record(MutationResult(path, False, "directory exists"))
        if path.exists():
            raise MutationError(f"{path} exists but is not a directory")
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MutationError(f"could not create {path}: {e}") from e
        self.backups.mark_created(path)
        return self.record(MutationResult(path, True, "created directory"))

    def make_executable(self, path: Path) -> MutationResult:
        if not path.is_file():
            return self.record(MutationResult(path, False, "file missing"))
        if os.access(path, os.X_OK):
            return self.record(MutationResult(path, False, "already executable"))
        self.backups.backup(path)
        try:
            mode = path.stat().st_mode
            path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        except OSError as e:
            raise MutationError(f"could not chmod {path}: {e}") from e
        return self.record(MutationResult(path, True, "made executable"))

    def remove(self, path: Path) -> MutationResult:
        """Back up, then delete a file or directory tree."""
        if not path.exists() and not path.is_symlink():
            return self.record(MutationResult(path, False, "already absent"))
        self.backups.backup(path)
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink()
        except OSError as e:
            raise MutationError(f"could not remove {path}: {e}") from e
        return self.record(MutationResult(path, True, "removed"))

    def prune_empty(self, path: Path) -> MutationResult:
        """Remove `path` if it is an empty directory."""
        if not path.is_dir() or any(path.iterdir()):
            return self.record(MutationResult(path, False, "kept"))
        try:
            path.rmdir()
        except OSError as e:
            raise MutationError(f"could not remove {path}: {e}") from e
        return self.record(MutationResult(path, True, "removed empty directory"))

    def run(self, command: str, timeout: int = DEFAULT_TIMEOUT) -> bool:
        """Run a best-effort external command; failure becomes a warning."""
        self.report.commands.append(command)
        console.info(f"Running: {command}")
        output, returncode = self.ctx.runner(command, timeout)
        if returncode != 0:
            detail = output.strip().splitlines()[-1] if output.strip() else "no output"
            self.warn(f"Command failed ({returncode}): {command}: {detail}")
            return False
        return True


__all__ = ["Session", "ConfirmFn"]

"""Snapshot-before-mutate backups.

All backups taken during one invocation land under a single timestamped root
so a run can be restored as a unit. Paths under the home directory keep their
home-relative layout inside the root; other paths keep their base name.
"""

import json
import logging
import shutil
from datetime import datetime
from pathlib import Path

from .errors import BackupError, MutationError
from .models import BackupRecord, MutationResult

MANIFEST_NAME = "manifest.json"

_logging = logging.getLogger(__name__)


def _exists(path: Path) -> bool:
    return path.exists() or path.is_symlink()


def _links_to_file(path: Path) -> bool:
    return path.is_symlink() and path.is_file()


class BackupManager:
    def __init__(self, root: Path, home: Path | None = None):
        self.root = root
        self.home = home
        self.records: list[BackupRecord] = []
        self._sources: set[Path] = set()
        self._created: set[Path] = set()

    @classmethod
    def for_run(
        cls, parent: Path, started: datetime, home: Path | None = None
    ) -> "BackupManager":
        """Pick a fresh per-run root; nothing is created until first use."""
        stem = f"backup_{started:%Y%m%d_%H%M%S}"
        root = parent / stem
        counter = 1
        while root.exists():
            root = parent / f"{stem}_{counter}"
            counter += 1
        return cls(root, home=home)

    @property
    def used(self) -> bool:
        return self.root.exists()

    def _destination(self, path: Path) -> Path:
        if self.home is not None:
            try:
                return self.root / path.relative_to(self.home)
            except ValueError:
                pass
        return self.root / path.name

    def covering(self, path: Path) -> BackupRecord | None:
        """Return a record that already holds the pre-run state of `path`."""
        for record in self.records:
            if record.source == path:
                return record
            if record.kind == "directory" and record.source in path.parents:
                return BackupRecord(
                    source=path,
                    backup=record.backup / path.relative_to(record.source),
                    timestamp=record.timestamp,
                    kind="directory" if path.is_dir() else "file",
                )
        return None

    def mark_created(self, path: Path) -> None:
        """Note that `path` did not exist before this run."""
        self._created.add(path)

    def created(self, path: Path) -> bool:
        return path in self._created or any(parent in self._created for parent in path.parents)

    def _ignore_recorded(self, directory: str, names: list[str]) -> set[str]:
        return {name for name in names if Path(directory) / name in self._sources}

    def backup(self, path: Path) -> BackupRecord | None:
        """Copy `path` into the run root.

        No-op for a missing path and for anything this run created. A symlink
        to a file is stored as the content it points at.

        Raises:
            BackupError: If the copy fails; the caller must not mutate `path`
        """
        if not _exists(path) or self.created(path):
            return None

        existing = self.covering(path)
        if existing is not None:
            return existing

        destination = self._destination(path)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            if path.is_dir() and not path.is_symlink():
                shutil.copytree(
                    path,
                    destination,
                    symlinks=True,
                    dirs_exist_ok=True,
                    ignore=self._ignore_recorded,
                )
                kind = "directory"
            else:
                shutil.copy2(path, destination, follow_symlinks=path.is_file())
                kind = "file"
        except (OSError, shutil.Error) as e:
            raise BackupError(f"could not back up {path} to {destination}: {e}") from e

        record = BackupRecord(
            source=path,
            backup=destination,
            timestamp=datetime.now().isoformat(timespec="seconds"),
            kind=kind,
        )
        self.records.append(record)
        self._sources.add(path)
        _logging.debug(f"Backed up {path} -> {destination}")
        return record

    def safe_update(self, content: str, target: Path) -> MutationResult:
        """Back up `target` if present, then overwrite it with `content`."""
        if target.is_file():
            try:
                if target.read_text(encoding="utf-8") == content:
                    return MutationResult(target, False, "content unchanged")
            except (OSError, UnicodeDecodeError):
                pass

        existed = _exists(target)
        self.backup(target)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as e:
            raise MutationError(f"could not write {target}: {e}") from e
        if not existed:
            self.mark_created(target)
        return MutationResult(target, True, "replaced file" if existed else "created file")

    def write_manifest(self) -> Path | None:
        if not self.records:
            return None
        manifest = self.root / MANIFEST_NAME
        data = {
            "created": datetime.now().isoformat(timespec="seconds"),
            "home": str(self.home) if self.home else None,
            "records": [record.to_dict() for record in self.records],
        }
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            manifest.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        except OSError as e:
            raise BackupError(f"could not write backup manifest {manifest}: {e}") from e
        return manifest

    def write_summary(self, name: str, text: str) -> Path:
        """Store a diagnostic text file next to this run's backups."""
        target = self.root / name
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        except OSError as e:
            raise BackupError(f"could not write {target}: {e}") from e
        return target


def read_manifest(run_dir: Path) -> list[BackupRecord]:
    manifest = run_dir / MANIFEST_NAME
    if not manifest.is_file():
        raise BackupError(f"no {MANIFEST_NAME} in {run_dir}")
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
        return [BackupRecord.from_dict(item) for item in data["records"]]
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise BackupError(f"unreadable backup manifest {manifest}: {e}") from e


def restore(run_dir: Path, backups: BackupManager) -> list[Path]:
    """Copy every path recorded in `run_dir` back to where it came from.

    The current state of each path is snapshotted through `backups` first.
    Directories are restored before files so that a file backed up ahead of
    its parent directory wins.
    """
    records = read_manifest(run_dir)
    records.sort(key=lambda r: (r.kind != "directory", len(r.source.parts)))

    restored = []
    for record in records:
        if not _exists(record.backup):
            raise BackupError(f"backup copy missing: {record.backup}")
        backups.backup(record.source)
        try:
            linked = _links_to_file(record.source)
            if record.kind == "file" and linked and not record.backup.is_symlink():
                # keep the link, restore what it points at
                shutil.copyfile(record.backup, record.source)
            else:
                if record.source.is_dir() and not record.source.is_symlink():
                    shutil.rmtree(record.source)
                elif _exists(record.source):
                    record.source.unlink()
                record.source.parent.mkdir(parents=True, exist_ok=True)
                if record.kind == "directory":
                    shutil.copytree(record.backup, record.source, symlinks=True)
                else:
                    shutil.copy2(record.backup, record.source, follow_symlinks=False)
        except (OSError, shutil.Error) as e:
            raise MutationError(f"could not restore {record.source}: {e}") from e
        restored.append(record.source)
    return restored


__all__ = [
    "MANIFEST_NAME",
    "BackupManager",
    "read_manifest",
    "restore",
]

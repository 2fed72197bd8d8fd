"""Persisted record of the last successful full or minimal run."""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

from packaging import version as pkg_version

from .errors import MutationError
from .models import VersionRecord

_logging = logging.getLogger(__name__)


class VersionTracker:
    def __init__(self, path: Path):
        self.path = path

    def record(self, version: str, mode: str) -> VersionRecord:
        """Write the version file atomically: temp file, fsync, rename."""
        record = VersionRecord(
            version=version,
            timestamp=datetime.now().isoformat(timespec="seconds"),
            mode=mode,
        )
        payload = json.dumps(
            {"version": record.version, "timestamp": record.timestamp, "mode": record.mode},
            indent=2,
        )
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                delete=False,
            ) as f:
                f.write(payload + "\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(f.name, self.path)
        except OSError as e:
            raise MutationError(f"could not write version file {self.path}: {e}") from e
        _logging.debug(f"Recorded version {version} ({mode}) in {self.path}")
        return record

    def read(self) -> VersionRecord | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return VersionRecord(
                version=str(data["version"]),
                timestamp=str(data["timestamp"]),
                mode=str(data["mode"]),
            )
        except (OSError, ValueError, KeyError, TypeError) as e:
            _logging.warning(f"Ignoring unreadable version file {self.path}: {e}")
            return None


def is_outdated(record: VersionRecord | None, current: str) -> bool:
    """True when nothing is recorded or the recorded version is older than `current`."""
    if record is None:
        return True
    try:
        return pkg_version.parse(record.version) < pkg_version.parse(current)
    except pkg_version.InvalidVersion:
        return record.version != current


__all__ = ["VersionTracker", "is_outdated"]

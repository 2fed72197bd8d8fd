"""Data models shared across the engine."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class ProbeKind(Enum):
    EXECUTABLE = "executable"
    FILE = "file"
    DIRECTORY = "directory"
    SHELL_FUNCTION = "shell-function"
    SHELL_ALIAS = "shell-alias"


class InstallStyle(Enum):
    CLEAN = "clean"
    PRESERVE = "preserve"


class Mode(Enum):
    FULL = "full"
    MINIMAL = "minimal"
    FIX = "fix"
    UNINSTALL = "uninstall"
    COMPONENT = "component"


class RunState(Enum):
    IDLE = "idle"
    SELECTING_MODE = "selecting-mode"
    BACKING_UP = "backing-up"
    APPLYING = "applying"
    VERIFYING = "verifying"
    RECORDING = "recording"
    DONE = "done"
    ABORTED = "aborted"


@dataclass(frozen=True)
class ModeSpec:
    mode: Mode
    description: str
    style: InstallStyle | None = None
    records_version: bool = False


MODES: dict[Mode, ModeSpec] = {
    Mode.FULL: ModeSpec(Mode.FULL, "Full installation (all components)", InstallStyle.CLEAN, True),
    Mode.MINIMAL: ModeSpec(Mode.MINIMAL, "Minimal update (configurations only)", InstallStyle.PRESERVE, True),
    Mode.FIX: ModeSpec(Mode.FIX, "Fix and repair existing installation"),
    Mode.UNINSTALL: ModeSpec(Mode.UNINSTALL, "Uninstall managed configuration"),
    Mode.COMPONENT: ModeSpec(Mode.COMPONENT, "Install selected components only", InstallStyle.CLEAN),
}


@dataclass(frozen=True)
class ProbeResult:
    target: str
    kind: ProbeKind
    present: bool
    diagnostic: str


@dataclass(frozen=True)
class BackupRecord:
    source: Path
    backup: Path
    timestamp: str
    kind: str

    def to_dict(self) -> dict:
        return {
            "source": str(self.source),
            "backup": str(self.backup),
            "timestamp": self.timestamp,
            "kind": self.kind,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BackupRecord":
        return cls(
            source=Path(data["source"]),
            backup=Path(data["backup"]),
            timestamp=data["timestamp"],
            kind=data["kind"],
        )


@dataclass(frozen=True)
class MutationResult:
    target: Path
    changed: bool
    detail: str = ""


@dataclass(frozen=True)
class VersionRecord:
    version: str
    timestamp: str
    mode: str


@dataclass
class RunReport:
    mode: str
    state: RunState = RunState.IDLE
    components: list[str] = field(default_factory=list)
    changes: list[MutationResult] = field(default_factory=list)
    commands: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    failed_probes: list[ProbeResult] = field(default_factory=list)
    backup_dir: Path | None = None
    version_recorded: bool = False
    cancelled: bool = False

    @property
    def aborted(self) -> bool:
        return self.state == RunState.ABORTED

    @property
    def passed(self) -> bool:
        return self.state == RunState.DONE and not self.failed_probes


__all__ = [
    "ProbeKind",
    "InstallStyle",
    "Mode",
    "RunState",
    "ModeSpec",
    "MODES",
    "ProbeResult",
    "BackupRecord",
    "MutationResult",
    "VersionRecord",
    "RunReport",
]

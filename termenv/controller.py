"""Mode state machine driving the component registry for one invocation."""

import logging
from typing import Iterable

import click

from . import __version__, console
from .backup import BackupManager
from .components import Component
from .errors import BackupError, ConfigError, EngineError, format_suggestion
from .models import MODES, InstallStyle, Mode, RunReport, RunState
from .paths import EnvContext
from .registry import ComponentRegistry, default_registry
from .session import ConfirmFn, Session
from .versions import VersionTracker

_logging = logging.getLogger(__name__)

DIAGNOSTICS_NAME = "diagnostics.txt"


def _ask(question: str) -> bool:
    return click.confirm(question, default=False)


def _yes(question: str) -> bool:
    return True


class ModeController:
    """Runs one mode over the registry.

    idle -> selecting-mode -> backing-up -> applying -> verifying -> recording
    -> done, with aborted reachable from every step on a fatal EngineError.
    """

    def __init__(
        self,
        ctx: EnvContext,
        registry: ComponentRegistry | None = None,
        tracker: VersionTracker | None = None,
        confirm: ConfirmFn | None = None,
        version: str = __version__,
    ):
        self.ctx = ctx
        self.registry = registry or default_registry()
        self.tracker = tracker or VersionTracker(ctx.version_file)
        self.confirm = confirm or _ask
        self.version = version

    def run(
        self,
        mode: Mode,
        components: Iterable[str] = (),
        *,
        full_uninstall: bool = False,
        assume_yes: bool = False,
    ) -> RunReport:
        behaviour = MODES[mode]
        requested = list(components)
        report = RunReport(mode=mode.value)
        backups = BackupManager.for_run(self.ctx.backup_parent, self.ctx.started, self.ctx.home)
        confirm = _yes if assume_yes else self.confirm
        session = Session(self.ctx, backups, report, behaviour.style, confirm, full_uninstall)

        try:
            report.state = RunState.SELECTING_MODE
            selected = self._select(requested, report)
            self.registry.validate(selected)
            report.components = [component.name for component in selected]
            if requested and not selected:
                report.state = RunState.DONE
                return report

            if mode == Mode.UNINSTALL and not confirm(self._uninstall_question(full_uninstall)):
                console.info("Uninstall cancelled")
                report.cancelled = True
                report.state = RunState.DONE
                return report

            report.state = RunState.BACKING_UP
            if behaviour.style == InstallStyle.CLEAN or mode == Mode.UNINSTALL:
                self._backup_managed(selected, backups)

            report.state = RunState.APPLYING
            self._apply(mode, selected, session)

            if mode != Mode.UNINSTALL:
                report.state = RunState.VERIFYING
                self._verify(selected, report)

            if mode == Mode.FIX:
                backups.write_summary(DIAGNOSTICS_NAME, self._diagnostics(selected, report))

            if behaviour.records_version and not requested and not report.failed_probes:
                report.state = RunState.RECORDING
                self.tracker.record(self.version, mode.value)
                report.version_recorded = True

            report.state = RunState.DONE
        except (EngineError, ConfigError) as e:
            _logging.debug(f"Aborting {mode.value} run", exc_info=True)
            report.errors.append(str(e))
            report.state = RunState.ABORTED
            console.error(str(e))
        finally:
            try:
                backups.write_manifest()
            except BackupError as e:
                report.errors.append(str(e))
                console.error(str(e))
            if backups.used:
                report.backup_dir = backups.root

        return report

    def _select(self, requested: list[str], report: RunReport) -> list[Component]:
        if not requested:
            return self.registry.resolve()
        ids = []
        for name in requested:
            component_id = self.registry.lookup(name)
            if component_id is None:
                message = format_suggestion(
                    f"unknown component '{name}'",
                    f"choose from {', '.join(self.registry.names())}",
                )
                report.errors.append(message)
                console.error(message)
                continue
            ids.append(component_id)
        return self.registry.resolve(ids) if ids else []

    @staticmethod
    def _uninstall_question(full_uninstall: bool) -> str:
        if full_uninstall:
            return "Remove termenv configuration, plugins and tools?"
        return "Remove termenv-managed configuration files?"

    def _backup_managed(self, selected: list[Component], backups: BackupManager) -> None:
        for component in selected:
            for path in component.managed_paths(self.ctx):
                backups.backup(path)

    def _apply(self, mode: Mode, selected: list[Component], session: Session) -> None:
        if mode == Mode.UNINSTALL:
            for component in reversed(selected):
                console.header(f"Uninstalling {component.name}")
                component.uninstall(session)
            return

        for component in selected:
            if mode == Mode.FIX:
                console.header(f"Repairing {component.name}")
                component.fix(session)
            else:
                console.header(f"Installing {component.name}: {component.description}")
                component.install(session)

    def _verify(self, selected: list[Component], report: RunReport) -> None:
        for component in selected:
            for result in component.expected(self.ctx):
                if result.present:
                    _logging.debug(f"{component.name}: {result.target} {result.diagnostic}")
                    continue
                report.failed_probes.append(result)
                console.error(f"{component.name}: {result.target}: {result.diagnostic}")

    def _diagnostics(self, selected: list[Component], report: RunReport) -> str:
        lines = [
            "termenv diagnostics",
            f"version: {self.version}",
            f"time: {self.ctx.started.isoformat(timespec='seconds')}",
            f"home: {self.ctx.home}",
            f"notes: {self.ctx.notes_dir}",
            f"package manager: {self.ctx.package_manager}",
            f"PATH: {self.ctx.path_env}",
            "",
        ]
        for component in selected:
            lines.append(f"[{component.name}]")
            for result in component.expected(self.ctx):
                mark = "ok" if result.present else "MISSING"
                lines.append(f"  {mark:8} {result.kind.value:15} {result.target}: {result.diagnostic}")
            lines.append("")
        lines.append(f"changes: {len(report.changes)}")
        lines += [f"  {change.target}: {change.detail}" for change in report.changes]
        lines.append(f"warnings: {len(report.warnings)}")
        lines += [f"  {warning}" for warning in report.warnings]
        return "\n".join(lines) + "\n"


__all__ = ["ModeController", "DIAGNOSTICS_NAME"]

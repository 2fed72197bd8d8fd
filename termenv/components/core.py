"""Base tooling: package manager tools, fonts, directories and helper scripts."""

import logging
import shlex

from .. import probe
from ..data_loader import PackageManager, get_payload
from ..errors import MissingDependencyError, format_suggestion
from ..execution import INSTALL_TIMEOUT
from ..session import Session
from .base import (
    CLEAN_ONLY,
    Component,
    ComponentId,
    InstallStep,
    apply_files,
    ensure_directories,
    file_paths,
    payload_probes,
    remove_files,
)

_logging = logging.getLogger(__name__)


def _payload():
    return get_payload("core")


def package_manager(session: Session, required: bool) -> PackageManager | None:
    """Return the configured package manager if its binary is on PATH.

    Raises:
        MissingDependencyError: If `required` and the manager is unavailable
    """
    name = session.ctx.package_manager
    manager = _payload().package_managers.get(name)
    if manager is None:
        message = f"unsupported package manager '{name}'"
        hint = f"use one of: {', '.join(_payload().package_managers)}"
    elif not probe.command_exists(session.ctx, manager.binary).present:
        message = f"package manager '{manager.binary}' not found"
        hint = manager.hint
    else:
        return manager

    if required:
        raise MissingDependencyError(format_suggestion(message, hint))
    session.warn(f"{message}; {hint}")
    return None


def _install_command(template: str, package: str) -> str:
    return template.replace("{package}", shlex.quote(package))


def check_package_manager(session: Session) -> None:
    manager = package_manager(session, required=True)
    _logging.debug(f"Using package manager {manager.name}")


def install_tools(session: Session) -> None:
    """Install every tool missing from PATH. Failures are warnings."""
    missing = [
        tool
        for tool in _payload().tools
        if not probe.command_exists(session.ctx, tool.command).present
    ]
    if not missing:
        return
    manager = package_manager(session, required=session.clean)
    if manager is None:
        return
    for tool in missing:
        session.run(_install_command(manager.install, tool.package), INSTALL_TIMEOUT)


def install_fonts(session: Session) -> None:
    if session.ctx.skip_casks:
        _logging.info("Skipping font casks")
        return
    manager = package_manager(session, required=True)
    if manager.cask is None:
        _logging.info(f"{manager.name} has no cask support; skipping fonts")
        return
    for cask in _payload().casks:
        session.run(_install_command(manager.cask, cask), INSTALL_TIMEOUT)


def install_layout(session: Session) -> None:
    ensure_directories(session, _payload())
    apply_files(session, _payload())


def fix(session: Session) -> None:
    install_layout(session)
    install_tools(session)


def uninstall(session: Session) -> None:
    remove_files(session, _payload())
    if not session.full_uninstall:
        return
    manager = package_manager(session, required=False)
    if manager is None:
        return
    for tool in reversed(_payload().tools):
        if not probe.command_exists(session.ctx, tool.command).present:
            continue
        if session.confirm(f"Uninstall {tool.package}?"):
            session.run(_install_command(manager.uninstall, tool.package), INSTALL_TIMEOUT)
        else:
            session.warn(f"Kept {tool.package}")


def managed_paths(ctx):
    return file_paths(ctx, _payload())


def expected(ctx):
    results = payload_probes(ctx, _payload())
    for tool in _payload().tools:
        if not tool.optional:
            results.append(probe.command_exists(ctx, tool.command))
    return results


COMPONENT = Component(
    id=ComponentId.CORE,
    description="Base tools, fonts and helper scripts",
    install_steps=(
        InstallStep("package manager", check_package_manager, CLEAN_ONLY),
        InstallStep("tools", install_tools, CLEAN_ONLY),
        InstallStep("fonts", install_fonts, CLEAN_ONLY),
        InstallStep("layout", install_layout),
    ),
    fix=fix,
    uninstall=uninstall,
    managed_paths=managed_paths,
    expected=expected,
)

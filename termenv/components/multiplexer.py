"""Tmux configuration and the tmux plugin manager."""

from ..data_loader import get_payload
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
    remove_repos,
    sync_repos,
)


def _payload():
    return get_payload("multiplexer")


def install_plugins(session: Session) -> None:
    sync_repos(session, _payload().repos)


def install_config(session: Session) -> None:
    ensure_directories(session, _payload())
    apply_files(session, _payload())


def fix(session: Session) -> None:
    ensure_directories(session, _payload())
    apply_files(session, _payload())
    sync_repos(session, _payload().repos, update=False)


def uninstall(session: Session) -> None:
    remove_files(session, _payload())
    if session.full_uninstall:
        remove_repos(session, _payload().repos)


COMPONENT = Component(
    id=ComponentId.MULTIPLEXER,
    description="Tmux configuration with the tmux plugin manager",
    install_steps=(
        InstallStep("plugins", install_plugins, CLEAN_ONLY),
        InstallStep("config", install_config),
    ),
    fix=fix,
    uninstall=uninstall,
    prerequisites=(ComponentId.CORE,),
    managed_paths=lambda ctx: file_paths(ctx, _payload()),
    expected=lambda ctx: payload_probes(ctx, _payload()),
)

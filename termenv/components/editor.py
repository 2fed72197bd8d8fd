"""Neovim configuration bootstrapped with lazy.nvim."""

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
    return get_payload("editor")


def install_plugin_manager(session: Session) -> None:
    sync_repos(session, _payload().repos)


def install_config(session: Session) -> None:
    ensure_directories(session, _payload())
    apply_files(session, _payload())


def fix(session: Session) -> None:
    install_config(session)
    sync_repos(session, _payload().repos, update=False)


def uninstall(session: Session) -> None:
    remove_files(session, _payload())
    # leave the config dir alone if anything the user added is still in it
    nvim_dir = session.ctx.nvim_dir
    for directory in (nvim_dir / "plugin", nvim_dir / "lua", nvim_dir):
        session.prune_empty(directory)
    if session.full_uninstall:
        remove_repos(session, _payload().repos)


COMPONENT = Component(
    id=ComponentId.EDITOR,
    description="Neovim configuration with lazy.nvim plugins",
    install_steps=(
        InstallStep("plugin manager", install_plugin_manager, CLEAN_ONLY),
        InstallStep("config", install_config),
    ),
    fix=fix,
    uninstall=uninstall,
    prerequisites=(ComponentId.CORE,),
    managed_paths=lambda ctx: file_paths(ctx, _payload()),
    expected=lambda ctx: payload_probes(ctx, _payload()),
)

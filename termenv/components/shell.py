"""Zsh profile, oh-my-zsh with powerlevel10k, and shell plugins."""

from .. import probe
from ..data_loader import get_payload
from ..session import Session
from .base import (
    CLEAN_ONLY,
    Component,
    ComponentId,
    InstallStep,
    apply_files,
    block_entries,
    file_paths,
    payload_probes,
    remove_files,
    remove_repos,
    resolve_path,
    sync_repos,
)

PROFILE = ".zshrc"


def _payload():
    return get_payload("shell")


def _profile_file():
    return next(f for f in _payload().files if f.path == PROFILE)


def install_plugins(session: Session) -> None:
    sync_repos(session, _payload().repos)


def install_profile(session: Session) -> None:
    apply_files(session, _payload())


def fix(session: Session) -> None:
    apply_files(session, _payload())
    sync_repos(session, _payload().repos, update=False)


def uninstall(session: Session) -> None:
    remove_files(session, _payload())
    if session.full_uninstall:
        remove_repos(session, _payload().repos)


def managed_paths(ctx):
    return file_paths(ctx, _payload())


def expected(ctx):
    results = payload_probes(ctx, _payload())
    profile = resolve_path(ctx, PROFILE)
    profile_file = _profile_file()
    results += [probe.alias_defined(profile, e.name) for e in block_entries(profile_file, "alias")]
    results += [probe.function_defined(profile, e.name) for e in block_entries(profile_file, "function")]
    return results


COMPONENT = Component(
    id=ComponentId.SHELL,
    description="Zsh profile with oh-my-zsh, powerlevel10k, aliases and functions",
    install_steps=(
        InstallStep("plugins", install_plugins, CLEAN_ONLY),
        InstallStep("profile", install_profile),
    ),
    fix=fix,
    uninstall=uninstall,
    prerequisites=(ComponentId.CORE,),
    managed_paths=managed_paths,
    expected=expected,
)

"""Notes directory skeleton and the Neovim notes commands.

Uninstall removes only the Neovim plugin and the blocks this component added
to other files; nothing inside the notes directory is ever deleted.
"""

import shlex

from .. import probe
from ..data_loader import get_payload
from ..session import Session
from .base import (
    Component,
    ComponentId,
    InstallStep,
    apply_files,
    ensure_directories,
    file_paths,
    payload_probes,
    remove_files,
)


def _payload():
    return get_payload("notes")


def install_skeleton(session: Session) -> None:
    session.ensure_directory(session.ctx.notes_dir)
    ensure_directories(session, _payload())
    apply_files(session, _payload())


def init_repository(session: Session) -> None:
    """Make the notes directory a git repository (best-effort)."""
    notes_dir = session.ctx.notes_dir
    if (notes_dir / ".git").exists():
        return
    if not probe.command_exists(session.ctx, "git").present:
        session.warn("git not found; notes directory is not under version control")
        return
    session.run(f"git -C {shlex.quote(str(notes_dir))} init --quiet")


def fix(session: Session) -> None:
    install_skeleton(session)
    init_repository(session)


def uninstall(session: Session) -> None:
    remove_files(session, _payload())


def expected(ctx):
    return [probe.directory_exists(ctx.notes_dir)] + payload_probes(ctx, _payload())


COMPONENT = Component(
    id=ComponentId.NOTES,
    description="Notes directory skeleton with Neovim notes commands",
    install_steps=(
        InstallStep("skeleton", install_skeleton),
        InstallStep("repository", init_repository),
    ),
    fix=fix,
    uninstall=uninstall,
    prerequisites=(ComponentId.CORE, ComponentId.EDITOR),
    managed_paths=lambda ctx: file_paths(ctx, _payload()),
    expected=expected,
)

"""Component model and the payload-driven operations components share."""

import dataclasses
import logging
import shlex
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from .. import probe
from ..data_loader import Attachment, ComponentPayload, Entry, ManagedFile, Repo
from ..execution import CLONE_TIMEOUT
from ..models import InstallStyle, ProbeResult
from ..mutator import ManagedBlock, block_span, extract_blocks
from ..paths import MANAGED_TAG, EnvContext
from ..session import Session

_logging = logging.getLogger(__name__)

ALL_STYLES = frozenset(InstallStyle)
CLEAN_ONLY = frozenset({InstallStyle.CLEAN})


class ComponentId(Enum):
    CORE = "core"
    SHELL = "shell"
    MULTIPLEXER = "multiplexer"
    EDITOR = "editor"
    NOTES = "notes"


@dataclass(frozen=True)
class InstallStep:
    name: str
    run: Callable[[Session], None]
    styles: frozenset = ALL_STYLES


def _no_paths(ctx: EnvContext) -> list[Path]:
    return []


def _no_probes(ctx: EnvContext) -> list[ProbeResult]:
    return []


@dataclass(frozen=True)
class Component:
    id: ComponentId
    description: str
    install_steps: tuple[InstallStep, ...]
    fix: Callable[[Session], None] | None
    uninstall: Callable[[Session], None] | None
    prerequisites: tuple[ComponentId, ...] = ()
    managed_paths: Callable[[EnvContext], list[Path]] = _no_paths
    expected: Callable[[EnvContext], list[ProbeResult]] = _no_probes

    @property
    def name(self) -> str:
        return self.id.value

    def install(self, session: Session) -> None:
        for step in self.install_steps:
            if session.style not in step.styles:
                _logging.debug(f"{self.name}: skipping {step.name} for {session.style}")
                continue
            _logging.debug(f"{self.name}: {step.name}")
            step.run(session)


def expand(text: str, ctx: EnvContext) -> str:
    """Fill the {notes_dir}, {home} and {date} placeholders of payload text."""
    return (
        text.replace("{notes_dir}", str(ctx.notes_dir))
        .replace("{home}", str(ctx.home))
        .replace("{date}", ctx.started.strftime("%Y-%m-%d"))
    )


def resolve_path(ctx: EnvContext, relative: str) -> Path:
    return ctx.resolve(expand(relative, ctx))


def protected(ctx: EnvContext, path: Path) -> bool:
    """True for paths inside the user's notes directory."""
    return path == ctx.notes_dir or ctx.notes_dir in path.parents


def is_wholly_managed(path: Path) -> bool:
    """Check the first line (after a shebang) for the managed-by tag."""
    try:
        with path.open(encoding="utf-8") as f:
            first = f.readline()
            if first.startswith("#!"):
                first = f.readline()
    except (OSError, UnicodeDecodeError):
        return False
    return MANAGED_TAG in first


def render_file(managed: ManagedFile, existing: str | None = None) -> str:
    """Render a block-assembled file, keeping other components' blocks."""
    sections = [managed.header + "\n"] if managed.header else []
    for block in managed.blocks:
        sections.append(
            ManagedBlock(block.name, managed.comment).render([e.render() for e in block.entries])
        )
    text = "\n".join(sections)

    if existing:
        owned = {block.name for block in managed.blocks}
        for name in extract_blocks(existing, managed.comment):
            if name in owned:
                continue
            start, stop = block_span(existing, ManagedBlock(name, managed.comment))
            foreign = existing[start:stop]
            text += foreign if foreign.endswith("\n") else foreign + "\n"
    return text


def _expanded(entry: Entry, ctx: EnvContext) -> Entry:
    return dataclasses.replace(entry, value=expand(entry.value, ctx))


def _entry_present(session: Session, entry: Entry, path: Path) -> bool:
    if entry.kind == "alias":
        return probe.alias_defined(path, entry.name).present
    if entry.kind == "function":
        return probe.function_defined(path, entry.name).present
    return session.mutator.line_exists(entry.render(), path)


def merge_entries(
    session: Session, path: Path, block: ManagedBlock, entries: list[Entry]
) -> None:
    """Bring `entries` into a user file without disturbing what is there.

    Assigned settings are rewritten in place, entries already defined anywhere
    in the file are left alone and the rest are merged into `block`.
    """
    mutator = session.mutator
    missing = []
    for entry in entries:
        if entry.kind == "setting" and mutator.setting_assigned(entry.name, path, entry.separator):
            session.record(
                mutator.replace_or_append_setting(
                    entry.name, entry.value, path, entry.separator, entry.prefix
                )
            )
        elif not _entry_present(session, entry, path):
            missing.append(entry.render())
    if missing:
        session.record(mutator.merge_block(block, missing, path))


def apply_file(session: Session, managed: ManagedFile) -> None:
    """Install one payload file according to the session style.

    Clean style rewrites the whole file. Preserve style and fix write a
    missing file whole and otherwise merge into its managed blocks; static
    files are only replaced while they still carry the managed-by tag.
    """
    path = resolve_path(session.ctx, managed.path)
    existing = session.mutator.read(path)

    if managed.static:
        if existing is None:
            session.write(managed.content, path)
        elif managed.create_only or session.style is None:
            _logging.debug(f"Keeping existing {path}")
        elif session.clean or is_wholly_managed(path):
            session.write(managed.content, path)
    elif existing is None or session.clean:
        session.write(render_file(managed, existing), path)
    else:
        for block in managed.blocks:
            merge_entries(
                session,
                path,
                ManagedBlock(block.name, managed.comment),
                list(block.entries),
            )

    if managed.executable:
        session.make_executable(path)


def apply_attachment(session: Session, attachment: Attachment) -> None:
    path = resolve_path(session.ctx, attachment.path)
    block = ManagedBlock(attachment.block.name, attachment.comment, attachment.closing)
    entries = [_expanded(entry, session.ctx) for entry in attachment.block.entries]
    if attachment.once:
        session.record(
            session.mutator.append_block_if_absent(block, [e.render() for e in entries], path)
        )
    else:
        merge_entries(session, path, block, entries)


def remove_file(session: Session, managed: ManagedFile) -> None:
    """Delete a wholly managed file, or strip our blocks from a user's file."""
    path = resolve_path(session.ctx, managed.path)
    if protected(session.ctx, path) or not path.exists():
        return
    if is_wholly_managed(path):
        session.remove(path)
        return
    if managed.static:
        session.warn(f"Leaving {path}: it no longer carries the '{MANAGED_TAG}' tag")
        return
    for block in managed.blocks:
        session.record(session.mutator.remove_block(ManagedBlock(block.name, managed.comment), path))


def remove_attachment(session: Session, attachment: Attachment) -> None:
    path = resolve_path(session.ctx, attachment.path)
    if protected(session.ctx, path) or not path.exists():
        return
    block = ManagedBlock(attachment.block.name, attachment.comment, attachment.closing)
    session.record(session.mutator.remove_block(block, path))


def ensure_directories(session: Session, payload: ComponentPayload) -> None:
    for directory in payload.directories:
        session.ensure_directory(resolve_path(session.ctx, directory))


def apply_files(session: Session, payload: ComponentPayload) -> None:
    for managed in payload.files:
        apply_file(session, managed)
    for attachment in payload.attachments:
        apply_attachment(session, attachment)


def remove_files(session: Session, payload: ComponentPayload) -> None:
    for attachment in payload.attachments:
        remove_attachment(session, attachment)
    for managed in reversed(payload.files):
        remove_file(session, managed)


def _git_available(session: Session) -> bool:
    if probe.command_exists(session.ctx, "git").present:
        return True
    session.warn("git not found; skipping plugin repositories")
    return False


def sync_repos(session: Session, repos: tuple[Repo, ...], update: bool = True) -> None:
    """Clone missing plugin repositories and pull existing ones (best-effort)."""
    if not repos or not _git_available(session):
        return
    for repo in repos:
        dest = resolve_path(session.ctx, repo.path)
        if dest.is_dir():
            if update:
                session.run(f"git -C {shlex.quote(str(dest))} pull --ff-only", CLONE_TIMEOUT)
            continue
        session.run(
            f"git clone --depth=1 {shlex.quote(repo.url)} {shlex.quote(str(dest))}",
            CLONE_TIMEOUT,
        )


def remove_repos(session: Session, repos: tuple[Repo, ...]) -> None:
    for repo in reversed(repos):
        dest = resolve_path(session.ctx, repo.path)
        if not dest.exists():
            continue
        if session.confirm(f"Remove {repo.name} at {dest}?"):
            session.remove(dest)
        else:
            session.warn(f"Kept {repo.name} at {dest}")


def file_paths(ctx: EnvContext, payload: ComponentPayload) -> list[Path]:
    """Paths outside the notes directory that this payload writes."""
    paths = [resolve_path(ctx, managed.path) for managed in payload.files]
    paths += [resolve_path(ctx, attachment.path) for attachment in payload.attachments]
    return [path for path in paths if not protected(ctx, path)]


def payload_probes(ctx: EnvContext, payload: ComponentPayload) -> list[ProbeResult]:
    results = [probe.directory_exists(resolve_path(ctx, d)) for d in payload.directories]
    for managed in payload.files:
        path = resolve_path(ctx, managed.path)
        results.append(probe.file_exists(path))
        if managed.executable:
            results.append(probe.is_executable(path))
    return results


def block_entries(managed: ManagedFile, kind: str) -> list[Entry]:
    return [entry for block in managed.blocks for entry in block.entries if entry.kind == kind]


__all__ = [
    "ComponentId",
    "InstallStep",
    "Component",
    "ALL_STYLES",
    "CLEAN_ONLY",
    "expand",
    "resolve_path",
    "protected",
    "is_wholly_managed",
    "render_file",
    "merge_entries",
    "apply_file",
    "apply_attachment",
    "apply_files",
    "remove_file",
    "remove_attachment",
    "remove_files",
    "ensure_directories",
    "sync_repos",
    "remove_repos",
    "file_paths",
    "payload_probes",
    "block_entries",
]

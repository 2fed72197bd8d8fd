"""Tests for the shared component helpers and the run session."""

from pathlib import Path

import pytest

from termenv.backup import BackupManager
from termenv.components.base import (
    apply_file,
    expand,
    is_wholly_managed,
    protected,
    remove_file,
    render_file,
)
from termenv.data_loader import BlockSpec, Entry, ManagedFile
from termenv.models import InstallStyle, RunReport
from termenv.mutator import ManagedBlock
from termenv.session import Session

PROFILE = ManagedFile(
    path=".profile_test",
    header="# test profile managed by termenv",
    blocks=(
        BlockSpec("aliases", (Entry("alias", "gs", "git status"),)),
        BlockSpec("env", (Entry("setting", "EDITOR", "nvim", "=", "export "),)),
    ),
)


def make_session(env, style=None) -> Session:
    backups = BackupManager.for_run(env.backup_parent, env.started, env.home)
    return Session(env, backups, RunReport(mode="test"), style)


class TestHelpers:
    def test_expand(self, env):
        assert expand("{notes_dir}/daily", env) == f"{env.home}/notes/daily"
        assert expand("set up on {date}", env) == "set up on 2024-05-01"
        assert expand("${NOTES_DIR:-$HOME/notes}", env) == "${NOTES_DIR:-$HOME/notes}"

    def test_protected(self, env):
        assert protected(env, env.notes_dir)
        assert protected(env, env.notes_dir / "README.md")
        assert not protected(env, env.home / "notes.txt")

    def test_is_wholly_managed(self, temp_dir: Path):
        script = temp_dir / "script"
        script.write_text("#!/bin/sh\n# managed by termenv\n")
        assert is_wholly_managed(script)
        script.write_text("#!/bin/sh\necho\n# managed by termenv\n")
        assert not is_wholly_managed(script)
        assert not is_wholly_managed(temp_dir / "missing")

    def test_render_keeps_foreign_blocks(self):
        foreign = ManagedBlock("notes").render(["export NOTES_DIR=~/notes"])
        existing = render_file(PROFILE) + foreign
        assert render_file(PROFILE, existing) == existing
        assert render_file(PROFILE, existing).count("termenv:aliases >>>") == 1


class TestApplyFile:
    def test_clean_rewrites(self, env):
        target = env.home / ".profile_test"
        target.write_text("alias gs='git status -sb'\n")
        apply_file(make_session(env, InstallStyle.CLEAN), PROFILE)
        assert target.read_text().startswith("# test profile managed by termenv\n")

    def test_preserve_merges(self, env):
        target = env.home / ".profile_test"
        target.write_text("alias gs='git status -sb'\nEDITOR=vim\n")
        session = make_session(env, InstallStyle.PRESERVE)
        apply_file(session, PROFILE)
        assert target.read_text() == "alias gs='git status -sb'\nEDITOR=nvim\n"
        assert len(session.report.changes) == 1

    def test_create_only_static_is_kept(self, env):
        managed = ManagedFile(path="README.md", content="template\n", create_only=True)
        target = env.home / "README.md"
        target.write_text("my notes\n")
        apply_file(make_session(env, InstallStyle.CLEAN), managed)
        assert target.read_text() == "my notes\n"

    def test_executable_bit(self, env):
        managed = ManagedFile(path="bin/x", content="#!/bin/sh\n# managed by termenv\n", executable=True)
        session = make_session(env, InstallStyle.CLEAN)
        apply_file(session, managed)
        assert (env.home / "bin" / "x").stat().st_mode & 0o111


class TestRemoveFile:
    def test_removes_wholly_managed(self, env):
        apply_file(make_session(env, InstallStyle.CLEAN), PROFILE)
        session = make_session(env)
        remove_file(session, PROFILE)
        assert not (env.home / ".profile_test").exists()
        assert (session.backups.root / ".profile_test").is_file()

    def test_strips_blocks_from_user_file(self, env):
        target = env.home / ".profile_test"
        target.write_text("mine\n")
        apply_file(make_session(env, InstallStyle.PRESERVE), PROFILE)
        remove_file(make_session(env), PROFILE)
        assert target.read_text() == "mine\n"

    def test_never_touches_notes(self, env):
        managed = ManagedFile(path="{notes_dir}/x.md", content="# managed by termenv\n")
        note = env.notes_dir / "x.md"
        note.parent.mkdir(parents=True)
        note.write_text("# managed by termenv\n")
        remove_file(make_session(env), managed)
        assert note.exists()


class TestSession:
    def test_make_executable_backs_up_first(self, env):
        script = env.home / "run.sh"
        script.write_text("#!/bin/sh\n")
        script.chmod(0o644)
        session = make_session(env)
        assert session.make_executable(script).changed
        assert session.backups.records[0].source == script
        assert not session.make_executable(script).changed

    def test_ensure_directory_over_file_fails(self, env):
        from termenv.errors import MutationError

        (env.home / "bin").write_text("")
        with pytest.raises(MutationError):
            make_session(env).ensure_directory(env.home / "bin")

    def test_failed_command_is_warning(self, env, fake_runner):
        fake_runner.returncode = 2
        fake_runner.output = "boom"
        session = make_session(env)
        assert not session.run("brew install zsh")
        assert session.report.warnings == ["Command failed (2): brew install zsh: boom"]
        assert session.report.changes == []

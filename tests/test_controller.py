"""End-to-end tests of the mode state machine against a fabricated home."""

import dataclasses
import json
import os
import re
from pathlib import Path

import pytest

from termenv import __version__
from termenv.controller import DIAGNOSTICS_NAME, ModeController
from termenv.models import Mode, RunState
from termenv.registry import ComponentRegistry
from termenv.versions import VersionTracker
from tests.conftest import make_fake_bin, snapshot
from tests.test_registry import fake_table

MANAGED_FILES = (
    ".zshrc",
    ".p10k.zsh",
    ".tmux.conf",
    ".config/nvim/init.lua",
    ".config/nvim/lua/plugins.lua",
    ".config/nvim/plugin/notes.vim",
    "bin/termenv-health",
)


@pytest.fixture
def controller(env) -> ModeController:
    return ModeController(env, confirm=lambda question: True)


class TestFullInstall:
    def test_empty_home(self, controller, env):
        """Profile gets one aliases section and a single wk definition."""
        report = controller.run(Mode.FULL)

        assert report.passed, report.failed_probes
        zshrc = env.zshrc.read_text()
        assert zshrc.count("# >>> termenv:aliases >>>") == 1
        assert len(re.findall(r"^wk\(\) \{", zshrc, re.MULTILINE)) == 1
        for relative in MANAGED_FILES:
            assert (env.home / relative).is_file(), relative
        assert os.access(env.home / "bin" / "termenv-health", os.X_OK)

    def test_empty_home_takes_no_backups(self, controller, env):
        """Files this run created are not saved as pre-run state."""
        report = controller.run(Mode.FULL)

        assert report.backup_dir is None
        assert not env.backup_parent.exists()

    def test_records_version(self, controller, env):
        report = controller.run(Mode.FULL)
        assert report.version_recorded
        record = VersionTracker(env.version_file).read()
        assert record.version == __version__
        assert record.mode == "full"

    def test_second_run_is_byte_identical(self, controller, env):
        controller.run(Mode.FULL)
        first = snapshot(env.home)

        report = controller.run(Mode.FULL)

        assert snapshot(env.home) == first
        assert report.changes == []
        assert report.passed

    def test_notes_block_survives_editor_rewrite(self, controller, env):
        controller.run(Mode.FULL)
        controller.run(Mode.FULL)
        init_lua = env.nvim_init.read_text()
        assert init_lua.count("-- >>> termenv:notes >>>") == 1
        assert "plugin/notes.vim" in init_lua

    def test_existing_files_backed_up_before_rewrite(self, controller, env):
        env.zshrc.write_text("# my own zshrc\n")
        (env.home / ".tmux.conf").write_text("set -g mouse off\n")

        report = controller.run(Mode.FULL)

        assert (report.backup_dir / ".zshrc").read_text() == "# my own zshrc\n"
        assert (report.backup_dir / ".tmux.conf").read_text() == "set -g mouse off\n"
        manifest = json.loads((report.backup_dir / "manifest.json").read_text())
        sources = {record["source"] for record in manifest["records"]}
        assert str(env.zshrc) in sources

    def test_clones_plugins_and_installs_fonts(self, controller, env, fake_runner):
        controller.run(Mode.FULL)
        assert any(c.startswith("git clone") and "ohmyzsh" in c for c in fake_runner.commands)
        assert any("--cask" in c for c in fake_runner.commands)

    def test_skip_casks(self, env, fake_runner):
        env = dataclasses.replace(env, skip_casks=True)
        ModeController(env).run(Mode.FULL)
        assert not any("--cask" in c for c in fake_runner.commands)

    def test_missing_package_manager_aborts(self, env, temp_dir):
        no_brew = make_fake_bin(temp_dir / "nobrew", tools=("zsh", "nvim", "tmux", "git"))
        env = dataclasses.replace(env, path_env=str(no_brew))

        report = ModeController(env).run(Mode.FULL)

        assert report.aborted
        assert "brew" in report.errors[0]
        assert not env.zshrc.exists()
        assert not env.version_file.exists()

    def test_backup_failure_aborts_before_mutation(self, env, temp_dir):
        blocker = temp_dir / "blocker"
        blocker.write_text("a file, not a directory")
        env = dataclasses.replace(env, backup_parent=blocker / "backups")
        env.zshrc.write_text("mine\n")

        report = ModeController(env).run(Mode.FULL)

        assert report.state == RunState.ABORTED
        assert env.zshrc.read_text() == "mine\n"

    def test_failed_verification_is_not_recorded(self, env, temp_dir):
        no_nvim = make_fake_bin(temp_dir / "nonvim", tools=("brew", "zsh", "tmux", "git"))
        env = dataclasses.replace(env, path_env=str(no_nvim))

        report = ModeController(env).run(Mode.FULL)

        assert report.state == RunState.DONE
        assert not report.passed
        assert [r.target for r in report.failed_probes] == ["nvim"]
        assert not report.version_recorded
        assert "brew install neovim" in env.runner.commands


class TestMinimal:
    def test_existing_alias_not_duplicated(self, controller, env):
        env.zshrc.write_text("alias gs='git status'\n")

        report = controller.run(Mode.MINIMAL)

        zshrc = env.zshrc.read_text()
        assert zshrc.count("alias gs=") == 1
        assert zshrc.startswith("alias gs='git status'\n")
        assert "alias gp='git push'" in zshrc
        assert report.passed

    def test_setting_replaced_in_place(self, controller, env):
        tmux_conf = env.home / ".tmux.conf"
        tmux_conf.write_text("set -g mouse off\n# mine\n")

        controller.run(Mode.MINIMAL)

        lines = tmux_conf.read_text().splitlines()
        assert lines[:2] == ["set -g mouse on", "# mine"]
        assert sum(1 for line in lines if line.startswith("set -g mouse ")) == 1

    def test_second_run_is_byte_identical(self, controller, env):
        env.zshrc.write_text("alias gs='git status'\nexport EDITOR=vim\n")
        controller.run(Mode.MINIMAL)
        first = snapshot(env.home)

        report = controller.run(Mode.MINIMAL)

        assert snapshot(env.home) == first
        assert report.changes == []

    def test_does_not_touch_plugins_or_tools(self, controller, fake_runner):
        controller.run(Mode.MINIMAL)
        assert not any("git clone" in c or "brew install" in c for c in fake_runner.commands)

    def test_symlinked_profile_backed_up_by_content(self, controller, env):
        real = env.home / "dotfiles" / "zshrc"
        real.parent.mkdir()
        real.write_text("# my stowed zshrc\n")
        env.zshrc.symlink_to(real)

        report = controller.run(Mode.MINIMAL)

        assert env.zshrc.is_symlink()
        assert "termenv:aliases" in real.read_text()
        assert (report.backup_dir / ".zshrc").read_text() == "# my stowed zshrc\n"

    def test_records_minimal(self, controller, env):
        controller.run(Mode.MINIMAL)
        assert VersionTracker(env.version_file).read().mode == "minimal"


class TestFix:
    def test_repairs_directory_and_exec_bit(self, controller, env):
        controller.run(Mode.FULL)
        undodir = env.home / ".vim" / "undodir"
        script = env.home / "bin" / "termenv-health"
        undodir.rmdir()
        script.chmod(0o644)

        report = controller.run(Mode.FIX)

        assert undodir.is_dir()
        assert os.access(script, os.X_OK)
        assert {change.target for change in report.changes} == {undodir, script}

        again = controller.run(Mode.FIX)
        assert again.changes == []

    def test_converges_from_empty_home(self, controller):
        controller.run(Mode.FIX)
        assert controller.run(Mode.FIX).changes == []

    def test_writes_diagnostics(self, controller):
        report = controller.run(Mode.FIX)
        diagnostics = (report.backup_dir / DIAGNOSTICS_NAME).read_text()
        assert "[core]" in diagnostics
        assert "[notes]" in diagnostics

    def test_does_not_record(self, controller, env):
        controller.run(Mode.FIX)
        assert not env.version_file.exists()


class TestUninstall:
    def test_soft_uninstall(self, controller, env):
        """Managed files are backed up then removed; notes stay untouched."""
        controller.run(Mode.FULL)
        note = env.notes_dir / "daily" / "2024-05-01.md"
        note.write_text("# today\n")
        notes_before = snapshot(env.notes_dir, exclude=())
        before = {relative: (env.home / relative).read_bytes() for relative in MANAGED_FILES}

        report = controller.run(Mode.UNINSTALL, assume_yes=True)

        assert report.state == RunState.DONE
        for relative, content in before.items():
            assert not (env.home / relative).exists(), relative
            assert (report.backup_dir / relative).read_bytes() == content
        assert snapshot(env.notes_dir, exclude=()) == notes_before
        assert not env.nvim_dir.exists()

    def test_strips_blocks_from_user_file(self, controller, env):
        env.zshrc.write_text("export MINE=1\n")
        controller.run(Mode.MINIMAL)
        assert env.zshrc.read_text() != "export MINE=1\n"

        controller.run(Mode.UNINSTALL)

        assert env.zshrc.read_text() == "export MINE=1\n"

    def test_cancelled(self, env):
        ModeController(env, confirm=lambda q: True).run(Mode.FULL)

        report = ModeController(env, confirm=lambda q: False).run(Mode.UNINSTALL)

        assert report.cancelled
        assert env.zshrc.exists()

    def test_full_uninstall_removes_tools_and_clones(self, controller, env, fake_runner):
        controller.run(Mode.FULL)
        (env.home / ".oh-my-zsh" / "custom").mkdir(parents=True)
        (env.home / ".tmux" / "plugins" / "tpm").mkdir(parents=True)

        controller.run(Mode.UNINSTALL, full_uninstall=True, assume_yes=True)

        assert not (env.home / ".oh-my-zsh").exists()
        assert not (env.home / ".tmux" / "plugins" / "tpm").exists()
        assert "brew uninstall neovim" in fake_runner.commands

    def test_per_item_confirmation(self, env, fake_runner):
        ModeController(env, confirm=lambda q: True).run(Mode.FULL)
        (env.home / ".oh-my-zsh").mkdir()

        def confirm(question):
            return question != "Uninstall zsh?" and "oh-my-zsh" not in question

        report = ModeController(env, confirm=confirm).run(Mode.UNINSTALL, full_uninstall=True)

        assert (env.home / ".oh-my-zsh").is_dir()
        assert "brew uninstall zsh" not in fake_runner.commands
        assert "brew uninstall tmux" in fake_runner.commands
        assert any("oh-my-zsh" in warning for warning in report.warnings)


class TestComponentRuns:
    def test_named_component_with_prerequisites(self, controller, env):
        report = controller.run(Mode.COMPONENT, ["multiplexer"])

        assert report.components == ["core", "multiplexer"]
        assert (env.home / ".tmux.conf").is_file()
        assert not env.zshrc.exists()
        assert not report.version_recorded

    def test_unknown_component_is_skipped(self, controller):
        report = controller.run(Mode.COMPONENT, ["bogus"])

        assert report.state == RunState.DONE
        assert "unknown component 'bogus'" in report.errors[0]
        assert report.changes == []

    def test_unknown_alongside_known(self, controller, env):
        report = controller.run(Mode.COMPONENT, ["bogus", "shell"])
        assert report.components == ["core", "shell"]
        assert env.zshrc.exists()
        assert len(report.errors) == 1


class TestOrdering:
    def test_prerequisites_install_first(self, env):
        calls = []
        registry = ComponentRegistry(fake_table(calls))

        ModeController(env, registry=registry).run(Mode.FULL, ["notes"])

        assert calls == [("install", "core"), ("install", "editor"), ("install", "notes")]

    def test_uninstall_runs_in_reverse(self, env):
        calls = []
        registry = ComponentRegistry(fake_table(calls))

        ModeController(env, registry=registry).run(Mode.UNINSTALL, assume_yes=True)

        assert [name for _, name in calls] == ["notes", "editor", "multiplexer", "shell", "core"]

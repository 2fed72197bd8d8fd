"""Tests for read-only state checks."""

from pathlib import Path

from termenv import probe
from termenv.models import ProbeKind


class TestCommandExists:
    def test_found_on_context_path(self, env):
        result = probe.command_exists(env, "tmux")
        assert result.present
        assert result.kind == ProbeKind.EXECUTABLE
        assert "found at" in result.diagnostic

    def test_missing_from_context_path(self, env):
        result = probe.command_exists(env, "definitely-not-a-tool")
        assert not result.present
        assert result.diagnostic == "not found on PATH"


class TestFileChecks:
    def test_file_exists(self, temp_dir: Path):
        target = temp_dir / "a.txt"
        assert not probe.file_exists(target).present
        target.write_text("x")
        assert probe.file_exists(target).present

    def test_directory_is_not_a_file(self, temp_dir: Path):
        result = probe.file_exists(temp_dir)
        assert not result.present
        assert "not a regular file" in result.diagnostic

    def test_directory_exists(self, temp_dir: Path):
        assert probe.directory_exists(temp_dir).present
        assert not probe.directory_exists(temp_dir / "missing").present

    def test_is_executable(self, temp_dir: Path):
        script = temp_dir / "run.sh"
        assert probe.is_executable(script).diagnostic == "file missing"
        script.write_text("#!/bin/sh\n")
        script.chmod(0o644)
        assert not probe.is_executable(script).present
        script.chmod(0o755)
        assert probe.is_executable(script).present


class TestProfileChecks:
    """Function and alias detection in a shell profile."""

    def test_missing_profile(self, temp_dir: Path):
        result = probe.function_defined(temp_dir / ".zshrc", "wk")
        assert not result.present
        assert result.diagnostic == probe.PROFILE_MISSING
        assert probe.alias_defined(temp_dir / ".zshrc", "gs").diagnostic == probe.PROFILE_MISSING

    def test_function_forms(self, temp_dir: Path):
        profile = temp_dir / ".zshrc"
        profile.write_text("wk() {\n  echo hi\n}\nfunction mcd {\n}\n  nvimf () {\n}\n")
        assert probe.function_defined(profile, "wk").present
        assert probe.function_defined(profile, "mcd").present
        assert probe.function_defined(profile, "nvimf").present
        assert not probe.function_defined(profile, "w").present

    def test_function_mentioned_but_not_defined(self, temp_dir: Path):
        profile = temp_dir / ".zshrc"
        profile.write_text("# wk is defined elsewhere\necho wk\n")
        assert not probe.function_defined(profile, "wk").present

    def test_alias(self, temp_dir: Path):
        profile = temp_dir / ".zshrc"
        profile.write_text("alias gs='git status'\n# alias gp='git push'\n")
        assert probe.alias_defined(profile, "gs").present
        assert not probe.alias_defined(profile, "gp").present
        assert not probe.alias_defined(profile, "g").present

    def test_results_are_fresh(self, temp_dir: Path):
        profile = temp_dir / ".zshrc"
        profile.write_text("")
        first = probe.alias_defined(profile, "gs")
        profile.write_text("alias gs='git status'\n")
        assert not first.present
        assert probe.alias_defined(profile, "gs").present

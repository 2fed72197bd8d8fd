"""Pytest fixtures and utilities for termenv tests."""

import stat
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

from termenv.data_loader import clear_cache
from termenv.paths import EnvContext

FAKE_TOOLS = ("brew", "zsh", "nvim", "tmux", "git", "fzf", "rg")
STARTED = datetime(2024, 5, 1, 9, 30, 0)


class FakeRunner:
    """Command runner that records commands instead of executing them."""

    def __init__(self, output: str = "", returncode: int = 0):
        self.output = output
        self.returncode = returncode
        self.commands: list[str] = []

    def __call__(self, command: str, timeout: int = 30) -> tuple[str, int]:
        self.commands.append(command)
        return self.output, self.returncode


def make_fake_bin(directory: Path, tools=FAKE_TOOLS) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    for tool in tools:
        script = directory / tool
        script.write_text("#!/bin/sh\nexit 0\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return directory


def snapshot(root: Path, exclude: tuple[str, ...] = (".termenv",)) -> dict[str, bytes]:
    """Map every file under `root` (relative path) to its content."""
    files = {}
    for path in sorted(root.rglob("*")):
        relative = path.relative_to(root)
        if relative.parts[0] in exclude or not path.is_file():
            continue
        files[str(relative)] = path.read_bytes()
    return files


@pytest.fixture(autouse=True)
def fresh_payloads() -> Generator[None, None, None]:
    """Reload bundled payloads for every test."""
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def home(temp_dir: Path) -> Path:
    path = temp_dir / "home"
    path.mkdir()
    return path


@pytest.fixture
def fake_bin(temp_dir: Path) -> Path:
    """Directory of stub executables standing in for the real tools."""
    return make_fake_bin(temp_dir / "fakebin")


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def env(home: Path, fake_bin: Path, fake_runner: FakeRunner) -> EnvContext:
    return EnvContext(
        home=home,
        path_env=str(fake_bin),
        notes_dir=home / "notes",
        backup_parent=home / ".termenv" / "backups",
        runner=fake_runner,
        started=STARTED,
    )


@pytest.fixture
def mock_tty() -> Generator[None, None, None]:
    """Mock sys.stdin.isatty to return True."""
    with patch("sys.stdin.isatty", return_value=True):
        yield


@pytest.fixture
def mock_no_tty() -> Generator[None, None, None]:
    """Mock sys.stdin.isatty to return False."""
    with patch("sys.stdin.isatty", return_value=False):
        yield

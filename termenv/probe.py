"""Read-only state checks.

Every check returns a fresh ProbeResult and never raises: an absent target is
the normal trigger for install and fix logic, not a failure.
"""

import os
import re
import shutil
from pathlib import Path

from .models import ProbeKind, ProbeResult
from .paths import EnvContext

PROFILE_MISSING = "profile missing"


def command_exists(ctx: EnvContext, name: str) -> ProbeResult:
    """Check whether a command is on the context PATH."""
    location = shutil.which(name, path=ctx.path_env)
    if location:
        return ProbeResult(name, ProbeKind.EXECUTABLE, True, f"found at {location}")
    return ProbeResult(name, ProbeKind.EXECUTABLE, False, "not found on PATH")


def file_exists(path: Path) -> ProbeResult:
    try:
        present = path.is_file()
    except OSError as e:
        return ProbeResult(str(path), ProbeKind.FILE, False, f"cannot stat: {e}")
    if present:
        return ProbeResult(str(path), ProbeKind.FILE, True, "file exists")
    if path.exists():
        return ProbeResult(str(path), ProbeKind.FILE, False, "exists but is not a regular file")
    return ProbeResult(str(path), ProbeKind.FILE, False, "file missing")


def directory_exists(path: Path) -> ProbeResult:
    try:
        present = path.is_dir()
    except OSError as e:
        return ProbeResult(str(path), ProbeKind.DIRECTORY, False, f"cannot stat: {e}")
    if present:
        return ProbeResult(str(path), ProbeKind.DIRECTORY, True, "directory exists")
    if path.exists():
        return ProbeResult(str(path), ProbeKind.DIRECTORY, False, "exists but is not a directory")
    return ProbeResult(str(path), ProbeKind.DIRECTORY, False, "directory missing")


def is_executable(path: Path) -> ProbeResult:
    if not path.is_file():
        return ProbeResult(str(path), ProbeKind.EXECUTABLE, False, "file missing")
    if os.access(path, os.X_OK):
        return ProbeResult(str(path), ProbeKind.EXECUTABLE, True, "executable")
    return ProbeResult(str(path), ProbeKind.EXECUTABLE, False, "not executable")


def _read_profile(profile: Path) -> tuple[str | None, str]:
    if not profile.exists():
        return None, PROFILE_MISSING
    try:
        return profile.read_text(encoding="utf-8"), ""
    except (OSError, UnicodeDecodeError) as e:
        return None, f"profile unreadable: {e}"


def function_defined(profile: Path, name: str) -> ProbeResult:
    """Search the profile text for `name() {` or `function name`."""
    content, diagnostic = _read_profile(profile)
    if content is None:
        return ProbeResult(name, ProbeKind.SHELL_FUNCTION, False, diagnostic)

    pattern = re.compile(
        rf"^[ \t]*(?:function[ \t]+{re.escape(name)}\b|{re.escape(name)}[ \t]*\(\))",
        re.MULTILINE,
    )
    if pattern.search(content):
        return ProbeResult(name, ProbeKind.SHELL_FUNCTION, True, f"defined in {profile.name}")
    return ProbeResult(name, ProbeKind.SHELL_FUNCTION, False, f"not defined in {profile.name}")


def alias_defined(profile: Path, name: str) -> ProbeResult:
    """Search the profile text for `alias name=`."""
    content, diagnostic = _read_profile(profile)
    if content is None:
        return ProbeResult(name, ProbeKind.SHELL_ALIAS, False, diagnostic)

    pattern = re.compile(rf"^[ \t]*alias[ \t]+{re.escape(name)}[ \t]*=", re.MULTILINE)
    if pattern.search(content):
        return ProbeResult(name, ProbeKind.SHELL_ALIAS, True, f"defined in {profile.name}")
    return ProbeResult(name, ProbeKind.SHELL_ALIAS, False, f"not defined in {profile.name}")


__all__ = [
    "PROFILE_MISSING",
    "command_exists",
    "file_exists",
    "directory_exists",
    "is_executable",
    "function_defined",
    "alias_defined",
]

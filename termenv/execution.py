"""Blocking command execution for external collaborators (package managers, git)."""

import logging
import subprocess
from typing import Callable, Tuple

DEFAULT_TIMEOUT = 30
CLONE_TIMEOUT = 300
INSTALL_TIMEOUT = 600

CommandRunner = Callable[[str, int], Tuple[str, int]]

_logging = logging.getLogger(__name__)


def run_command(command: str, timeout: int = DEFAULT_TIMEOUT) -> Tuple[str, int]:
    """Run a shell command to completion and return its output and return code."""
    _logging.debug(f"Running command: {command}")
    try:
        result = subprocess.run(
            command,
            shell=True,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        _logging.error(f"Command timed out after {timeout} seconds: {command}")
        return f"Command timed out after {timeout} seconds", 1
    except OSError as e:
        _logging.error(f"Command execution failed: {type(e).__name__}: {e} | Command: {command}")
        return f"Error: {e}", 1

    output = result.stdout.strip()
    if result.stderr:
        _logging.debug(f"stderr: {result.stderr.strip()}")
        if not output:
            output = result.stderr.strip()
    return output, result.returncode

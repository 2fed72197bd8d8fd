"""Idempotent text mutations of configuration files.

Every write goes through BackupManager.safe_update, so a pre-existing file is
always snapshotted before its first change in a run. Applying the same
mutation twice leaves the file byte-identical.

Managed blocks are marker-delimited regions owned by one component:

    # >>> termenv:aliases >>>
    alias gs='git status'
    # <<< termenv:aliases <<<
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from .backup import BackupManager
from .errors import MutationError
from .models import MutationResult

_logging = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManagedBlock:
    name: str
    comment: str = "#"
    closing: str = ""

    @property
    def begin(self) -> str:
        return f"{self.comment} >>> termenv:{self.name} >>>{self.closing}"

    @property
    def end(self) -> str:
        return f"{self.comment} <<< termenv:{self.name} <<<{self.closing}"

    def render(self, entries: list[str]) -> str:
        return "\n".join([self.begin, *entries, self.end]) + "\n"


def extract_blocks(content: str, comment: str = "#") -> list[str]:
    """Return the names of all managed blocks in `content`, in order."""
    pattern = re.compile(
        rf"^{re.escape(comment)} >>> termenv:(?P<name>[\w.-]+) >>>", re.MULTILINE
    )
    return [match.group("name") for match in pattern.finditer(content)]


def block_span(content: str, block: ManagedBlock) -> tuple[int, int] | None:
    """Return (start, stop) offsets of `block` including its trailing newline.

    A block whose end marker is missing runs to the end of the text.
    """
    start = _line_start(content, block.begin)
    if start is None:
        return None
    end = _line_start(content, block.end, start)
    if end is None:
        return start, len(content)
    stop = content.find("\n", end)
    return start, len(content) if stop == -1 else stop + 1


def _line_start(content: str, line: str, offset: int = 0) -> int | None:
    index = content.find(line, offset)
    while index != -1:
        if index == 0 or content[index - 1] == "\n":
            return index
        index = content.find(line, index + 1)
    return None


def _setting_pattern(key: str, separator: str) -> re.Pattern:
    sep = separator.strip()
    sep_pattern = rf"[ \t]*{re.escape(sep)}[ \t]*" if sep else r"[ \t]+"
    return re.compile(
        rf"^(?P<lead>[ \t]*(?:export[ \t]+)?){re.escape(key)}{sep_pattern}.*$",
        re.MULTILINE,
    )


def _with_newline(content: str) -> str:
    if content and not content.endswith("\n"):
        return content + "\n"
    return content


class Mutator:
    def __init__(self, backups: BackupManager):
        self.backups = backups

    def read(self, path: Path) -> str | None:
        """Return file text, or None when the file does not exist."""
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise MutationError(f"could not read {path}: {e}") from e

    def write_file(self, content: str, path: Path) -> MutationResult:
        return self.backups.safe_update(content, path)

    def line_exists(self, line: str, path: Path) -> bool:
        content = self.read(path)
        return content is not None and line in content

    def append_if_absent(self, line: str, path: Path) -> MutationResult:
        content = self.read(path)
        if content is not None and line in content:
            return MutationResult(path, False, "line present")
        self.write_file(_with_newline(content or "") + line + "\n", path)
        return MutationResult(path, True, f"appended: {line}")

    def block_exists(self, marker: str, path: Path) -> bool:
        """True when a line of `path` starts with `marker`."""
        content = self.read(path)
        return content is not None and _line_start(content, marker) is not None

    def append_block_if_absent(
        self, block: ManagedBlock, entries: list[str], path: Path
    ) -> MutationResult:
        """Write `block` once; an existing block is never re-rendered."""
        if self.block_exists(block.begin, path):
            return MutationResult(path, False, f"block {block.name} present")
        content = self.read(path)
        self.write_file(_with_newline(content or "") + block.render(entries), path)
        return MutationResult(path, True, f"added block {block.name}")

    def merge_block(
        self, block: ManagedBlock, entries: list[str], path: Path
    ) -> MutationResult:
        """Ensure every entry is inside `block`, adding only missing ones."""
        content = self.read(path)
        if content is None or _line_start(content, block.begin) is None:
            self.write_file(_with_newline(content or "") + block.render(entries), path)
            return MutationResult(path, True, f"added block {block.name}")

        start, stop = block_span(content, block)
        body = content[start:stop]
        missing = [entry for entry in entries if entry not in body]
        if not missing:
            return MutationResult(path, False, f"block {block.name} complete")

        insertion = "\n".join(missing) + "\n"
        end = _line_start(content, block.end, start)
        if end is None:
            updated = _with_newline(content) + insertion + block.end + "\n"
        else:
            updated = content[:end] + insertion + content[end:]
        self.write_file(updated, path)
        return MutationResult(
            path, True, f"merged {len(missing)} entries into block {block.name}"
        )

    def remove_block(self, block: ManagedBlock, path: Path) -> MutationResult:
        content = self.read(path)
        span = block_span(content, block) if content is not None else None
        if span is None:
            return MutationResult(path, False, f"block {block.name} absent")
        start, stop = span
        self.write_file(content[:start] + content[stop:], path)
        return MutationResult(path, True, f"removed block {block.name}")

    def setting_assigned(self, key: str, path: Path, separator: str = "=") -> bool:
        content = self.read(path)
        return content is not None and bool(_setting_pattern(key, separator).search(content))

    def replace_or_append_setting(
        self,
        key: str,
        value: str,
        path: Path,
        separator: str = "=",
        prefix: str = "",
    ) -> MutationResult:
        """Set `key` to `value`, editing the first uncommented assignment in place."""
        content = self.read(path)
        match = _setting_pattern(key, separator).search(content) if content else None
        if match is None:
            line = f"{prefix}{key}{separator}{value}"
            self.write_file(_with_newline(content or "") + line + "\n", path)
            return MutationResult(path, True, f"appended setting {key}")

        line = f"{match.group('lead')}{key}{separator}{value}"
        if match.group(0) == line:
            return MutationResult(path, False, f"setting {key} unchanged")
        updated = content[: match.start()] + line + content[match.end():]
        self.write_file(updated, path)
        _logging.debug(f"Replaced {match.group(0)!r} with {line!r} in {path}")
        return MutationResult(path, True, f"replaced setting {key}")


__all__ = [
    "ManagedBlock",
    "Mutator",
    "block_span",
    "extract_blocks",
]

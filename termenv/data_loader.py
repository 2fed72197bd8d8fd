"""Data loader for bundled component payloads.

Each component's configuration payload (profile aliases and functions, tmux and
Neovim settings, plugin clones, package lists, notes templates) lives in a YAML
file in the bundled data directory. The engine treats the content as opaque
text; this module only checks its shape.

Caching Strategy:
- A payload is loaded once on first access and cached per component name
- Use clear_cache() to force a reload of one or all payloads

Testing:
- Tests use clear_cache() to prevent state pollution between tests
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .errors import ConfigError, format_field_error

_logging = logging.getLogger(__name__)

PAYLOAD_NAMES = ("core", "shell", "multiplexer", "editor", "notes")

# Module-level cache
_payload_cache: dict[str, "ComponentPayload"] = {}


@dataclass(frozen=True)
class Tool:
    command: str
    package: str
    optional: bool = False


@dataclass(frozen=True)
class PackageManager:
    name: str
    binary: str
    install: str
    uninstall: str
    hint: str
    cask: str | None = None


@dataclass(frozen=True)
class Repo:
    name: str
    url: str
    path: str


@dataclass(frozen=True)
class Entry:
    """One line (or multi-line definition) owned by a managed block."""
    kind: str
    name: str
    value: str = ""
    separator: str = "="
    prefix: str = ""

    def render(self) -> str:
        if self.kind == "alias":
            return f"alias {self.name}='{self.value}'"
        if self.kind == "setting":
            return f"{self.prefix}{self.name}{self.separator}{self.value}"
        # function bodies and plain lines are stored verbatim
        return self.value


@dataclass(frozen=True)
class BlockSpec:
    name: str
    entries: tuple[Entry, ...]


@dataclass(frozen=True)
class ManagedFile:
    """A file written by a component.

    Files with `blocks` are assembled from managed blocks and may be merged
    into a user's existing file. Files with `content` are static text.
    """
    path: str
    comment: str = "#"
    header: str | None = None
    blocks: tuple[BlockSpec, ...] = ()
    content: str | None = None
    executable: bool = False
    create_only: bool = False

    @property
    def static(self) -> bool:
        return self.content is not None


@dataclass(frozen=True)
class Attachment:
    """A managed block one component owns inside another component's file."""
    path: str
    comment: str
    block: BlockSpec
    closing: str = ""
    once: bool = False


@dataclass(frozen=True)
class ComponentPayload:
    name: str
    description: str
    directories: tuple[str, ...] = ()
    files: tuple[ManagedFile, ...] = ()
    attachments: tuple[Attachment, ...] = ()
    repos: tuple[Repo, ...] = ()
    tools: tuple[Tool, ...] = ()
    casks: tuple[str, ...] = ()
    package_managers: dict[str, PackageManager] = field(default_factory=dict)


def _get_data_dir() -> Path:
    """Get path to bundled data directory."""
    return Path(__file__).parent / "data"


def _load_yaml_file(path: Path) -> dict:
    if not path.is_file():
        raise ConfigError(f"Data file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to read data file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to load data file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Data file {path} must contain a mapping")
    return data


def _require_str_field(data: dict, field: str, entity_name: str) -> str:
    if field not in data:
        raise ConfigError(f"{entity_name} missing required field: {field}")
    if not isinstance(data[field], str) or not data[field].strip():
        raise ConfigError(format_field_error(entity_name, field, "must be a non-empty string"))
    return data[field]


def _optional_field(data: dict, field: str, entity_name: str, field_type: type, default=None):
    value = data.get(field)
    if value is None:
        return default
    if not isinstance(value, field_type):
        raise ConfigError(
            format_field_error(entity_name, field, f"must be a {field_type.__name__} or null")
        )
    return value


def _string_list(data: dict, field: str, entity_name: str) -> tuple[str, ...]:
    items = _optional_field(data, field, entity_name, list, [])
    for i, item in enumerate(items):
        if not isinstance(item, str) or not item.strip():
            raise ConfigError(f"{entity_name} {field}[{i}] must be a non-empty string")
    return tuple(items)


def _string_map(data: dict, field: str, entity_name: str) -> dict[str, str]:
    items = _optional_field(data, field, entity_name, dict, {})
    for key, value in items.items():
        if not isinstance(value, (str, int, bool)):
            raise ConfigError(format_field_error(entity_name, f"{field}.{key}", "must be a scalar"))
    return {str(key): _scalar(value) for key, value in items.items()}


def _scalar(value) -> str:
    # YAML turns `on`/`true` into booleans; configuration text wants them back
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_block(data: dict, entity_name: str) -> BlockSpec:
    name = _require_str_field(data, "name", entity_name)
    entity = f"{entity_name} block '{name}'"
    separator = _optional_field(data, "separator", entity, str, "=")
    prefix = _optional_field(data, "prefix", entity, str, "")

    entries = []
    for key, value in _string_map(data, "settings", entity).items():
        entries.append(Entry("setting", key, value, separator, prefix))
    for key, value in _string_map(data, "aliases", entity).items():
        entries.append(Entry("alias", key, value))
    for key, value in _string_map(data, "functions", entity).items():
        entries.append(Entry("function", key, value.rstrip("\n")))
    for line in _string_list(data, "lines", entity):
        entries.append(Entry("line", line, line))

    if not entries:
        raise ConfigError(f"{entity} has no entries")
    return BlockSpec(name, tuple(entries))


def _parse_file(data: dict, entity_name: str) -> ManagedFile:
    path = _require_str_field(data, "path", entity_name)
    entity = f"{entity_name} file '{path}'"

    blocks = tuple(
        _parse_block(block, entity)
        for block in _optional_field(data, "blocks", entity, list, [])
    )
    content = _optional_field(data, "content", entity, str)
    if bool(blocks) == (content is not None):
        raise ConfigError(f"{entity} must define exactly one of 'blocks' or 'content'")

    return ManagedFile(
        path=path,
        comment=_optional_field(data, "comment", entity, str, "#"),
        header=_optional_field(data, "header", entity, str),
        blocks=blocks,
        content=content,
        executable=_optional_field(data, "executable", entity, bool, False),
        create_only=_optional_field(data, "create_only", entity, bool, False),
    )


def _parse_attachment(data: dict, entity_name: str) -> Attachment:
    path = _require_str_field(data, "path", entity_name)
    entity = f"{entity_name} attachment '{path}'"
    return Attachment(
        path=path,
        comment=_optional_field(data, "comment", entity, str, "#"),
        block=_parse_block(data, entity),
        closing=_optional_field(data, "closing", entity, str, ""),
        once=_optional_field(data, "once", entity, bool, False),
    )


def _parse_package_manager(name: str, data, entity_name: str) -> PackageManager:
    entity = f"{entity_name} package manager '{name}'"
    if not isinstance(data, dict):
        raise ConfigError(f"{entity} must be a mapping")
    return PackageManager(
        name=name,
        binary=_require_str_field(data, "binary", entity),
        install=_require_str_field(data, "install", entity),
        uninstall=_require_str_field(data, "uninstall", entity),
        hint=_require_str_field(data, "hint", entity),
        cask=_optional_field(data, "cask", entity, str),
    )


def _parse_payload(name: str, data: dict) -> ComponentPayload:
    entity = f"Payload '{name}'"
    tools = []
    for i, tool in enumerate(_optional_field(data, "tools", entity, list, [])):
        if not isinstance(tool, dict):
            raise ConfigError(f"{entity} tools[{i}] must be a mapping")
        command = _require_str_field(tool, "command", f"{entity} tool")
        tools.append(
            Tool(
                command=command,
                package=_optional_field(tool, "package", entity, str, command),
                optional=_optional_field(tool, "optional", entity, bool, False),
            )
        )

    repos = []
    for i, repo in enumerate(_optional_field(data, "repos", entity, list, [])):
        if not isinstance(repo, dict):
            raise ConfigError(f"{entity} repos[{i}] must be a mapping")
        repos.append(
            Repo(
                name=_require_str_field(repo, "name", f"{entity} repo"),
                url=_require_str_field(repo, "url", f"{entity} repo"),
                path=_require_str_field(repo, "path", f"{entity} repo"),
            )
        )

    managers = _optional_field(data, "package_managers", entity, dict, {})

    return ComponentPayload(
        name=name,
        description=_require_str_field(data, "description", entity),
        directories=_string_list(data, "directories", entity),
        files=tuple(
            _parse_file(item, entity)
            for item in _optional_field(data, "files", entity, list, [])
        ),
        attachments=tuple(
            _parse_attachment(item, entity)
            for item in _optional_field(data, "attachments", entity, list, [])
        ),
        repos=tuple(repos),
        tools=tuple(tools),
        casks=_string_list(data, "casks", entity),
        package_managers={
            key: _parse_package_manager(key, value, entity)
            for key, value in managers.items()
        },
    )


def get_payload(name: str) -> ComponentPayload:
    """Load one component payload from the bundled data directory.

    Raises:
        ConfigError: If the file cannot be loaded or its data is invalid
    """
    if name in _payload_cache:
        return _payload_cache[name]

    if name not in PAYLOAD_NAMES:
        raise ConfigError(f"Unknown payload '{name}'")

    path = _get_data_dir() / f"{name}.yaml"
    payload = _parse_payload(name, _load_yaml_file(path))
    _logging.debug(f"Loaded payload {name} from {path}")
    _payload_cache[name] = payload
    return payload


def clear_cache(name: str | None = None) -> None:
    """Clear cached payloads to force reload on next access.

    Raises:
        ValueError: If name is not a known payload
    """
    if name is None:
        _payload_cache.clear()
        return
    if name not in PAYLOAD_NAMES:
        raise ValueError(
            f"Invalid payload '{name}'. Must be one of: {', '.join(PAYLOAD_NAMES)}"
        )
    _payload_cache.pop(name, None)


__all__ = [
    "Tool",
    "PackageManager",
    "Repo",
    "Entry",
    "BlockSpec",
    "ManagedFile",
    "Attachment",
    "ComponentPayload",
    "PAYLOAD_NAMES",
    "get_payload",
    "clear_cache",
]

"""Exceptions and error formatting for termenv.

Fatal errors derive from EngineError and stop the current mode before any
further mutation. Best-effort failures are never raised; they are reported as
warnings on the run report.

Error Style Guide:
- User-facing errors use 'Error: ' prefix
- Field errors use structured format: '<entity> field '<field>' <issue>'
- Use present tense: 'must be', 'is required'
- Include actionable hints where helpful
"""


class EngineError(Exception):
    """Base class for errors that abort a run."""


class MissingDependencyError(EngineError):
    """A prerequisite external tool is not available."""


class BackupError(EngineError):
    """Snapshotting a path before mutation failed."""


class MutationError(EngineError):
    """Reading or writing a managed file failed."""


class RegistryError(EngineError):
    """The component table is incomplete or badly ordered."""


class ConfigError(Exception):
    """Raised when settings or payload files cannot be loaded or validated."""


def format_error(message: str) -> str:
    """Format an error message with consistent prefix.

    Examples:
        >>> format_error("backup of /tmp/x failed")
        'Error: backup of /tmp/x failed'
    """
    return f"Error: {message}"


def format_field_error(entity: str, field: str, issue: str) -> str:
    """Format a field validation error with structured format.

    Examples:
        >>> format_field_error("Payload 'shell'", "aliases", "must be a mapping")
        "Payload 'shell' field 'aliases' must be a mapping"
    """
    return f"{entity} field '{field}' {issue}"


def format_suggestion(message: str, suggestion: str) -> str:
    """Format an error message with a helpful suggestion.

    Examples:
        >>> format_suggestion("unknown component 'vim'", "run 'termenv --list'")
        "Error: unknown component 'vim'. Hint: run 'termenv --list'"
    """
    return f"{format_error(message)}. Hint: {suggestion}"


__all__ = [
    "EngineError",
    "MissingDependencyError",
    "BackupError",
    "MutationError",
    "RegistryError",
    "ConfigError",
    "format_error",
    "format_field_error",
    "format_suggestion",
]

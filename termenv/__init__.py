"""termenv: converge a developer workstation onto a declared shell, editor,
multiplexer and notes setup."""

__version__ = "0.3.0"

from .errors import (  # noqa: E402
    BackupError,
    ConfigError,
    EngineError,
    MissingDependencyError,
    MutationError,
    RegistryError,
    format_error,
    format_field_error,
    format_suggestion,
)
from .models import Mode, RunReport, RunState  # noqa: E402
from .paths import EnvContext, build_context  # noqa: E402
from .controller import ModeController  # noqa: E402
from .registry import ComponentRegistry, default_registry  # noqa: E402
from .versions import VersionTracker  # noqa: E402

__all__ = [
    "__version__",
    "BackupError",
    "ConfigError",
    "EngineError",
    "MissingDependencyError",
    "MutationError",
    "RegistryError",
    "format_error",
    "format_field_error",
    "format_suggestion",
    "Mode",
    "RunReport",
    "RunState",
    "EnvContext",
    "build_context",
    "ModeController",
    "ComponentRegistry",
    "default_registry",
    "VersionTracker",
]

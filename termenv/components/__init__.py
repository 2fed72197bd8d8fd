"""Installable components, in dependency order."""

from .base import Component, ComponentId, InstallStep
from .core import COMPONENT as CORE
from .editor import COMPONENT as EDITOR
from .multiplexer import COMPONENT as MULTIPLEXER
from .notes import COMPONENT as NOTES
from .shell import COMPONENT as SHELL

DEFAULT_COMPONENTS = (CORE, SHELL, MULTIPLEXER, EDITOR, NOTES)

__all__ = [
    "Component",
    "ComponentId",
    "InstallStep",
    "DEFAULT_COMPONENTS",
]

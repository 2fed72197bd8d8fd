"""Static, ordered component table keyed by ComponentId."""

import logging
from typing import Iterable

from .components import DEFAULT_COMPONENTS, Component, ComponentId
from .errors import RegistryError

_logging = logging.getLogger(__name__)


class ComponentRegistry:
    """Components in dependency order.

    The table is checked once at construction: every prerequisite must be
    registered ahead of the components that need it.
    """

    def __init__(self, components: Iterable[Component]):
        self._components: dict[ComponentId, Component] = {}
        for component in components:
            if component.id in self._components:
                raise RegistryError(f"component '{component.name}' registered twice")
            for prerequisite in component.prerequisites:
                if prerequisite not in self._components:
                    raise RegistryError(
                        f"component '{component.name}' requires '{prerequisite.value}', "
                        "which must be registered before it"
                    )
            self._components[component.id] = component

    def __iter__(self):
        return iter(self._components.values())

    def __len__(self) -> int:
        return len(self._components)

    def get(self, component_id: ComponentId) -> Component:
        try:
            return self._components[component_id]
        except KeyError:
            raise RegistryError(f"component '{component_id.value}' is not registered") from None

    def lookup(self, name: str) -> ComponentId | None:
        """Map a user-supplied name to a registered id, or None."""
        for component_id in self._components:
            if component_id.value == name.strip().lower():
                return component_id
        return None

    def names(self) -> list[str]:
        return [component.name for component in self]

    def resolve(self, ids: Iterable[ComponentId] | None = None) -> list[Component]:
        """Expand `ids` with their prerequisites and return them in table order.

        None means every registered component.
        """
        if ids is None:
            return list(self)

        wanted: set[ComponentId] = set()
        pending = list(ids)
        while pending:
            component_id = pending.pop()
            if component_id in wanted:
                continue
            wanted.add(component_id)
            pending.extend(self.get(component_id).prerequisites)
        return [component for component in self if component.id in wanted]

    def validate(self, components: Iterable[Component]) -> None:
        """Raise RegistryError if an activated component lacks an operation."""
        for component in components:
            missing = []
            if not component.install_steps:
                missing.append("install")
            if component.fix is None:
                missing.append("fix")
            if component.uninstall is None:
                missing.append("uninstall")
            if missing:
                raise RegistryError(
                    f"component '{component.name}' has no {', '.join(missing)} operation"
                )
            _logging.debug(f"Component {component.name} validated")


def default_registry() -> ComponentRegistry:
    return ComponentRegistry(DEFAULT_COMPONENTS)


__all__ = ["ComponentRegistry", "default_registry"]

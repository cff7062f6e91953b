"""Name-based lookup of model classes.

Generated classes refer to each other by name (forward references, circular
datatypes, definitions loaded from documents). A :class:`TypeRegistry` maps
those names to classes. Child registries fall back to their parent, which lets
a generator run register its types without touching the core datatypes.
"""

from __future__ import annotations

from collections.abc import Iterator

import structlog

from Medical_FHIR_model.utils.errors import UnknownTypeError

logger = structlog.get_logger(__name__)


class TypeRegistry:
    """Registry of model classes keyed by type name and optional aliases."""

    def __init__(self, *, parent: TypeRegistry | None = None, name: str = "core") -> None:
        self.name = name
        self._parent = parent
        self._types: dict[str, type] = {}

    def register(self, cls: type, *, aliases: tuple[str, ...] = (), replace: bool = False) -> type:
        """Register ``cls`` under its class name and any ``aliases``."""
        for key in (cls.__name__, *aliases):
            existing = self._types.get(key)
            if existing is not None and existing is not cls:
                if not replace:
                    raise ValueError(
                        f"Type name '{key}' is already registered in registry '{self.name}'"
                    )
                logger.debug(
                    "registry.type.replaced",
                    registry=self.name,
                    type_name=key,
                    previous=existing.__qualname__,
                )
            self._types[key] = cls
        return cls

    def resolve(self, name: str) -> type:
        """Return the class registered under ``name``.

        Raises:
            UnknownTypeError: If neither this registry nor a parent knows the name.
        """
        found = self._types.get(name)
        if found is not None:
            return found
        if self._parent is not None:
            return self._parent.resolve(name)
        raise UnknownTypeError(name)

    def get(self, name: str) -> type | None:
        try:
            return self.resolve(name)
        except UnknownTypeError:
            return None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        registry: TypeRegistry | None = self
        while registry is not None:
            for key in registry._types:
                if key not in seen:
                    seen.add(key)
                    yield key
            registry = registry._parent

    def is_resource_type(self, name: str) -> bool:
        """Return whether ``name`` resolves to a concrete resource class."""
        from Medical_FHIR_model.model.base import Resource

        cls = self.get(name)
        return (
            cls is not None
            and issubclass(cls, Resource)
            and not cls.__dict__.get("__abstract__", False)
        )

    def child(self, name: str = "generated") -> TypeRegistry:
        """Return a new registry that falls back to this one."""
        return TypeRegistry(parent=self, name=name)


CORE_REGISTRY = TypeRegistry()


__all__ = ["CORE_REGISTRY", "TypeRegistry"]

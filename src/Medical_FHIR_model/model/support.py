"""Introspection helpers over finalized model classes."""

from __future__ import annotations

from typing import Any

from Medical_FHIR_model.utils.naming import capitalize_first

from .declarations import ElementSpec


def element_specs(cls: type) -> tuple[ElementSpec, ...]:
    """Return the element declarations of ``cls`` in declaration order."""
    return getattr(cls, "__element_specs__", ())


def element_spec(cls: type, name: str) -> ElementSpec:
    for spec in element_specs(cls):
        if spec.name == name:
            return spec
    raise KeyError(f"{cls.__name__} has no element named '{name}'")


def resolved_types(cls: type, spec: ElementSpec) -> tuple[type, ...]:
    """Resolve the declared types of ``spec`` through the owner's registry.

    Results are cached per owner class; concurrent first resolutions write the
    same tuple.
    """
    cache: dict[str, tuple[type, ...]] = cls.__dict__["__resolved_types__"]
    found = cache.get(spec.name)
    if found is None:
        registry = cls.__registry__
        found = tuple(
            registry.resolve(kind) if isinstance(kind, str) else kind for kind in spec.types
        )
        cache[spec.name] = found
    return found


def choice_tag(spec: ElementSpec, value: Any) -> str:
    """Return the serialized name of a populated choice slot (``valueQuantity``)."""
    tag = getattr(type(value), "fhir_type", None) or type(value).__name__
    return spec.json_name + capitalize_first(tag)


def is_node(value: Any) -> bool:
    return hasattr(type(value), "__element_specs__")


__all__ = ["choice_tag", "element_spec", "element_specs", "is_node", "resolved_types"]

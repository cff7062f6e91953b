"""Node capability and the abstract element/resource bases.

Key Responsibilities:
    - Provide the :class:`Node` capability shared by every model class:
      content predicates, visitor acceptance, builder access, eager hashing
    - Finalize dataclasses into model classes (:func:`composite`,
      :func:`finalize_class`): element declarations, registry entry and a
      generated ``Builder``
    - Declare the abstract bases ``Element``, ``BackboneElement``, ``Resource``
      and ``DomainResource``

Collaborators:
    - Upstream: Hand-declared datatypes and the schema generator finalize
      their classes through this module
    - Downstream: :mod:`Medical_FHIR_model.validation.engine` validates every
      new instance from ``__post_init__``; :mod:`Medical_FHIR_model.visitor`
      drives traversal for ``accept``

Side Effects:
    - Registers finalized classes in a :class:`TypeRegistry`

Thread Safety:
    - Instances are immutable and safe to share; the hash is computed once
      during construction
"""

from __future__ import annotations

import dataclasses
from typing import Any, ClassVar

from Medical_FHIR_model.utils.naming import to_camel_case

from .builder import Builder, make_builder_class
from .declarations import ELEMENT_METADATA_KEY, Constraint, ElementSpec, element
from .registry import CORE_REGISTRY, TypeRegistry
from .support import element_specs, is_node

# ==============================================================================
# NODE CAPABILITY
# ==============================================================================


class Node:
    """Capability mixed into every model class."""

    __element_specs__: ClassVar[tuple[ElementSpec, ...]] = ()
    __registry__: ClassVar[TypeRegistry] = CORE_REGISTRY
    __abstract__: ClassVar[bool] = True
    constraints: ClassVar[tuple[Constraint, ...]] = ()
    Builder: ClassVar[type[Builder]]

    def __post_init__(self) -> None:
        cls = type(self)
        if cls.__dict__.get("__abstract__", True):
            raise TypeError(f"Cannot instantiate abstract model type {cls.__name__}")
        from Medical_FHIR_model.validation.engine import finalize_node

        finalize_node(self)
        object.__setattr__(
            self,
            "_hash",
            hash((cls, *(getattr(self, spec.name) for spec in element_specs(cls)))),
        )

    def has_value(self) -> bool:
        return False

    def has_children(self) -> bool:
        """Return True when any element holds a child node or a non-empty list."""
        for spec in element_specs(type(self)):
            value = getattr(self, spec.name)
            if is_node(value) or (isinstance(value, tuple) and value):
                return True
        return False

    def has_content(self) -> bool:
        return self.has_value() or self.has_children()

    def accept(self, visitor: Any, name: str | None = None, index: int | None = None) -> None:
        from Medical_FHIR_model.visitor.base import accept

        accept(self, visitor, name, index)

    @classmethod
    def builder(cls) -> Builder:
        return cls.Builder()

    def to_builder(self) -> Builder:
        return type(self).Builder.from_instance(self)

    def __hash__(self) -> int:
        return self._hash

    def __repr__(self) -> str:
        parts = []
        for spec in element_specs(type(self)):
            value = getattr(self, spec.name)
            if value is None or value == ():
                continue
            parts.append(f"{spec.name}={value!r}")
        return f"{type(self).__name__}({', '.join(parts)})"


# ==============================================================================
# CLASS FINALIZATION
# ==============================================================================


def finalize_class(
    cls: type,
    *,
    registry: TypeRegistry | None = None,
    abstract: bool = False,
    aliases: tuple[str, ...] = (),
) -> type:
    """Turn a frozen dataclass deriving from :class:`Node` into a model class."""
    if not issubclass(cls, Node):
        raise TypeError(f"{cls.__name__} must derive from Node")
    registry = registry if registry is not None else CORE_REGISTRY
    specs: list[ElementSpec] = []
    for item in dataclasses.fields(cls):
        spec = item.metadata.get(ELEMENT_METADATA_KEY)
        if spec is None:
            continue
        specs.append(
            dataclasses.replace(
                spec, name=item.name, json_name=spec.json_name or to_camel_case(item.name)
            )
        )
    cls.__element_specs__ = tuple(specs)
    cls.__registry__ = registry
    cls.__resolved_types__ = {}
    cls.__abstract__ = abstract
    cls.__hash__ = Node.__hash__
    cls.Builder = make_builder_class(cls)
    registry.register(cls, aliases=aliases, replace=True)
    return cls


def composite(
    cls: type | None = None,
    *,
    registry: TypeRegistry | None = None,
    abstract: bool = False,
    aliases: tuple[str, ...] = (),
) -> Any:
    """Class decorator declaring an immutable model class.

    Example:
        >>> @composite
        ... class Ratio(Element):
        ...     numerator: Quantity | None = element("Quantity")
    """

    def wrap(target: type) -> type:
        target = dataclasses.dataclass(frozen=True, eq=True, kw_only=True, repr=False)(target)
        return finalize_class(target, registry=registry, abstract=abstract, aliases=aliases)

    if cls is None:
        return wrap
    return wrap(cls)


# ==============================================================================
# ABSTRACT BASES
# ==============================================================================


@composite(abstract=True)
class Element(Node):
    """Base for every datatype and backbone element."""

    id: str | None = element(str, lexical="string")
    extension: tuple[Any, ...] = element("Extension", repeating=True)


@composite(abstract=True)
class BackboneElement(Element):
    """Base for elements nested inside a resource definition."""

    modifier_extension: tuple[Any, ...] = element("Extension", repeating=True)


@composite(abstract=True)
class Resource(Node):
    """Base for every resource; resources are exempt from the content rule."""

    id: str | None = element(str, lexical="id")
    implicit_rules: Any = element("Uri")
    language: Any = element("Code")


def _contained_without_nesting(resource: DomainResource) -> bool:
    return all(not getattr(item, "contained", ()) for item in resource.contained)


@composite(abstract=True)
class DomainResource(Resource):
    """Resource that may carry contained resources and extensions."""

    contained: tuple[Resource, ...] = element("Resource", repeating=True)
    extension: tuple[Any, ...] = element("Extension", repeating=True)
    modifier_extension: tuple[Any, ...] = element("Extension", repeating=True)

    constraints = (
        Constraint(
            key="dom-2",
            description=(
                "If the resource is contained in another resource, "
                "it SHALL NOT contain nested Resources"
            ),
            predicate=_contained_without_nesting,
        ),
    )


__all__ = [
    "BackboneElement",
    "DomainResource",
    "Element",
    "Node",
    "Resource",
    "composite",
    "finalize_class",
]

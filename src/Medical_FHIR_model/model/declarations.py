"""Field-level declarations that every generated model class is composed from.

Key Responsibilities:
    - Describe a field's allowed types, cardinality, choice-ness, reference
      target kinds and terminology binding (:class:`ElementSpec`)
    - Describe cross-field invariants as boolean predicates (:class:`Constraint`)
    - Provide the ``element()`` / ``choice()`` helpers used inside class bodies

Collaborators:
    - Downstream: :mod:`Medical_FHIR_model.model.base` reads the declarations
      when finalizing a class, the validation engine evaluates them and the
      generator emits them from type definitions

Thread Safety:
    - Thread-safe; all declarations are frozen dataclasses
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

ELEMENT_METADATA_KEY = "fhir_element"


class BindingStrength(str, Enum):
    """How strictly a coded element must draw from its value set."""

    REQUIRED = "required"
    EXTENSIBLE = "extensible"
    PREFERRED = "preferred"
    EXAMPLE = "example"


@dataclass(frozen=True, slots=True)
class Binding:
    """Terminology binding attached to a coded element.

    Only ``REQUIRED`` bindings that list their ``codes`` locally are enforced by
    the runtime; everything else is advisory input for a terminology service.
    """

    strength: BindingStrength
    value_set: str | None = None
    codes: tuple[str, ...] = ()
    system: str | None = None

    @property
    def enforced(self) -> bool:
        return self.strength is BindingStrength.REQUIRED and bool(self.codes)


@dataclass(frozen=True, slots=True)
class ElementSpec:
    """Declaration of one field of a composite type.

    Attributes:
        types: Allowed types. Entries may be classes or registry names that are
            resolved lazily, which is how forward and circular references
            (``Element.extension`` -> ``Extension``) are expressed.
        required: Whether the field must be populated (non-empty for lists).
        repeating: Whether the field holds an ordered list of values.
        choice: Whether the field is a choice slot over ``types``.
        targets: Allowed target kinds for ``Reference`` values.
        binding: Optional terminology binding for coded values.
        prohibited: Whether the field must stay empty (``max = 0``).
        name: Python attribute name, filled in when the owner class is finalized.
        json_name: Element name used by serializers; defaults to camelCase of ``name``.
        lexical: Lexical rule applied to raw string values (``"id"``, ``"uri"``, ...).
    """

    types: tuple[type | str, ...]
    required: bool = False
    repeating: bool = False
    choice: bool = False
    targets: tuple[str, ...] = ()
    binding: Binding | None = None
    prohibited: bool = False
    name: str = ""
    json_name: str = ""
    lexical: str = ""

    @property
    def cardinality(self) -> str:
        if self.prohibited:
            return "0..0"
        lower = "1" if self.required else "0"
        upper = "*" if self.repeating else "1"
        return f"{lower}..{upper}"


@dataclass(frozen=True, slots=True)
class Constraint:
    """A schema-declared invariant evaluated as a boolean predicate.

    ``severity="warning"`` constraints are reported through logging only.
    """

    key: str
    description: str
    predicate: Callable[[Any], bool]
    severity: str = "error"


def element(
    *types: type | str,
    required: bool = False,
    repeating: bool = False,
    targets: tuple[str, ...] | list[str] = (),
    binding: Binding | None = None,
    prohibited: bool = False,
    json_name: str = "",
    choice: bool = False,
    lexical: str = "",
) -> Any:
    """Declare a model field inside a composite class body."""
    if not types:
        raise TypeError("element() requires at least one allowed type")
    spec = ElementSpec(
        types=tuple(types),
        required=required,
        repeating=repeating,
        choice=choice,
        targets=tuple(targets),
        binding=binding,
        prohibited=prohibited,
        json_name=json_name,
        lexical=lexical,
    )
    default: Any = () if repeating else None
    return field(default=default, metadata={ELEMENT_METADATA_KEY: spec})


def choice(
    *types: type | str,
    required: bool = False,
    targets: tuple[str, ...] | list[str] = (),
    json_name: str = "",
) -> Any:
    """Declare a choice slot (``value[x]``) over the given alternatives."""
    return element(*types, required=required, targets=targets, json_name=json_name, choice=True)


__all__ = [
    "ELEMENT_METADATA_KEY",
    "Binding",
    "BindingStrength",
    "Constraint",
    "ElementSpec",
    "choice",
    "element",
]

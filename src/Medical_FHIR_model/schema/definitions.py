"""Pydantic models describing machine-readable type definitions.

A definition document lists types; each type lists its elements (with
cardinality, allowed types, reference targets and bindings) and its
constraints. The :mod:`Medical_FHIR_model.schema.generator` turns these models
into runtime classes.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from Medical_FHIR_model.model.declarations import Binding, BindingStrength

CHOICE_SUFFIX = "[x]"


class DefinitionModel(BaseModel):
    """Base model for definition documents; strict and immutable."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class BindingDefinition(DefinitionModel):
    strength: BindingStrength
    value_set: str | None = Field(default=None, alias="valueSet")
    codes: tuple[str, ...] = Field(default=(), description="Locally enumerated codes")
    system: str | None = Field(default=None, description="Code system of the enumerated codes")

    def to_binding(self) -> Binding:
        return Binding(
            strength=self.strength,
            value_set=self.value_set,
            codes=self.codes,
            system=self.system,
        )


class ConstraintDefinition(DefinitionModel):
    """Cross-field invariant.

    ``exclusive``: at most one of ``fields`` is populated.
    ``at_least_one``: at least one of ``fields`` is populated.
    ``requires``: when the first field is populated, so is the second.
    ``expression``: evaluated by an externally supplied predicate keyed by ``key``.
    """

    key: str = Field(min_length=1)
    human: str = Field(min_length=1)
    kind: Literal["exclusive", "at_least_one", "requires", "expression"]
    fields: tuple[str, ...] = ()
    expression: str | None = None
    severity: Literal["error", "warning"] = "error"

    @model_validator(mode="after")
    def _validate_fields(self) -> ConstraintDefinition:
        if self.kind == "expression":
            if not self.expression:
                raise ValueError(f"Constraint '{self.key}' of kind expression needs an expression")
        elif self.kind == "requires":
            if len(self.fields) != 2:
                raise ValueError(f"Constraint '{self.key}' of kind requires needs exactly 2 fields")
        elif len(self.fields) < 2:
            raise ValueError(f"Constraint '{self.key}' of kind {self.kind} needs at least 2 fields")
        return self


class ElementDefinition(DefinitionModel):
    """One element of a type; nested ``elements`` declare a backbone type."""

    name: str = Field(pattern=r"^[a-z][A-Za-z0-9]*(\[x\])?$")
    types: tuple[str, ...] = Field(default=(), description="Allowed type names")
    min: int = Field(default=0, ge=0, le=1)
    max: int | Literal["*"] = Field(default=1, description="Upper bound, '*' for unbounded")
    targets: tuple[str, ...] = Field(default=(), description="Allowed reference target kinds")
    binding: BindingDefinition | None = None
    elements: tuple[ElementDefinition, ...] = Field(default=())
    constraints: tuple[ConstraintDefinition, ...] = Field(
        default=(), description="Invariants of the nested backbone type"
    )

    @field_validator("max")
    @classmethod
    def _validate_max(cls, value: int | str) -> int | str:
        if isinstance(value, int) and value < 0:
            raise ValueError("max must be '*' or a non-negative integer")
        return value

    @model_validator(mode="after")
    def _validate_shape(self) -> ElementDefinition:
        if self.elements and self.types:
            raise ValueError(f"Element '{self.name}' declares both types and nested elements")
        if not self.elements and not self.types:
            raise ValueError(f"Element '{self.name}' must declare types or nested elements")
        if self.is_choice and self.elements:
            raise ValueError(f"Choice element '{self.name}' cannot declare nested elements")
        if self.is_choice and self.repeating:
            raise ValueError(f"Choice element '{self.name}' cannot repeat")
        if self.constraints and not self.elements:
            raise ValueError(
                f"Element '{self.name}' declares constraints without nested elements"
            )
        nested = {element.base_name for element in self.elements}
        for constraint in self.constraints:
            unknown = [field for field in constraint.fields if field not in nested]
            if unknown:
                raise ValueError(
                    f"Constraint '{constraint.key}' of element '{self.name}' "
                    f"names unknown elements: {unknown}"
                )
        if self.min == 1 and self.max == 0:
            raise ValueError(f"Element '{self.name}' cannot be both required and prohibited")
        return self

    @property
    def is_choice(self) -> bool:
        return self.name.endswith(CHOICE_SUFFIX)

    @property
    def base_name(self) -> str:
        """Element name without the choice suffix (``value[x]`` -> ``value``)."""
        return self.name.removesuffix(CHOICE_SUFFIX)

    @property
    def required(self) -> bool:
        return self.min >= 1

    @property
    def repeating(self) -> bool:
        return self.max == "*" or self.max > 1

    @property
    def prohibited(self) -> bool:
        return self.max == 0


class TypeDefinition(DefinitionModel):
    name: str = Field(pattern=r"^[A-Z][A-Za-z0-9]*$")
    kind: Literal["resource", "datatype", "backbone"]
    base: str | None = None
    abstract: bool = False
    description: str | None = None
    elements: tuple[ElementDefinition, ...] = ()
    constraints: tuple[ConstraintDefinition, ...] = ()

    @model_validator(mode="after")
    def _validate_elements(self) -> TypeDefinition:
        names = [element.base_name for element in self.elements]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Type '{self.name}' declares duplicate elements: {duplicates}")
        for constraint in self.constraints:
            unknown = [field for field in constraint.fields if field not in names]
            if unknown:
                raise ValueError(
                    f"Constraint '{constraint.key}' of type '{self.name}' "
                    f"names unknown elements: {unknown}"
                )
        return self


class DefinitionDocument(DefinitionModel):
    types: tuple[TypeDefinition, ...]

    @model_validator(mode="after")
    def _validate_unique_names(self) -> DefinitionDocument:
        names = [definition.name for definition in self.types]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate type names: {duplicates}")
        return self


__all__ = [
    "CHOICE_SUFFIX",
    "BindingDefinition",
    "ConstraintDefinition",
    "DefinitionDocument",
    "DefinitionModel",
    "ElementDefinition",
    "TypeDefinition",
]

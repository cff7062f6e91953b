"""Immutable FHIR object model: bases, declarations, primitives and datatypes."""

from .base import (
    BackboneElement,
    DomainResource,
    Element,
    Node,
    Resource,
    composite,
    finalize_class,
)
from .builder import Builder
from .datatypes import (
    Annotation,
    CodeableConcept,
    Coding,
    Extension,
    Identifier,
    Period,
    Quantity,
    Reference,
)
from .declarations import Binding, BindingStrength, Constraint, ElementSpec, choice, element
from .primitives import (
    PRIMITIVE_TYPES,
    Base64Binary,
    Boolean,
    Canonical,
    Code,
    Date,
    DateTime,
    Decimal,
    Id,
    Integer,
    Markdown,
    PositiveInt,
    PrimitiveType,
    String,
    UnsignedInt,
    Uri,
    Url,
)
from .registry import CORE_REGISTRY, TypeRegistry
from .support import choice_tag, element_spec, element_specs, is_node, resolved_types

__all__ = [
    "CORE_REGISTRY",
    "PRIMITIVE_TYPES",
    "Annotation",
    "BackboneElement",
    "Base64Binary",
    "Binding",
    "BindingStrength",
    "Boolean",
    "Builder",
    "Canonical",
    "Code",
    "CodeableConcept",
    "Coding",
    "Constraint",
    "Date",
    "DateTime",
    "Decimal",
    "DomainResource",
    "Element",
    "ElementSpec",
    "Extension",
    "Id",
    "Identifier",
    "Integer",
    "Markdown",
    "Node",
    "Period",
    "PositiveInt",
    "PrimitiveType",
    "Quantity",
    "Reference",
    "Resource",
    "String",
    "TypeRegistry",
    "UnsignedInt",
    "Uri",
    "Url",
    "choice",
    "choice_tag",
    "composite",
    "element",
    "element_spec",
    "element_specs",
    "finalize_class",
    "is_node",
    "resolved_types",
]

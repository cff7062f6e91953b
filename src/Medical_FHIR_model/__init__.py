"""Schema-driven immutable FHIR object model.

Key Responsibilities:
    - Export the model runtime: element bases, primitives, core datatypes and
      generated builders
    - Export the validation chain, the visitor protocol and the type generator

Collaborators:
    - Upstream: Applications build instances with ``Type.builder()`` and load
      resource definitions with :func:`generate_types`
    - Downstream: All Medical_FHIR_model subpackages

Side Effects:
    - Importing registers the core primitives and datatypes in ``CORE_REGISTRY``

Thread Safety:
    - Thread-safe: built instances are immutable

Example:
    >>> from Medical_FHIR_model import Quantity
    >>> Quantity.builder().value(5).unit("mg").build().unit.value
    'mg'
"""

from .config import ModelSettings, get_settings, load_settings
from .model import (
    CORE_REGISTRY,
    Annotation,
    BackboneElement,
    Binding,
    BindingStrength,
    Code,
    CodeableConcept,
    Coding,
    Constraint,
    DomainResource,
    Element,
    Extension,
    Identifier,
    Period,
    Quantity,
    Reference,
    Resource,
    String,
    TypeRegistry,
    choice,
    composite,
    element,
)
from .schema import DefinitionDocumentError, TypeGenerator, generate_types, load_definitions
from .validation import ModelValidationError, Violation
from .validation.engine import validate_node
from .visitor import CollectingVisitor, DefaultVisitor, PathAwareVisitor, accept, to_dict

__all__ = [
    "CORE_REGISTRY",
    "Annotation",
    "BackboneElement",
    "Binding",
    "BindingStrength",
    "Code",
    "CodeableConcept",
    "Coding",
    "CollectingVisitor",
    "Constraint",
    "DefaultVisitor",
    "DefinitionDocumentError",
    "DomainResource",
    "Element",
    "Extension",
    "Identifier",
    "ModelSettings",
    "ModelValidationError",
    "PathAwareVisitor",
    "Period",
    "Quantity",
    "Reference",
    "Resource",
    "String",
    "TypeGenerator",
    "TypeRegistry",
    "Violation",
    "accept",
    "choice",
    "composite",
    "element",
    "generate_types",
    "get_settings",
    "load_definitions",
    "load_settings",
    "to_dict",
    "validate_node",
]

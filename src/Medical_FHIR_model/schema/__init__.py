"""Type-definition documents and the class generator."""

from .definitions import (
    BindingDefinition,
    ConstraintDefinition,
    DefinitionDocument,
    ElementDefinition,
    TypeDefinition,
)
from .documents import (
    DEFINITION_DOCUMENT_SCHEMA,
    DefinitionDocumentError,
    DefinitionDocumentValidator,
)
from .generator import TypeGenerator, generate_types, load_definitions

__all__ = [
    "DEFINITION_DOCUMENT_SCHEMA",
    "BindingDefinition",
    "ConstraintDefinition",
    "DefinitionDocument",
    "DefinitionDocumentError",
    "DefinitionDocumentValidator",
    "ElementDefinition",
    "TypeDefinition",
    "TypeGenerator",
    "generate_types",
    "load_definitions",
]

"""Validation of type-definition documents using JSON Schema.

This module checks raw definition documents (parsed YAML or JSON) before they
are turned into pydantic models and generated classes.

The module supports:
- JSON Schema validation of the document structure (Draft 2020-12)
- Conversion of pydantic validation errors into the same path-based messages
- Custom schema support

Thread Safety:
    Thread-safe: Validator instances are stateless after construction.

Performance:
    Schema compilation happens once during initialization.

Example:
    >>> validator = DefinitionDocumentValidator()
    >>> validator.validate({"types": [{"name": "Ratio", "kind": "datatype"}]})
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from jsonschema import Draft202012Validator
from pydantic import ValidationError

from .definitions import DefinitionDocument

# ==============================================================================
# SCHEMA
# ==============================================================================

_BINDING_SCHEMA: dict[str, object] = {
    "type": "object",
    "required": ["strength"],
    "additionalProperties": False,
    "properties": {
        "strength": {"enum": ["required", "extensible", "preferred", "example"]},
        "valueSet": {"type": "string"},
        "codes": {"type": "array", "items": {"type": "string", "minLength": 1}},
        "system": {"type": "string"},
    },
}

_ELEMENT_SCHEMA: dict[str, object] = {
    "type": "object",
    "required": ["name"],
    "additionalProperties": False,
    "properties": {
        "name": {"type": "string", "pattern": r"^[a-z][A-Za-z0-9]*(\[x\])?$"},
        "types": {"type": "array", "items": {"type": "string", "minLength": 1}},
        "min": {"type": "integer", "minimum": 0, "maximum": 1},
        "max": {"oneOf": [{"const": "*"}, {"type": "integer", "minimum": 0}]},
        "targets": {"type": "array", "items": {"type": "string", "minLength": 1}},
        "binding": {"$ref": "#/$defs/binding"},
        "elements": {"type": "array", "minItems": 1, "items": {"$ref": "#/$defs/element"}},
        "constraints": {"type": "array", "items": {"$ref": "#/$defs/constraint"}},
    },
    "if": {"required": ["elements"]},
    "then": {"not": {"required": ["types"]}},
    "else": {"required": ["types"], "properties": {"types": {"minItems": 1}}},
}

_CONSTRAINT_SCHEMA: dict[str, object] = {
    "type": "object",
    "required": ["key", "human", "kind"],
    "additionalProperties": False,
    "properties": {
        "key": {"type": "string", "minLength": 1},
        "human": {"type": "string", "minLength": 1},
        "kind": {"enum": ["exclusive", "at_least_one", "requires", "expression"]},
        "fields": {"type": "array", "items": {"type": "string"}},
        "expression": {"type": "string"},
        "severity": {"enum": ["error", "warning"]},
    },
}

_TYPE_SCHEMA: dict[str, object] = {
    "type": "object",
    "required": ["name", "kind"],
    "additionalProperties": False,
    "properties": {
        "name": {"type": "string", "pattern": "^[A-Z][A-Za-z0-9]*$"},
        "kind": {"enum": ["resource", "datatype", "backbone"]},
        "base": {"type": "string"},
        "abstract": {"type": "boolean"},
        "description": {"type": "string"},
        "elements": {"type": "array", "items": {"$ref": "#/$defs/element"}},
        "constraints": {"type": "array", "items": {"$ref": "#/$defs/constraint"}},
    },
}

DEFINITION_DOCUMENT_SCHEMA: dict[str, object] = {
    "$id": "https://example.org/medical-fhir-model/definitions",
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["types"],
    "additionalProperties": False,
    "properties": {"types": {"type": "array", "items": {"$ref": "#/$defs/type"}}},
    "$defs": {
        "binding": _BINDING_SCHEMA,
        "element": _ELEMENT_SCHEMA,
        "constraint": _CONSTRAINT_SCHEMA,
        "type": _TYPE_SCHEMA,
    },
}


# ==============================================================================
# VALIDATOR IMPLEMENTATION
# ==============================================================================


class DefinitionDocumentError(ValueError):
    """Raised when a definition document is malformed or cannot be generated."""

    def __init__(self, errors: Sequence[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class DefinitionDocumentValidator:
    """Validate definition documents against the document schema."""

    def __init__(self, *, schema: Mapping[str, object] | None = None) -> None:
        """Initialize validator with a schema.

        Args:
            schema: Optional custom schema to use instead of the default.
        """
        self._validator = Draft202012Validator(schema or DEFINITION_DOCUMENT_SCHEMA)

    def validate(self, document: Any) -> None:
        """Validate a raw document.

        Raises:
            DefinitionDocumentError: If the document does not match the schema.
        """
        errors = self._validate_schema(document)
        if errors:
            raise DefinitionDocumentError(errors)

    def parse(self, document: Any) -> DefinitionDocument:
        """Validate a raw document and convert it into a :class:`DefinitionDocument`.

        Raises:
            DefinitionDocumentError: If schema or model validation fails.
        """
        self.validate(document)
        try:
            return DefinitionDocument.model_validate(document)
        except ValidationError as exc:
            raise DefinitionDocumentError(
                [
                    f"{'.'.join(str(part) for part in error['loc']) or 'root'}: {error['msg']}"
                    for error in exc.errors()
                ]
            ) from exc

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _validate_schema(self, document: Any) -> list[str]:
        errors: list[str] = []
        for error in self._validator.iter_errors(document):
            path = ".".join(str(part) for part in error.path)
            errors.append(f"{path or 'root'}: {error.message}")
        return errors


__all__ = [
    "DEFINITION_DOCUMENT_SCHEMA",
    "DefinitionDocumentError",
    "DefinitionDocumentValidator",
]

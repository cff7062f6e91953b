"""Validation rules, violations and reference inspection.

The ordered validation chain lives in :mod:`Medical_FHIR_model.validation.engine`,
which depends on the model classes and is imported on first construction.
"""

from .references import ReferenceTarget, has_scheme, parse_reference
from .support import (
    DATA_ABSENT_REASON_EXTENSION_URL,
    has_only_data_absent_reason,
    validate_binding,
    validate_choice,
    validate_has_content,
    validate_list,
    validate_prohibited,
    validate_reference_list,
    validate_reference_targets,
    validate_required,
    validate_type,
)
from .violations import (
    BindingViolation,
    ChoiceViolation,
    CrossFieldInvariantViolation,
    EmptyLeafViolation,
    MissingRequiredViolation,
    ModelValidationError,
    NullElementViolation,
    PrimitiveValueViolation,
    ProhibitedElementViolation,
    ReferenceTargetViolation,
    Violation,
    WrongElementTypeViolation,
)

__all__ = [
    "DATA_ABSENT_REASON_EXTENSION_URL",
    "BindingViolation",
    "ChoiceViolation",
    "CrossFieldInvariantViolation",
    "EmptyLeafViolation",
    "MissingRequiredViolation",
    "ModelValidationError",
    "NullElementViolation",
    "PrimitiveValueViolation",
    "ProhibitedElementViolation",
    "ReferenceTarget",
    "ReferenceTargetViolation",
    "Violation",
    "WrongElementTypeViolation",
    "has_only_data_absent_reason",
    "has_scheme",
    "parse_reference",
    "validate_binding",
    "validate_choice",
    "validate_has_content",
    "validate_list",
    "validate_prohibited",
    "validate_reference_list",
    "validate_reference_targets",
    "validate_required",
    "validate_type",
]

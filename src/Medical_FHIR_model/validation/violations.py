"""Typed validation violations and the error that carries them.

Every rule of the validation chain reports a :class:`Violation` naming the
offending field (and list index where applicable) plus the rule that failed.
``build()`` raises all violations of a node together as one
:class:`ModelValidationError`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import Any, ClassVar

from Medical_FHIR_model.utils.errors import FoundationError

# ==============================================================================
# VIOLATIONS
# ==============================================================================


@dataclass(frozen=True, slots=True, kw_only=True)
class Violation:
    """Base class for a single failed rule."""

    rule: ClassVar[str] = "violation"

    field: str | None = None
    index: int | None = None

    @property
    def location(self) -> str:
        if self.field is None:
            return "<node>"
        if self.index is None:
            return self.field
        return f"{self.field}[{self.index}]"

    @property
    def message(self) -> str:
        return "Validation failed"

    def as_dict(self) -> dict[str, Any]:
        payload = {key: value for key, value in asdict(self).items() if value not in (None, "", ())}
        payload["rule"] = self.rule
        payload["message"] = self.message
        return payload

    def __str__(self) -> str:
        return f"{self.location}: {self.message}"


@dataclass(frozen=True, slots=True, kw_only=True)
class MissingRequiredViolation(Violation):
    rule: ClassVar[str] = "required"

    @property
    def message(self) -> str:
        return f"Missing required element: '{self.field}'"


@dataclass(frozen=True, slots=True, kw_only=True)
class ProhibitedElementViolation(Violation):
    rule: ClassVar[str] = "prohibited"

    @property
    def message(self) -> str:
        return f"Element: '{self.field}' is prohibited"


@dataclass(frozen=True, slots=True, kw_only=True)
class ChoiceViolation(Violation):
    rule: ClassVar[str] = "choice-type"

    allowed_types: tuple[str, ...] = ()
    actual_type: str = ""

    @property
    def message(self) -> str:
        return (
            f"Invalid type: {self.actual_type} for choice element: '{self.field}' "
            f"must be one of: [{', '.join(self.allowed_types)}]"
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class ReferenceTargetViolation(Violation):
    rule: ClassVar[str] = "reference-type"

    allowed_kinds: tuple[str, ...] = ()
    actual_kind: str = ""
    detail: str = ""

    @property
    def message(self) -> str:
        if self.detail:
            return self.detail
        return (
            f"Resource type: {self.actual_kind} for element: '{self.field}' "
            f"must be one of: [{', '.join(self.allowed_kinds)}]"
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class NullElementViolation(Violation):
    rule: ClassVar[str] = "null-element"

    @property
    def message(self) -> str:
        return f"Repeating element: '{self.field}' does not permit null elements"


@dataclass(frozen=True, slots=True, kw_only=True)
class WrongElementTypeViolation(Violation):
    rule: ClassVar[str] = "element-type"

    expected_types: tuple[str, ...] = ()
    actual_type: str = ""

    @property
    def message(self) -> str:
        return (
            f"Invalid type: {self.actual_type} for element: '{self.field}' "
            f"must be: {' | '.join(self.expected_types)}"
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class EmptyLeafViolation(Violation):
    rule: ClassVar[str] = "ele-1"

    type_name: str = ""

    @property
    def message(self) -> str:
        return f"{self.type_name or 'Element'} must have a value or children"


@dataclass(frozen=True, slots=True, kw_only=True)
class CrossFieldInvariantViolation(Violation):
    rule: ClassVar[str] = "invariant"

    key: str = ""
    description: str = ""

    @property
    def message(self) -> str:
        return f"Constraint '{self.key}' failed: {self.description}"


@dataclass(frozen=True, slots=True, kw_only=True)
class BindingViolation(Violation):
    rule: ClassVar[str] = "binding"

    value_set: str = ""
    code: str = ""
    allowed_codes: tuple[str, ...] = ()

    @property
    def message(self) -> str:
        source = f" from value set '{self.value_set}'" if self.value_set else ""
        return (
            f"Code '{self.code}' for element: '{self.field}' must be one of"
            f"{source}: [{', '.join(self.allowed_codes)}]"
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class PrimitiveValueViolation(Violation):
    rule: ClassVar[str] = "primitive-value"

    detail: str = ""

    @property
    def message(self) -> str:
        return self.detail or "Invalid primitive value"


# ==============================================================================
# ERROR HANDLING
# ==============================================================================


class ModelValidationError(FoundationError):
    """Raised when a model instance cannot be constructed.

    Attributes:
        type_name: Name of the type whose construction failed.
        violations: Every violation found, in validation-chain order.
    """

    def __init__(self, type_name: str, violations: Iterable[Violation]) -> None:
        self.type_name = type_name
        self.violations: tuple[Violation, ...] = tuple(violations)
        summary = "; ".join(str(violation) for violation in self.violations)
        super().__init__(
            f"Invalid {type_name}: {summary}",
            status=422,
            type="about:blank#model-validation",
            extra={
                "type_name": type_name,
                "violations": [violation.as_dict() for violation in self.violations],
            },
        )

    @property
    def fields(self) -> list[str | None]:
        return [violation.field for violation in self.violations]

    def of_type(self, violation_type: type[Violation]) -> list[Violation]:
        return [violation for violation in self.violations if isinstance(violation, violation_type)]


__all__ = [
    "BindingViolation",
    "ChoiceViolation",
    "CrossFieldInvariantViolation",
    "EmptyLeafViolation",
    "MissingRequiredViolation",
    "ModelValidationError",
    "NullElementViolation",
    "PrimitiveValueViolation",
    "ProhibitedElementViolation",
    "ReferenceTargetViolation",
    "Violation",
    "WrongElementTypeViolation",
]

"""Core complex datatypes shared by generated resources."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from .base import Element, composite
from .declarations import Binding, BindingStrength, Constraint, choice, element
from .primitives import (
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
    String,
    UnsignedInt,
    Uri,
    Url,
)

# ==============================================================================
# EXTENSION
# ==============================================================================


def _value_or_extensions(extension: Extension) -> bool:
    return (extension.value is None) != (not extension.extension)


@composite
class Extension(Element):
    """Additional content identified by ``url``."""

    url: str | None = element(str, required=True, lexical="uri")
    value: Any = choice(
        String,
        Boolean,
        Integer,
        Decimal,
        Date,
        DateTime,
        Code,
        Id,
        Uri,
        Url,
        Canonical,
        Markdown,
        PositiveInt,
        UnsignedInt,
        Base64Binary,
        "Coding",
        "CodeableConcept",
        "Quantity",
        "Period",
        "Identifier",
        "Reference",
        "Annotation",
    )

    constraints = (
        Constraint(
            key="ext-1",
            description="Must have either extensions or value[x], not both",
            predicate=_value_or_extensions,
        ),
    )


# ==============================================================================
# TERMINOLOGY
# ==============================================================================


@composite
class Coding(Element):
    system: Uri | None = element(Uri)
    version: String | None = element(String)
    code: Code | None = element(Code)
    display: String | None = element(String)
    user_selected: Boolean | None = element(Boolean)


@composite
class CodeableConcept(Element):
    """Concept expressed by codings and/or text."""

    coding: tuple[Coding, ...] = element(Coding, repeating=True)
    text: String | None = element(String)


# ==============================================================================
# MEASUREMENTS AND TIME
# ==============================================================================

QUANTITY_COMPARATOR = Binding(
    strength=BindingStrength.REQUIRED,
    value_set="http://hl7.org/fhir/ValueSet/quantity-comparator",
    codes=("<", "<=", ">=", ">"),
)


def _code_requires_system(quantity: Quantity) -> bool:
    return quantity.code is None or quantity.system is not None


@composite
class Quantity(Element):
    value: Decimal | None = element(Decimal)
    comparator: Code | None = element(Code, binding=QUANTITY_COMPARATOR)
    unit: String | None = element(String)
    system: Uri | None = element(Uri)
    code: Code | None = element(Code)

    constraints = (
        Constraint(
            key="qty-3",
            description="If a code for the unit is present, the system SHALL also be present",
            predicate=_code_requires_system,
        ),
    )


def _instant(raw: Any) -> datetime | None:
    if isinstance(raw, datetime):
        return raw if raw.tzinfo is not None else None
    if isinstance(raw, str) and len(raw) > 10:
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            return None
    return None


def _date_text(raw: Any) -> str | None:
    if isinstance(raw, date):
        return raw.isoformat()[:10]
    if isinstance(raw, str):
        return raw[:10]
    return None


def _start_not_after_end(period: Period) -> bool:
    if period.start is None or period.end is None:
        return True
    start, end = period.start.value, period.end.value
    start_instant, end_instant = _instant(start), _instant(end)
    if start_instant is not None and end_instant is not None:
        return start_instant <= end_instant
    start_text, end_text = _date_text(start), _date_text(end)
    if start_text is None or end_text is None:
        return True
    # partial dates compare on their common precision
    precision = min(len(start_text), len(end_text))
    return start_text[:precision] <= end_text[:precision]


@composite
class Period(Element):
    start: DateTime | None = element(DateTime)
    end: DateTime | None = element(DateTime)

    constraints = (
        Constraint(
            key="per-1",
            description="If present, start SHALL have a lower value than end",
            predicate=_start_not_after_end,
        ),
    )


# ==============================================================================
# IDENTIFICATION AND REFERENCES
# ==============================================================================

IDENTIFIER_USE = Binding(
    strength=BindingStrength.REQUIRED,
    value_set="http://hl7.org/fhir/ValueSet/identifier-use",
    codes=("usual", "official", "temp", "secondary", "old"),
)


@composite
class Identifier(Element):
    use: Code | None = element(Code, binding=IDENTIFIER_USE)
    type: CodeableConcept | None = element(CodeableConcept)
    system: Uri | None = element(Uri)
    value: String | None = element(String)
    period: Period | None = element(Period)
    assigner: Any = element("Reference", targets=("Organization",))


@composite
class Reference(Element):
    """Pointer to another resource, literal (``Patient/123``) or logical."""

    reference: String | None = element(String)
    type: Uri | None = element(Uri)
    identifier: Identifier | None = element(Identifier)
    display: String | None = element(String)


@composite
class Annotation(Element):
    author: Any = choice(
        Reference, String, targets=("Practitioner", "Patient", "RelatedPerson", "Organization")
    )
    time: DateTime | None = element(DateTime)
    text: Markdown | None = element(Markdown, required=True)


__all__ = [
    "IDENTIFIER_USE",
    "QUANTITY_COMPARATOR",
    "Annotation",
    "CodeableConcept",
    "Coding",
    "Extension",
    "Identifier",
    "Period",
    "Quantity",
    "Reference",
]

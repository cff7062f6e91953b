"""Stateless validation checks shared by every model class.

Key Responsibilities:
    - Required-field, list-integrity and element-type checks
    - Choice-slot membership checks (is-instance-of-any semantics)
    - Reference target-kind whitelisting
    - Required terminology bindings and the data-absent-reason exemption
    - Lexical rules for primitive values (string, code, id, uri, base64, dates)

Collaborators:
    - Upstream: :mod:`Medical_FHIR_model.validation.engine` calls these checks
      in a fixed order for every node being built
    - Downstream: Returns :mod:`Medical_FHIR_model.validation.violations`
      instances; primitive checks raise ``ValueError``

Side Effects:
    - None; every function is pure over its explicit inputs

Thread Safety:
    - Thread-safe
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from typing import Any

from .references import parse_reference
from .violations import (
    BindingViolation,
    ChoiceViolation,
    EmptyLeafViolation,
    MissingRequiredViolation,
    NullElementViolation,
    ProhibitedElementViolation,
    ReferenceTargetViolation,
    Violation,
    WrongElementTypeViolation,
)

# ==============================================================================
# CONSTANTS
# ==============================================================================

DATA_ABSENT_REASON_EXTENSION_URL = "http://hl7.org/fhir/StructureDefinition/data-absent-reason"
ANY_RESOURCE_KIND = "Resource"

MIN_STRING_LENGTH = 1
MAX_STRING_LENGTH = 1024 * 1024
MAX_ID_LENGTH = 64
MIN_INTEGER = -(2**31)
MAX_INTEGER = 2**31 - 1

_ALLOWED_WHITESPACE = frozenset(" \t\r\n")
_ID_PATTERN = re.compile(r"^[A-Za-z0-9\-.]+$")
_BASE64_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_BASE64_INDEX = {char: index for index, char in enumerate(_BASE64_CHARS)}
_DECIMAL_PATTERN = re.compile(r"-?(0|[1-9][0-9]*)(\.[0-9]+)?([eE][+-]?[0-9]+)?")
_DATE_PATTERN = re.compile(
    r"([0-9]([0-9]([0-9][1-9]|[1-9]0)|[1-9]00)|[1-9]000)"
    r"(-(0[1-9]|1[0-2])(-(0[1-9]|[1-2][0-9]|3[0-1]))?)?"
)
_DATE_TIME_PATTERN = re.compile(
    r"([0-9]([0-9]([0-9][1-9]|[1-9]0)|[1-9]00)|[1-9]000)"
    r"(-(0[1-9]|1[0-2])(-(0[1-9]|[1-2][0-9]|3[0-1])"
    r"(T([01][0-9]|2[0-3]):[0-5][0-9]:([0-5][0-9]|60)(\.[0-9]{1,9})?"
    r"(Z|(\+|-)((0[0-9]|1[0-3]):[0-5][0-9]|14:00)))?)?)?"
)

# ==============================================================================
# TYPE HELPERS
# ==============================================================================


def type_name(value: Any) -> str:
    return type(value).__name__


def type_names(types: Sequence[type]) -> tuple[str, ...]:
    return tuple(getattr(kind, "__name__", str(kind)) for kind in types)


def is_instance_of_any(value: Any, types: Sequence[type]) -> bool:
    """``isinstance`` over ``types`` where ``bool`` never passes as ``int``."""
    if isinstance(value, bool) and bool not in types and object not in types:
        return False
    return isinstance(value, tuple(types))


# ==============================================================================
# STRUCTURAL CHECKS
# ==============================================================================


def validate_required(value: Any, field: str) -> Violation | None:
    """Fail when a required single-valued field is absent."""
    if value is None:
        return MissingRequiredViolation(field=field)
    return None


def validate_prohibited(value: Any, field: str) -> Violation | None:
    if value is None or (isinstance(value, tuple) and not value):
        return None
    return ProhibitedElementViolation(field=field)


def validate_type(value: Any, field: str, types: Sequence[type]) -> Violation | None:
    """Fail when a populated single-valued field holds an unexpected type."""
    if value is None or is_instance_of_any(value, types):
        return None
    return WrongElementTypeViolation(
        field=field, expected_types=type_names(types), actual_type=type_name(value)
    )


def validate_list(
    items: Sequence[Any],
    field: str,
    element_types: Sequence[type],
    *,
    required: bool = False,
) -> list[Violation]:
    """Check list integrity: non-empty when required, no nulls, homogeneous type.

    Every offending index is reported, in index order.
    """
    if required and not items:
        return [MissingRequiredViolation(field=field)]
    violations: list[Violation] = []
    for index, item in enumerate(items):
        if item is None:
            violations.append(NullElementViolation(field=field, index=index))
        elif not is_instance_of_any(item, element_types):
            violations.append(
                WrongElementTypeViolation(
                    field=field,
                    index=index,
                    expected_types=type_names(element_types),
                    actual_type=type_name(item),
                )
            )
    return violations


def validate_choice(
    value: Any, allowed_types: Sequence[type], required: bool, field: str
) -> Violation | None:
    """Check that a choice slot holds one of its declared alternatives.

    Subclasses of an alternative are accepted.
    """
    if value is None:
        return MissingRequiredViolation(field=field) if required else None
    if is_instance_of_any(value, allowed_types):
        return None
    return ChoiceViolation(
        field=field, allowed_types=type_names(allowed_types), actual_type=type_name(value)
    )


def validate_has_content(node: Any) -> Violation | None:
    """Reject elements with neither a value nor any children (``ele-1``)."""
    if node.has_content():
        return None
    return EmptyLeafViolation(type_name=type_name(node))


# ==============================================================================
# REFERENCE CHECKS
# ==============================================================================


def validate_reference_targets(
    reference: Any,
    allowed_kinds: Sequence[str],
    field: str,
    index: int | None = None,
    *,
    known_kind: Callable[[str], bool] | None = None,
) -> Violation | None:
    """Check a reference's target kind against the field's allowed kinds.

    Untyped references are accepted without checking. When ``known_kind`` is
    given, a typed reference must also name a kind it recognises, even on
    fields that accept any resource.
    """
    if reference is None:
        return None
    target = parse_reference(reference)
    allowed = tuple(allowed_kinds)
    if target.conflicting:
        return ReferenceTargetViolation(
            field=field,
            index=index,
            allowed_kinds=allowed,
            actual_kind=target.literal_kind or "",
            detail=(
                f"Resource type found in reference value: '{target.literal}' for element: "
                f"'{field}' does not match Reference.type: {target.declared_kind}"
            ),
        )
    kind = target.kind
    if kind is None:
        return None
    if known_kind is not None and not known_kind(kind):
        return ReferenceTargetViolation(
            field=field,
            index=index,
            allowed_kinds=allowed,
            actual_kind=kind,
            detail=f"Resource type: {kind} for element: '{field}' is not a known resource type",
        )
    if ANY_RESOURCE_KIND in allowed or kind in allowed:
        return None
    return ReferenceTargetViolation(
        field=field, index=index, allowed_kinds=allowed, actual_kind=kind
    )


def validate_reference_list(
    references: Sequence[Any],
    allowed_kinds: Sequence[str],
    field: str,
    *,
    known_kind: Callable[[str], bool] | None = None,
) -> list[Violation]:
    """Check every reference of a list field, reporting each failing index."""
    violations: list[Violation] = []
    for index, reference in enumerate(references):
        violation = validate_reference_targets(
            reference, allowed_kinds, field, index, known_kind=known_kind
        )
        if violation is not None:
            violations.append(violation)
    return violations


# ==============================================================================
# TERMINOLOGY CHECKS
# ==============================================================================


def has_data_absent_reason(element: Any) -> bool:
    return any(
        getattr(extension, "url", None) == DATA_ABSENT_REASON_EXTENSION_URL
        for extension in getattr(element, "extension", ()) or ()
    )


def has_only_data_absent_reason(element: Any) -> bool:
    """Return True when ``element`` carries a data-absent-reason in place of a code."""
    if hasattr(element, "coding") and not hasattr(element, "code"):
        if has_data_absent_reason(element) and not element.coding:
            return True
        return any(has_only_data_absent_reason(coding) for coding in element.coding)
    if not has_data_absent_reason(element):
        return False
    if hasattr(element, "code"):
        return element.code is None and getattr(element, "system", None) is None
    return getattr(element, "value", None) is None


def coded_values(element: Any) -> list[tuple[str | None, str]]:
    """Return ``(system, code)`` pairs carried by a coded element."""
    if hasattr(element, "coding") and not hasattr(element, "code"):
        pairs: list[tuple[str | None, str]] = []
        for coding in element.coding:
            pairs.extend(coded_values(coding))
        return pairs
    if hasattr(element, "code"):
        code = getattr(element.code, "value", None)
        if code is None:
            return []
        return [(getattr(getattr(element, "system", None), "value", None), code)]
    value = getattr(element, "value", None)
    if isinstance(value, str):
        return [(None, value)]
    return []


def validate_binding(
    element: Any,
    codes: Sequence[str],
    field: str,
    *,
    value_set: str | None = None,
    system: str | None = None,
    index: int | None = None,
) -> Violation | None:
    """Check a coded element against a locally declared required binding.

    A ``CodeableConcept`` passes when any of its codings is a member; a concept
    with only text passes because there is nothing to check locally.
    """
    if element is None or has_only_data_absent_reason(element):
        return None
    pairs = coded_values(element)
    if not pairs:
        return None
    allowed = tuple(codes)
    for pair_system, code in pairs:
        if code in allowed and (system is None or pair_system in (None, system)):
            return None
    return BindingViolation(
        field=field,
        index=index,
        value_set=value_set or "",
        code=pairs[0][1],
        allowed_codes=allowed,
    )


# ==============================================================================
# PRIMITIVE VALUE CHECKS
# ==============================================================================


def _check_control_characters(value: str, char: str) -> None:
    if ord(char) < 32 and char not in _ALLOWED_WHITESPACE:
        raise ValueError(
            f"String value contains unsupported control character: {ord(char):#04x}"
        )


def check_max_length(value: str, limit: int = MAX_STRING_LENGTH) -> None:
    if len(value) > limit:
        raise ValueError(
            f"String value length: {len(value)} is greater than maximum allowed length: {limit}"
        )


def check_string(value: str) -> None:
    """A sequence of Unicode characters matching ``[ \\r\\n\\t\\S]+``."""
    check_max_length(value)
    count = 0
    for char in value:
        if not char.isspace():
            _check_control_characters(value, char)
            count += 1
        elif char not in _ALLOWED_WHITESPACE:
            raise ValueError(
                f"String value: '{value}' is not valid with respect to pattern: [ \\r\\n\\t\\S]+"
            )
    if count < MIN_STRING_LENGTH:
        raise ValueError(
            f"Trimmed String value length: {count} is less than minimum required length: "
            f"{MIN_STRING_LENGTH}"
        )


def check_code(value: str) -> None:
    """Codes have no leading/trailing whitespace and only single inner spaces."""
    if not value or value[0].isspace():
        raise ValueError(f"Code value: '{value}' must begin with a non-whitespace character")
    if value[-1].isspace():
        raise ValueError(f"Code value: '{value}' must end with a non-whitespace character")
    previous_is_space = False
    for char in value:
        if char.isspace():
            if char != " ":
                raise ValueError(
                    f"Code value: '{value}' must not contain whitespace other than a single space"
                )
            if previous_is_space:
                raise ValueError(f"Code value: '{value}' must not contain consecutive spaces")
            previous_is_space = True
        else:
            _check_control_characters(value, char)
            previous_is_space = False


def check_id(value: str) -> None:
    if not value:
        raise ValueError("Id value must not be empty")
    if len(value) > MAX_ID_LENGTH:
        raise ValueError(
            f"Id value length: {len(value)} is greater than maximum allowed length: {MAX_ID_LENGTH}"
        )
    if not _ID_PATTERN.match(value):
        raise ValueError(f"Id value: '{value}' contains invalid characters")


def check_uri(value: str) -> None:
    check_max_length(value)
    for char in value:
        _check_control_characters(value, char)
        if char.isspace():
            raise ValueError(f"Uri value: '{value}' must not contain whitespace")


def check_integer(value: int, minimum: int = MIN_INTEGER) -> None:
    if value < minimum:
        raise ValueError(f"Integer value: {value} must be greater than or equal to: {minimum}")
    if value > MAX_INTEGER:
        raise ValueError(f"Integer value: {value} must be less than or equal to: {MAX_INTEGER}")


def check_base64(value: str) -> None:
    length = len(value)
    if length % 4:
        raise ValueError(f"Invalid base64 string length: {length}")
    for position, char in enumerate(value.rstrip("=")):
        if char not in _BASE64_INDEX:
            raise ValueError(f"Illegal base64 character: '{char}' found at index: {position}")
    if value.endswith("="):
        padding = 2 if value.endswith("==") else 1
        if length - padding < 0 or "=" in value[: length - padding]:
            raise ValueError("Unexpected base64 padding character: '='")
        char_index = length - padding - 1
        char = value[char_index]
        mask = 0b001111 if padding == 2 else 0b000011
        if _BASE64_INDEX[char] & mask:
            expected = _BASE64_CHARS[_BASE64_INDEX[char] & ~mask]
            raise ValueError(
                f"Invalid base64 string: non-zero padding bits; character: '{char}' "
                f"found at index: {char_index} should be: '{expected}'"
            )


def check_decimal(value: str) -> None:
    if not _DECIMAL_PATTERN.fullmatch(value):
        raise ValueError(f"Decimal value: '{value}' is not a valid FHIR decimal")


def check_date(value: str) -> None:
    if not _DATE_PATTERN.fullmatch(value):
        raise ValueError(f"Date value: '{value}' is not a valid FHIR date")


def check_date_time(value: str) -> None:
    if not _DATE_TIME_PATTERN.fullmatch(value):
        raise ValueError(f"DateTime value: '{value}' is not a valid FHIR dateTime")


LEXICAL_CHECKS = {
    "string": check_string,
    "code": check_code,
    "id": check_id,
    "uri": check_uri,
}


__all__ = [
    "ANY_RESOURCE_KIND",
    "DATA_ABSENT_REASON_EXTENSION_URL",
    "LEXICAL_CHECKS",
    "check_base64",
    "check_code",
    "check_date",
    "check_decimal",
    "check_date_time",
    "check_id",
    "check_integer",
    "check_max_length",
    "check_string",
    "check_uri",
    "coded_values",
    "has_data_absent_reason",
    "has_only_data_absent_reason",
    "is_instance_of_any",
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

"""Primitive datatypes: a Python value plus ``id`` and ``extension``.

Raw Python values handed to a builder are coerced into these classes with
:meth:`PrimitiveType.of`. Each class declares which Python types it accepts and
the lexical rule its value must satisfy.
"""

from __future__ import annotations

import decimal
from datetime import date, datetime
from typing import Any, ClassVar

from Medical_FHIR_model.validation.support import (
    check_base64,
    check_code,
    check_date,
    check_date_time,
    check_decimal,
    check_id,
    check_integer,
    check_string,
    check_uri,
    is_instance_of_any,
)
from Medical_FHIR_model.validation.violations import PrimitiveValueViolation, Violation

from .base import Element, composite
from .declarations import element


@composite(abstract=True)
class PrimitiveType(Element):
    """Base for primitive datatypes."""

    value: Any = element(object)

    fhir_type: ClassVar[str] = ""
    python_types: ClassVar[tuple[type, ...]] = (str,)
    accepted_types: ClassVar[tuple[type, ...]] = ()

    @classmethod
    def accepts(cls, raw: Any) -> bool:
        """Return whether ``raw`` can be coerced into this primitive."""
        return is_instance_of_any(raw, cls.accepted_types or cls.python_types)

    @classmethod
    def normalize(cls, raw: Any) -> Any:
        return raw

    @classmethod
    def check_value(cls, value: Any) -> None:
        """Raise ``ValueError`` if ``value`` breaks the lexical rule."""

    @classmethod
    def of(cls, value: Any) -> PrimitiveType:
        return cls(value=cls.normalize(value) if cls.accepts(value) else value)

    def has_value(self) -> bool:
        return self.value is not None

    def value_violations(self) -> list[Violation]:
        if self.value is None or not is_instance_of_any(self.value, self.python_types):
            return []
        try:
            self.check_value(self.value)
        except ValueError as exc:
            return [PrimitiveValueViolation(field="value", detail=str(exc))]
        return []

    def __str__(self) -> str:
        return "" if self.value is None else str(self.value)


# ==============================================================================
# STRING-BASED PRIMITIVES
# ==============================================================================


@composite(aliases=("string",))
class String(PrimitiveType):
    fhir_type = "string"

    @classmethod
    def check_value(cls, value: str) -> None:
        check_string(value)


@composite(aliases=("markdown",))
class Markdown(String):
    fhir_type = "markdown"


@composite(aliases=("code",))
class Code(String):
    fhir_type = "code"

    @classmethod
    def check_value(cls, value: str) -> None:
        check_code(value)


@composite(aliases=("id",))
class Id(String):
    fhir_type = "id"

    @classmethod
    def check_value(cls, value: str) -> None:
        check_id(value)


@composite(aliases=("uri",))
class Uri(PrimitiveType):
    fhir_type = "uri"

    @classmethod
    def check_value(cls, value: str) -> None:
        check_uri(value)


@composite(aliases=("url",))
class Url(Uri):
    fhir_type = "url"


@composite(aliases=("canonical",))
class Canonical(Uri):
    fhir_type = "canonical"


@composite(aliases=("base64Binary",))
class Base64Binary(PrimitiveType):
    fhir_type = "base64Binary"

    @classmethod
    def check_value(cls, value: str) -> None:
        check_base64(value)


# ==============================================================================
# NUMERIC AND BOOLEAN PRIMITIVES
# ==============================================================================


@composite(aliases=("boolean",))
class Boolean(PrimitiveType):
    fhir_type = "boolean"
    python_types = (bool,)


@composite(aliases=("integer",))
class Integer(PrimitiveType):
    """32-bit signed integer."""

    fhir_type = "integer"
    python_types = (int,)
    minimum: ClassVar[int] = -(2**31)

    @classmethod
    def check_value(cls, value: int) -> None:
        check_integer(value, cls.minimum)


@composite(aliases=("positiveInt",))
class PositiveInt(Integer):
    fhir_type = "positiveInt"
    minimum = 1


@composite(aliases=("unsignedInt",))
class UnsignedInt(Integer):
    fhir_type = "unsignedInt"
    minimum = 0


@composite(aliases=("decimal",))
class Decimal(PrimitiveType):
    """Arbitrary precision decimal.

    Floats are converted through their repr and strings must follow the FHIR
    decimal grammar. A string that does not stays a string and is reported as a
    primitive value violation.
    """

    fhir_type = "decimal"
    python_types = (decimal.Decimal, str)
    accepted_types = (decimal.Decimal, int, float, str)

    @classmethod
    def normalize(cls, raw: Any) -> decimal.Decimal | str:
        if isinstance(raw, float):
            return decimal.Decimal(repr(raw))
        if isinstance(raw, str):
            try:
                check_decimal(raw)
            except ValueError:
                return raw
        return decimal.Decimal(raw)

    @classmethod
    def check_value(cls, value: decimal.Decimal | str) -> None:
        if isinstance(value, str):
            check_decimal(value)
        elif not value.is_finite():
            raise ValueError(f"Decimal value: {value} must be finite")


# ==============================================================================
# TEMPORAL PRIMITIVES
# ==============================================================================


@composite(aliases=("date",))
class Date(PrimitiveType):
    """Partial date (``2024``, ``2024-05``, ``2024-05-17``) or :class:`datetime.date`."""

    fhir_type = "date"
    python_types = (str, date)

    @classmethod
    def accepts(cls, raw: Any) -> bool:
        return isinstance(raw, (str, date)) and not isinstance(raw, datetime)

    @classmethod
    def check_value(cls, value: str | date) -> None:
        if isinstance(value, datetime):
            raise ValueError(f"Date value: {value.isoformat()} must not carry a time")
        if isinstance(value, str):
            check_date(value)


@composite(aliases=("dateTime",))
class DateTime(PrimitiveType):
    """Partial dateTime string, :class:`datetime.date` or aware :class:`datetime.datetime`."""

    fhir_type = "dateTime"
    python_types = (str, date)

    @classmethod
    def check_value(cls, value: str | date) -> None:
        if isinstance(value, datetime):
            if value.tzinfo is None:
                raise ValueError(
                    f"DateTime value: {value.isoformat()} with a time must have a time zone"
                )
        elif isinstance(value, str):
            check_date_time(value)


PRIMITIVE_TYPES: tuple[type[PrimitiveType], ...] = (
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
)


__all__ = [
    "PRIMITIVE_TYPES",
    "Base64Binary",
    "Boolean",
    "Canonical",
    "Code",
    "Date",
    "DateTime",
    "Decimal",
    "Id",
    "Integer",
    "Markdown",
    "PositiveInt",
    "PrimitiveType",
    "String",
    "UnsignedInt",
    "Uri",
    "Url",
]

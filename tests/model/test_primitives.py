from datetime import UTC, date, datetime
from decimal import Decimal as PyDecimal

import pytest

from Medical_FHIR_model.model import Extension
from Medical_FHIR_model.model.primitives import (
    Base64Binary,
    Boolean,
    Code,
    Date,
    DateTime,
    Decimal,
    Id,
    Integer,
    PositiveInt,
    String,
    Uri,
)
from Medical_FHIR_model.validation import (
    EmptyLeafViolation,
    ModelValidationError,
    PrimitiveValueViolation,
    WrongElementTypeViolation,
)
from tests.sample_types import Status


def _rules(exc: pytest.ExceptionInfo) -> list[str]:
    return [violation.rule for violation in exc.value.violations]


def test_string_accepts_text_with_allowed_whitespace():
    assert String.of("line one\n\tline two").value == "line one\n\tline two"


@pytest.mark.parametrize("raw", ["   ", "bell\x07", "nbsp\u00a0only"])
def test_string_rejects_blank_and_control_characters(raw):
    with pytest.raises(ModelValidationError) as exc:
        String.of(raw)
    assert _rules(exc) == ["primitive-value"]


def test_code_rejects_surrounding_and_repeated_whitespace():
    assert Code.of("in progress").value == "in progress"
    for raw in (" active", "active ", "in  progress"):
        with pytest.raises(ModelValidationError):
            Code.of(raw)


def test_id_length_and_characters():
    assert Id.of("a-1.B").value == "a-1.B"
    with pytest.raises(ModelValidationError):
        Id.of("a" * 65)
    with pytest.raises(ModelValidationError):
        Id.of("not_valid")


def test_uri_rejects_whitespace():
    with pytest.raises(ModelValidationError):
        Uri.of("http://example.org/a b")


def test_integer_range_and_bool_exclusion():
    assert Integer.of(-(2**31)).value == -(2**31)
    with pytest.raises(ModelValidationError):
        Integer.of(2**31)
    with pytest.raises(ModelValidationError) as exc:
        Integer.of(True)
    assert isinstance(exc.value.violations[0], WrongElementTypeViolation)
    with pytest.raises(ModelValidationError):
        PositiveInt.of(0)


def test_boolean_requires_bool():
    assert Boolean.of(False).value is False
    with pytest.raises(ModelValidationError):
        Boolean.of(0)


def test_decimal_coerces_numbers_and_requires_finite_values():
    assert Decimal.of(1.5).value == PyDecimal("1.5")
    assert Decimal.of(3).value == PyDecimal(3)
    with pytest.raises(ModelValidationError):
        Decimal.of(float("nan"))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("5.10", PyDecimal("5.10")), ("-0.5", PyDecimal("-0.5")), ("1e3", PyDecimal("1e3"))],
)
def test_decimal_parses_strings(raw, expected):
    value = Decimal.of(raw).value

    assert value == expected
    assert str(value) == str(expected)


@pytest.mark.parametrize("raw", ["abc", " 5", "NaN", "1.", "01"])
def test_decimal_rejects_malformed_strings(raw):
    with pytest.raises(ModelValidationError) as exc:
        Decimal.of(raw)

    assert _rules(exc) == ["primitive-value"]
    assert f"Decimal value: '{raw}'" in exc.value.violations[0].message


def test_date_partial_precision():
    assert Date.of("2024").value == "2024"
    assert Date.of(date(2024, 5, 17)).value == date(2024, 5, 17)
    with pytest.raises(ModelValidationError):
        Date.of("2024-13")
    with pytest.raises(ModelValidationError) as exc:
        Date.of(datetime(2024, 5, 17, 10, 0, tzinfo=UTC))
    assert isinstance(exc.value.violations[0], PrimitiveValueViolation)


def test_date_time_requires_zone_with_time():
    assert DateTime.of("2024-05-17T10:00:00Z").value == "2024-05-17T10:00:00Z"
    assert DateTime.of("2024-05").value == "2024-05"
    with pytest.raises(ModelValidationError):
        DateTime.of("2024-05-17T10:00:00")
    with pytest.raises(ModelValidationError):
        DateTime.of(datetime(2024, 5, 17, 10, 0))


def test_base64_padding_bits():
    assert Base64Binary.of("QQ==").value == "QQ=="
    for raw in ("QR==", "abc", "Q$==", "Q=Q="):
        with pytest.raises(ModelValidationError):
            Base64Binary.of(raw)


def test_enum_members_are_unwrapped():
    assert Code.of(Status.A) == Code.of("A")
    assert type(Code.of(Status.B).value) is str


def test_primitive_without_value_or_extension_is_empty():
    with pytest.raises(ModelValidationError) as exc:
        String()
    assert exc.value.violations == (EmptyLeafViolation(type_name="String"),)


def test_primitive_with_only_extension_is_valid():
    absent = Extension(url="http://example.org/reason", value="unknown")

    code = Code(extension=(absent,))

    assert code.value is None
    assert code.has_content()
    assert code.extension[0].value == String.of("unknown")


def test_wrong_python_type_for_value():
    with pytest.raises(ModelValidationError) as exc:
        String(value=5)
    assert exc.value.violations[0] == WrongElementTypeViolation(
        field="value", expected_types=("str",), actual_type="int"
    )


def test_lexical_checks_can_be_disabled(settings_env):
    settings_env(validation__check_primitive_values="false")

    assert String.of("   ").value == "   "

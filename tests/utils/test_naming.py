import pytest

from Medical_FHIR_model.utils.naming import (
    capitalize_first,
    to_camel_case,
    to_python_identifier,
    to_snake_case,
)


@pytest.mark.parametrize(
    ("camel", "snake"),
    [
        ("modifierExtension", "modifier_extension"),
        ("doNotPerform", "do_not_perform"),
        ("status", "status"),
        ("CodeableConcept", "codeable_concept"),
        ("Base64Binary", "base64_binary"),
    ],
)
def test_to_snake_case(camel, snake):
    assert to_snake_case(camel) == snake


def test_to_camel_case_drops_keyword_suffix():
    assert to_camel_case("modifier_extension") == "modifierExtension"
    assert to_camel_case("class_") == "class"


def test_to_python_identifier_escapes_keywords():
    assert to_python_identifier("class") == "class_"
    assert to_python_identifier("for") == "for_"
    assert to_python_identifier("outcomeReference") == "outcome_reference"


def test_capitalize_first():
    assert capitalize_first("dateTime") == "DateTime"
    assert capitalize_first("") == ""

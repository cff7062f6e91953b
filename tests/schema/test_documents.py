import pytest

from Medical_FHIR_model.schema import (
    DefinitionDocument,
    DefinitionDocumentError,
    DefinitionDocumentValidator,
)


def _document(*types):
    return {"types": list(types)}


def _type(**overrides):
    payload = {
        "name": "Ratio",
        "kind": "datatype",
        "elements": [
            {"name": "numerator", "types": ["Quantity"]},
            {"name": "denominator", "types": ["Quantity"]},
        ],
    }
    payload.update(overrides)
    return payload


def test_valid_document_parses_into_models():
    document = DefinitionDocumentValidator().parse(
        _document(
            _type(
                constraints=[
                    {
                        "key": "rat-1",
                        "human": "Numerator and denominator together",
                        "kind": "requires",
                        "fields": ["numerator", "denominator"],
                    }
                ]
            )
        )
    )

    assert isinstance(document, DefinitionDocument)
    ratio = document.types[0]
    assert [element.name for element in ratio.elements] == ["numerator", "denominator"]
    assert ratio.elements[0].required is False
    assert ratio.elements[0].repeating is False
    assert ratio.constraints[0].kind == "requires"


def test_missing_kind_reports_type_path():
    with pytest.raises(DefinitionDocumentError) as exc:
        DefinitionDocumentValidator().validate(_document({"name": "Ratio"}))

    assert exc.value.errors == ["types.0: 'kind' is a required property"]


def test_invalid_max_reports_element_path():
    element = {"name": "numerator", "types": ["Quantity"], "max": -1}

    with pytest.raises(DefinitionDocumentError) as exc:
        DefinitionDocumentValidator().validate(_document(_type(elements=[element])))

    assert exc.value.errors[0].startswith("types.0.elements.0.max: ")


def test_element_cannot_declare_types_and_nested_elements():
    element = {
        "name": "component",
        "types": ["Quantity"],
        "elements": [{"name": "value", "types": ["Quantity"]}],
    }

    with pytest.raises(DefinitionDocumentError) as exc:
        DefinitionDocumentValidator().validate(_document(_type(elements=[element])))

    assert exc.value.errors[0].startswith("types.0.elements.0: ")


def test_unknown_properties_are_rejected():
    with pytest.raises(DefinitionDocumentError):
        DefinitionDocumentValidator().validate(_document(_type(parent="Element")))


def test_duplicate_type_names_are_rejected():
    with pytest.raises(DefinitionDocumentError, match="Duplicate type names"):
        DefinitionDocumentValidator().parse(_document(_type(), _type()))


def test_constraint_fields_must_name_elements():
    constraint = {"key": "rat-2", "human": "x", "kind": "exclusive", "fields": ["numerator", "z"]}

    with pytest.raises(DefinitionDocumentError) as exc:
        DefinitionDocumentValidator().parse(_document(_type(constraints=[constraint])))

    assert exc.value.errors[0].startswith("types.0: ")
    assert "['z']" in exc.value.errors[0]


def test_requires_constraint_needs_two_fields():
    constraint = {"key": "rat-3", "human": "x", "kind": "requires", "fields": ["numerator"]}

    with pytest.raises(DefinitionDocumentError, match="exactly 2 fields"):
        DefinitionDocumentValidator().parse(_document(_type(constraints=[constraint])))


def test_choice_elements_cannot_repeat():
    element = {"name": "value[x]", "types": ["Quantity", "string"], "max": "*"}

    with pytest.raises(DefinitionDocumentError, match="cannot repeat"):
        DefinitionDocumentValidator().parse(_document(_type(elements=[element])))

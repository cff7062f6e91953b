from datetime import date
from decimal import Decimal

from Medical_FHIR_model.model import Code, Extension, Period, String
from Medical_FHIR_model.visitor import to_dict
from tests.sample_types import Measurement, Status, Team, quantity


def test_resource_with_choice_and_primitives():
    measurement = (
        Measurement.builder()
        .id("m1")
        .status(Status.A)
        .value(quantity(Decimal("5.10"), "mg"))
        .notes(["ok"])
        .build()
    )

    assert to_dict(measurement) == {
        "resourceType": "Measurement",
        "id": "m1",
        "status": "A",
        "valueQuantity": {"value": Decimal("5.10"), "unit": "mg"},
        "notes": ["ok"],
    }


def test_primitive_extras_use_underscore_key():
    absent = Extension(url="http://example.org/reason", value="masked")
    measurement = (
        Measurement.builder()
        .status(Code(value="A", id="s1"))
        .value(quantity())
        .notes([String.of("plain"), String(extension=(absent,))])
        .build()
    )

    payload = to_dict(measurement)

    assert payload["status"] == "A"
    assert payload["_status"] == {"id": "s1"}
    assert payload["notes"] == ["plain", None]
    assert payload["_notes"] == [
        None,
        {"extension": [{"url": "http://example.org/reason", "valueString": "masked"}]},
    ]


def test_choice_tags_use_fhir_type_names():
    assert to_dict(Extension(url="http://example.org/a", value="text")) == {
        "url": "http://example.org/a",
        "valueString": "text",
    }
    assert to_dict(Extension(url="http://example.org/b", value=date(2024, 1, 2))) == {
        "url": "http://example.org/b",
        "valueDate": "2024-01-02",
    }
    assert to_dict(Extension(url="http://example.org/c", value=Code.of("x"))) == {
        "url": "http://example.org/c",
        "valueCode": "x",
    }


def test_contained_resources_keep_resource_type():
    inner = Team.builder().name("inner").build()

    payload = to_dict(Team.builder().name("outer").add_contained(inner).build())

    assert payload["contained"] == [{"resourceType": "Team", "name": "inner"}]


def test_datatype_and_primitive_roots():
    assert to_dict(Period(start="2024-01", end="2024-02")) == {
        "start": "2024-01",
        "end": "2024-02",
    }
    assert to_dict(String.of("x")) == {"value": "x"}

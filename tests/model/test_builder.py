import dataclasses
from decimal import Decimal
from typing import Any

import pytest

from Medical_FHIR_model.model import CodeableConcept, Element, String, element
from Medical_FHIR_model.model.base import finalize_class
from Medical_FHIR_model.model.primitives import Code
from Medical_FHIR_model.validation import (
    BindingViolation,
    ChoiceViolation,
    MissingRequiredViolation,
    ModelValidationError,
    NullElementViolation,
)
from tests.sample_types import Measurement, Status, quantity


def _measurement_builder():
    return Measurement.builder().status(Status.A).value(quantity(5, "mg")).notes(["ok"])


def test_build_with_valid_state():
    measurement = _measurement_builder().build()

    assert measurement.status == Code.of("A")
    assert measurement.value.value.value == Decimal(5)
    assert measurement.value.unit.value == "mg"
    assert measurement.notes == (String.of("ok"),)


def test_missing_required_scalar_names_field():
    with pytest.raises(ModelValidationError) as exc:
        Measurement.builder().value(quantity()).build()

    assert exc.value.violations == (MissingRequiredViolation(field="status"),)
    assert exc.value.problem.status == 422
    assert "status" in str(exc.value)


def test_null_list_element_reports_index():
    with pytest.raises(ModelValidationError) as exc:
        _measurement_builder().notes([]).add_notes("fine", None).build()

    assert exc.value.violations == (NullElementViolation(field="notes", index=1),)


def test_unsupported_choice_type_reports_offending_type():
    with pytest.raises(ModelValidationError) as exc:
        _measurement_builder().value(String.of("5 mg")).build()

    violation = exc.value.violations[0]
    assert isinstance(violation, ChoiceViolation)
    assert violation.field == "value"
    assert violation.actual_type == "String"
    assert violation.allowed_types == ("Quantity", "CodeableConcept")


def test_choice_setter_last_write_wins():
    concept = CodeableConcept.builder().text("five milligrams").build()

    measurement = _measurement_builder().value(quantity()).value(concept).build()

    assert measurement.value is concept


def test_required_binding_rejects_unknown_code():
    with pytest.raises(ModelValidationError) as exc:
        _measurement_builder().status("C").build()

    violation = exc.value.of_type(BindingViolation)[0]
    assert violation.field == "status"
    assert violation.code == "C"
    assert violation.allowed_codes == ("A", "B")


def test_collects_all_violations_in_chain_order():
    with pytest.raises(ModelValidationError) as exc:
        Measurement.builder().add_notes(None).build()

    assert [(v.rule, v.field, v.index) for v in exc.value.violations] == [
        ("null-element", "notes", 0),
        ("required", "status", None),
        ("required", "value", None),
    ]


def test_replace_setter_rejects_none_and_null_elements():
    builder = Measurement.builder()

    with pytest.raises(TypeError):
        builder.notes(None)
    with pytest.raises(TypeError):
        builder.notes("ok")
    with pytest.raises(ModelValidationError) as exc:
        builder.notes(["ok", None])
    assert exc.value.violations == (NullElementViolation(field="notes", index=1),)


def test_round_trip_identity():
    original = _measurement_builder().build()

    copy = original.to_builder().build()

    assert copy == original
    assert hash(copy) == hash(original)
    assert copy is not original


def test_to_builder_leaves_original_untouched():
    original = _measurement_builder().build()

    changed = original.to_builder().status(Status.B).add_notes("again").build()

    assert original.status.value == "A"
    assert original.notes == (String.of("ok"),)
    assert changed.status.value == "B"
    assert len(changed.notes) == 2
    assert changed.value is original.value


def test_instances_are_frozen():
    measurement = _measurement_builder().build()

    with pytest.raises(dataclasses.FrozenInstanceError):
        measurement.status = Code.of("B")


def test_equality_includes_id_and_extensions():
    first = _measurement_builder().build()
    second = _measurement_builder().id("m1").build()

    assert first != second
    assert second == _measurement_builder().id("m1").build()
    assert String.of("ok") != String(value="ok", id="x")


def test_direct_construction_is_validated():
    with pytest.raises(ModelValidationError):
        Measurement(value=quantity())


def test_abstract_types_cannot_be_built():
    with pytest.raises(TypeError):
        Element.builder().build()


def test_from_instance_rejects_other_types():
    with pytest.raises(TypeError):
        Measurement.Builder.from_instance(quantity())


def test_fail_fast_reports_first_violation(settings_env):
    settings_env(validation__collect_all="false")

    with pytest.raises(ModelValidationError) as exc:
        Measurement.builder().build()

    assert exc.value.violations == (MissingRequiredViolation(field="status"),)


@pytest.mark.parametrize("name", ["accept", "constraints", "build"])
def test_member_names_cannot_be_declared_as_fields(registry, name):
    cls = dataclasses.make_dataclass(
        "Visitable", [(name, Any, element(String))], bases=(Element,), frozen=True, kw_only=True
    )

    with pytest.raises(TypeError, match=f"reserved field name '{name}'"):
        finalize_class(cls, registry=registry)

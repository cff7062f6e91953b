import pytest
from structlog.testing import capture_logs

from Medical_FHIR_model.config import ValidationSettings
from Medical_FHIR_model.model import Period
from Medical_FHIR_model.validation import (
    CrossFieldInvariantViolation,
    ModelValidationError,
    PrimitiveValueViolation,
    ProhibitedElementViolation,
    ReferenceTargetViolation,
)
from Medical_FHIR_model.validation.engine import validate_node
from tests.sample_types import Measurement, Status, Team, TeamMember, quantity, reference


def _measurement(**overrides):
    builder = Measurement.builder().status(Status.A).value(quantity())
    for name, value in overrides.items():
        getattr(builder, name)(value)
    return builder.build()


def test_reference_to_disallowed_kind_is_reported_alone():
    with pytest.raises(ModelValidationError) as exc:
        _measurement(owner=reference("Patient/123"))

    assert exc.value.violations == (
        ReferenceTargetViolation(
            field="owner", allowed_kinds=("Organization",), actual_kind="Patient"
        ),
    )
    assert exc.value.fields == ["owner"]


def test_reference_checks_can_be_disabled(settings_env):
    settings_env(validation__check_reference_types="false")

    measurement = _measurement(owner=reference("Patient/123"))

    assert measurement.owner.reference.value == "Patient/123"


def test_untyped_reference_is_accepted():
    assert _measurement(owner=reference("http://example.org/Patient/1")).owner is not None


def test_reference_list_reports_each_index():
    with pytest.raises(ModelValidationError) as exc:
        (
            Team.builder()
            .name("Ward 3")
            .participants(
                [
                    reference("Practitioner/1"),
                    reference("Patient/2"),
                    reference("Organization/3"),
                    reference("Device/4"),
                ]
            )
            .build()
        )

    assert [(v.field, v.index) for v in exc.value.violations] == [
        ("participants", 1),
        ("participants", 3),
    ]


def test_any_resource_target_and_backbone_members():
    member = TeamMember.builder().member(reference("Practitioner/1")).build()

    team = Team.builder().name("Ward 3").add_members(member).lead(reference("Device/9")).build()

    assert team.members == (member,)
    with pytest.raises(ModelValidationError):
        TeamMember.builder().member(reference("Patient/1")).build()


def test_cross_field_invariant():
    with pytest.raises(ModelValidationError) as exc:
        Team.builder().name("Ward 3").lead(reference("Practitioner/1")).build()

    assert exc.value.violations == (
        CrossFieldInvariantViolation(
            key="team-1", description="A lead requires at least one member"
        ),
    )


def test_warning_invariant_is_logged_not_raised():
    with capture_logs() as logs:
        team = Team.builder().add_participants(reference("Organization/1")).build()

    assert team.name is None
    warnings = [entry for entry in logs if entry["event"] == "model.constraint.warning"]
    assert warnings == [
        {
            "event": "model.constraint.warning",
            "log_level": "warning",
            "type_name": "Team",
            "key": "team-2",
            "description": "A team should have a name",
        }
    ]


def test_prohibited_element():
    with pytest.raises(ModelValidationError) as exc:
        Team.builder().name("Ward 3").retired("yes").build()

    assert exc.value.violations == (ProhibitedElementViolation(field="retired"),)


def test_resources_are_exempt_from_content_rule():
    team = Team.builder().build()

    assert not team.has_content()


def test_coercion_failure_reports_list_index():
    with pytest.raises(ModelValidationError) as exc:
        _measurement(notes=["fine", "bad\x01"])

    violations = exc.value.violations
    assert len(violations) == 1
    assert isinstance(violations[0], PrimitiveValueViolation)
    assert (violations[0].field, violations[0].index) == ("notes", 1)


def test_contained_resources_must_not_nest():
    inner = Team.builder().name("inner").build()
    outer = Team.builder().name("outer").add_contained(inner).build()

    with pytest.raises(ModelValidationError) as exc:
        Team.builder().name("top").add_contained(outer).build()

    assert [v.key for v in exc.value.violations] == ["dom-2"]


def test_mistyped_fields_skip_invariants():
    with pytest.raises(ModelValidationError) as exc:
        Period(start=5, end="2024")

    assert [v.rule for v in exc.value.violations] == ["element-type"]


def test_validate_node_with_stricter_settings(settings_env):
    settings_env(validation__check_reference_types="false")
    measurement = _measurement(owner=reference("Patient/1"))

    violations = validate_node(measurement, ValidationSettings())

    assert [v.rule for v in violations] == ["reference-type"]
    assert validate_node(_measurement()) == []


def test_advisory_bindings_skipped_when_enforcement_disabled(settings_env):
    settings_env(validation__enforce_required_bindings="false")

    assert _measurement(status="C").status.value == "C"


def test_resource_kind_check_is_opt_in(settings_env):
    member = TeamMember.builder().member(reference("Practitioner/1")).build()

    assert Team.builder().add_members(member).lead(reference("Foo/1")).build()

    settings_env(validation__check_resource_kinds="true")
    team = Team.builder().add_members(member).lead(reference("Measurement/1")).build()
    assert team.lead.reference.value == "Measurement/1"
    with pytest.raises(ModelValidationError) as exc:
        Team.builder().add_members(member).lead(reference("Foo/1")).build()

    violation = exc.value.violations[0]
    assert isinstance(violation, ReferenceTargetViolation)
    assert (violation.field, violation.actual_kind) == ("lead", "Foo")
    assert "is not a known resource type" in violation.message

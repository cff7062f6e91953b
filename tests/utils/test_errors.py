import pytest

from Medical_FHIR_model.model import TypeRegistry
from Medical_FHIR_model.utils.errors import FoundationError, ProblemDetail, UnknownTypeError
from Medical_FHIR_model.validation import MissingRequiredViolation, ModelValidationError


def test_problem_detail_model_dump_drops_empty_fields():
    problem = ProblemDetail(title="Error", status=400, detail="Bad")
    payload = problem.model_dump()
    assert payload == {"title": "Error", "status": 400, "detail": "Bad", "type": "about:blank"}


def test_foundation_error_wraps_problem():
    error = FoundationError("Oops", status=404)
    assert error.problem.status == 404


def test_unknown_type_error_is_a_key_error():
    with pytest.raises(KeyError) as exc:
        TypeRegistry(name="empty").resolve("Gizmo")

    assert isinstance(exc.value, UnknownTypeError)
    assert str(exc.value) == "Unknown model type: 'Gizmo'"
    assert exc.value.problem.extra == {"type_name": "Gizmo"}


def test_model_validation_error_problem_payload():
    error = ModelValidationError("Measurement", [MissingRequiredViolation(field="status")])

    payload = error.problem.model_dump()

    assert payload["status"] == 422
    assert payload["extra"]["violations"] == [
        {
            "field": "status",
            "rule": "required",
            "message": "Missing required element: 'status'",
        }
    ]
    assert error.fields == ["status"]

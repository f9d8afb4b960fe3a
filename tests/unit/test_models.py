"""Unit tests for the core models.

Covers failure routing in ValidationResult, scenario success derivation,
flow aggregation and the Session record.
"""

import pytest
from pydantic import ValidationError

from booking_conformance.models import (
    CapabilityId,
    FailureSeverity,
    FlowResult,
    ScenarioResult,
    Session,
    StepSubmission,
    ValidationFailure,
    ValidationResult,
)


def failure(severity: FailureSeverity, subject: str = "booking.status") -> ValidationFailure:
    return ValidationFailure(severity=severity, subject=subject, message="mismatch", value="x")


class TestValidationFailure:
    """Tests for ValidationFailure."""

    def test_is_frozen(self):
        item = failure(FailureSeverity.CRITICAL)
        with pytest.raises(ValidationError):
            item.message = "other"  # type: ignore[misc]

    def test_is_warning(self):
        assert failure(FailureSeverity.WARNING).is_warning
        assert not failure(FailureSeverity.ERROR).is_warning

    def test_serializes_severity_as_string(self):
        data = failure(FailureSeverity.ERROR).model_dump(mode="json")
        assert data["severity"] == "ERROR"


class TestValidationResult:
    """Tests for ValidationResult aggregation."""

    def test_empty_is_valid(self):
        result = ValidationResult()
        assert result.is_valid()
        assert not result.has_errors()
        assert not result.has_warnings()

    def test_add_routes_by_severity(self):
        result = ValidationResult()
        result.add(failure(FailureSeverity.CRITICAL))
        result.add(failure(FailureSeverity.WARNING))
        result.add(failure(FailureSeverity.ERROR))

        assert [f.severity for f in result.errors] == [FailureSeverity.CRITICAL, FailureSeverity.ERROR]
        assert [f.severity for f in result.warnings] == [FailureSeverity.WARNING]

    def test_warning_only_is_not_valid(self):
        result = ValidationResult.from_failures([failure(FailureSeverity.WARNING)])
        assert not result.has_errors()
        assert not result.is_valid()

    def test_merge_appends_in_order_without_dedup(self):
        first = ValidationResult.from_failures([failure(FailureSeverity.ERROR, "a")])
        second = ValidationResult.from_failures(
            [failure(FailureSeverity.ERROR, "a"), failure(FailureSeverity.WARNING, "b")]
        )

        first.merge(second)

        assert [f.subject for f in first.errors] == ["a", "a"]
        assert [f.subject for f in first.warnings] == ["b"]


class TestScenarioResult:
    """Tests for ScenarioResult.from_failures."""

    def test_success_without_failures(self):
        result = ScenarioResult.from_failures("Booking Reservation", "desc", [])
        assert result.success
        assert result.errors == []

    def test_warnings_do_not_fail_scenario(self):
        result = ScenarioResult.from_failures("s", "", [failure(FailureSeverity.WARNING)])
        assert result.success
        assert len(result.warnings) == 1

    @pytest.mark.parametrize("severity", [FailureSeverity.CRITICAL, FailureSeverity.ERROR])
    def test_errors_fail_scenario(self, severity: FailureSeverity):
        result = ScenarioResult.from_failures("s", "", [failure(severity)])
        assert not result.success


class TestFlowResult:
    """Tests for FlowResult."""

    def test_success_requires_every_scenario(self):
        ok = ScenarioResult.from_failures("a", "", [])
        bad = ScenarioResult.from_failures("b", "", [failure(FailureSeverity.CRITICAL)])

        assert FlowResult(name="f", scenarios=[ok, ok]).success
        assert not FlowResult(name="f", scenarios=[ok, bad]).success

    def test_round_trips_through_json(self):
        flow = FlowResult(
            name="Get Booking",
            docs="https://docs",
            scenarios=[ScenarioResult.from_failures("b", "", [failure(FailureSeverity.CRITICAL)])],
        )
        assert FlowResult.model_validate(flow.model_dump(mode="json")) == flow


class TestSession:
    """Tests for the Session record."""

    def test_defaults(self):
        session = Session(id="s-1")
        assert session.capabilities is None
        assert session.current_step is None
        assert session.current_scenario is None
        assert session.version == 0
        assert session.created_at.tzinfo is not None

    def test_null_capabilities_grant_nothing(self):
        assert Session(id="s-1").granted_capabilities() == frozenset()

    def test_granted_capabilities(self):
        session = Session(id="s-1", capabilities=["octo/pricing"])
        assert session.granted_capabilities() == frozenset({CapabilityId.PRICING})

    def test_empty_id_rejected(self):
        with pytest.raises(ValidationError):
            Session(id="")

    def test_negative_version_rejected(self):
        with pytest.raises(ValidationError):
            Session(id="s-1", version=-1)


class TestStepSubmission:
    """Tests for StepSubmission parsing."""

    def test_parses_answers(self):
        submission = StepSubmission.model_validate(
            {"answers": [{"question_id": "supplier-name", "value": "Acme"}], "payload": {"a": 1}}
        )
        assert submission.answers[0].question_id == "supplier-name"
        assert submission.payload == {"a": 1}

    def test_accepts_camel_case_answers(self):
        submission = StepSubmission.model_validate(
            {"answers": [{"questionId": "supplier-name", "value": 1}]}
        )
        assert submission.answers[0].question_id == "supplier-name"
        assert submission.answers[0].value == 1

    def test_defaults_empty(self):
        submission = StepSubmission()
        assert submission.answers == []
        assert submission.payload == {}

"""Core type definitions for the conformance engine.

This module provides the data structures shared by every part of the engine:
failure severities, validation results, scenario and flow results, the
persisted session record and submitted question answers.

All models are pydantic models so a reporting layer can serialize any result
tree with ``model_dump(mode="json")``.

Examples:
    Collecting failures into a result::

        from booking_conformance.models import (
            FailureSeverity,
            ValidationFailure,
            ValidationResult,
        )

        result = ValidationResult()
        result.add(
            ValidationFailure(
                severity=FailureSeverity.CRITICAL,
                subject="booking.status",
                message='booking.status has to be equal to "ON_HOLD"',
                value="CONFIRMED",
            )
        )
        assert not result.is_valid()

    Building a scenario result::

        scenario = ScenarioResult.from_failures(
            name="Booking Reservation",
            description="Create an ON_HOLD booking",
            failures=result.errors + result.warnings,
        )
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CapabilityId(str, Enum):
    """Optional or required features a target API declares support for."""

    CONTENT = "octo/content"
    PRICING = "octo/pricing"
    PICKUPS = "octo/pickups"
    EXTRAS = "octo/extras"
    OFFERS = "octo/offers"
    QUESTIONS = "octo/questions"
    CART = "octo/cart"
    ADJUSTMENTS = "octo/adjustments"


class FailureSeverity(str, Enum):
    """Severity of a single validation failure.

    Attributes:
        CRITICAL: Hard contract violation. Fails the scenario or step.
        ERROR: Wrong answer to a step question. Fails the step.
        WARNING: Tolerated deviation. Surfaced but does not fail anything.
    """

    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"


class ValidationFailure(BaseModel):
    """One failed check.

    Attributes:
        severity: How serious the failure is.
        subject: Id of the checked thing (a field path such as
            ``booking.status`` or a question id).
        message: Human-readable description of the mismatch.
        value: The offending value as received, if any.
    """

    severity: FailureSeverity
    subject: str = Field(..., description="Field path or question id that failed")
    message: str
    value: Any = None

    model_config = {"frozen": True}

    @property
    def is_warning(self) -> bool:
        return self.severity == FailureSeverity.WARNING


class ValidationResult(BaseModel):
    """Ordered errors and warnings produced by one validation call.

    Aggregation is append-only concatenation: merging two results appends the
    other's errors and warnings after this one's, without deduplication.

    Attributes:
        errors: CRITICAL and ERROR failures in the order they were found.
        warnings: WARNING failures in the order they were found.
    """

    errors: list[ValidationFailure] = Field(default_factory=list)
    warnings: list[ValidationFailure] = Field(default_factory=list)

    @classmethod
    def from_failures(cls, failures: Iterable[ValidationFailure]) -> "ValidationResult":
        """Build a result by routing each failure to its bucket."""
        result = cls()
        result.extend(failures)
        return result

    def add(self, failure: ValidationFailure) -> None:
        """Append a failure to the errors or warnings bucket by severity."""
        if failure.is_warning:
            self.warnings.append(failure)
        else:
            self.errors.append(failure)

    def add_error(self, failure: ValidationFailure) -> None:
        self.errors.append(failure)

    def add_warning(self, failure: ValidationFailure) -> None:
        self.warnings.append(failure)

    def extend(self, failures: Iterable[ValidationFailure]) -> None:
        for failure in failures:
            self.add(failure)

    def merge(self, other: "ValidationResult") -> None:
        """Append another result's errors and warnings to this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def is_valid(self) -> bool:
        """Return True when the result carries no errors and no warnings."""
        return not self.has_errors() and not self.has_warnings()


class ScenarioResult(BaseModel):
    """Outcome of one scenario run against the target API.

    Attributes:
        name: Scenario name.
        description: What the scenario checks.
        success: False when at least one error was recorded.
        errors: CRITICAL and ERROR failures.
        warnings: WARNING failures.
    """

    name: str
    description: str = ""
    success: bool
    errors: list[ValidationFailure] = Field(default_factory=list)
    warnings: list[ValidationFailure] = Field(default_factory=list)

    @classmethod
    def from_failures(
        cls,
        name: str,
        description: str,
        failures: Iterable[ValidationFailure],
    ) -> "ScenarioResult":
        """Build a scenario result, deriving ``success`` from the errors.

        Args:
            name: Scenario name.
            description: Scenario description.
            failures: Every failure the scenario found, in order.

        Returns:
            A ScenarioResult whose success flag is True iff no failure is
            a CRITICAL or ERROR.
        """
        result = ValidationResult.from_failures(failures)
        return cls(
            name=name,
            description=description,
            success=not result.has_errors(),
            errors=result.errors,
            warnings=result.warnings,
        )


class FlowResult(BaseModel):
    """Aggregated results of every scenario of one flow, in declaration order."""

    name: str
    docs: str = ""
    scenarios: list[ScenarioResult] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(scenario.success for scenario in self.scenarios)


class Session(BaseModel):
    """Persisted progress record of a multi-step certification run.

    Attributes:
        id: Session id.
        name: Human-readable session name.
        capabilities: Capabilities granted to the session, None until chosen.
        current_scenario: Id of the scenario the session is in, if any.
        current_step: Id of the last entered step, None before the first step.
        created_at: Creation timestamp.
        updated_at: Timestamp of the last write.
        version: Incremented by the store on every write. Used to reject
            stale writes from concurrent step submissions.
    """

    id: str = Field(..., min_length=1)
    name: str = ""
    capabilities: list[CapabilityId] | None = None
    current_scenario: str | None = None
    current_step: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    version: int = Field(default=0, ge=0)

    def granted_capabilities(self) -> frozenset[CapabilityId]:
        """Return the granted capabilities; a null set grants nothing."""
        return frozenset(self.capabilities or ())


class QuestionAnswer(BaseModel):
    """An answer submitted by the certified party for one step question.

    Accepts both ``questionId`` and ``question_id``.
    """

    question_id: str
    value: Any = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StepSubmission(BaseModel):
    """Everything a client submits for one step.

    Attributes:
        answers: Answers to the step's questions.
        payload: Free-form data handed to the step's validators, for example
            the request sent to and the booking returned by the target API.
    """

    answers: list[QuestionAnswer] = Field(default_factory=list)
    payload: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StepOutcome(BaseModel):
    """What ``SessionStepProcessor.process`` returns to its caller."""

    session: Session
    result: ValidationResult
    notified: bool = False

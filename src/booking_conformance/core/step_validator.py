"""Runs every check a step declares against one submission."""

from booking_conformance.core.questions import StepQuestionAnswersValidator
from booking_conformance.core.step import Step
from booking_conformance.models import (
    FailureSeverity,
    StepSubmission,
    ValidationFailure,
    ValidationResult,
)
from booking_conformance.observability.logging import get_logger

logger = get_logger(__name__)


class StepValidator:
    """Combines a step's validators with its question checks.

    Validators run in declaration order, followed by the question checks.
    A validator that raises is contained: its fault becomes a CRITICAL
    failure and the remaining checks still run.
    """

    def __init__(self, question_validator: StepQuestionAnswersValidator | None = None) -> None:
        self.question_validator = question_validator or StepQuestionAnswersValidator()

    async def validate(self, step: Step, submission: StepSubmission) -> ValidationResult:
        result = ValidationResult()

        for validator in step.validators:
            try:
                result.merge(await validator.validate(submission))
            except Exception as e:
                logger.error(
                    "step.validator_failed",
                    step_id=step.id,
                    validator=type(validator).__name__,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                result.add_error(
                    ValidationFailure(
                        severity=FailureSeverity.CRITICAL,
                        subject=step.id,
                        message=f"{type(validator).__name__} failed: {e}",
                    )
                )

        result.merge(await self.question_validator.validate(step, submission.answers))
        return result

"""Processing of one step submission for a certification session.

The processor runs three strictly sequential phases:

    1. guard     SessionStepGuard.check, raises before any side effect
    2. persist   one store write of current_scenario/current_step
    3. validate  step validators + question checks, then push the result to
                 the live channel when it carries any error or warning

The processor takes no lock. Callers must not submit two steps for the same
session concurrently; if they do, the store's version check turns the losing
write into a StaleSessionError instead of a silent overwrite.

Examples:
    Submitting a step::

        processor = SessionStepProcessor(store, guard, StepValidator(), channel)
        outcome = await processor.process(
            session,
            registry.step("supplier"),
            {"answers": [{"question_id": "supplier-name", "value": "Acme"}]},
        )
        if not outcome.result.is_valid():
            ...
"""

from collections.abc import Mapping
from typing import Any

from booking_conformance.core.guard import SessionStepGuard
from booking_conformance.core.step import Step
from booking_conformance.core.step_validator import StepValidator
from booking_conformance.exceptions import IllegalTransitionError
from booking_conformance.models import Session, StepOutcome, StepSubmission, ValidationResult
from booking_conformance.notifications.base import ResultChannel
from booking_conformance.observability.logging import get_logger
from booking_conformance.observability.metrics import record_notification, record_step
from booking_conformance.storage.base import SessionStore

logger = get_logger(__name__)


class SessionStepProcessor:
    """Orchestrates guard, persist, validate and notify for one submission.

    Attributes:
        store: Session store written in phase 2
        guard: Transition guard checked in phase 1
        step_validator: Runs the step's checks in phase 3
        channel: Live channel receiving non-clean results
    """

    def __init__(
        self,
        store: SessionStore,
        guard: SessionStepGuard,
        step_validator: StepValidator,
        channel: ResultChannel,
    ) -> None:
        self.store = store
        self.guard = guard
        self.step_validator = step_validator
        self.channel = channel

    async def process(
        self,
        session: Session,
        step: Step,
        request_data: StepSubmission | Mapping[str, Any] | None = None,
    ) -> StepOutcome:
        """Process a step submission.

        Args:
            session: The session as last read from the store.
            step: The step being entered.
            request_data: Answers and validator payload for the step.

        Returns:
            StepOutcome with the session as stored after the write, the
            validation result and whether the result was pushed.

        Raises:
            IllegalTransitionError: If the guard rejects the step. Nothing
                is written in that case.
            StaleSessionError: If the session changed since it was read.
        """
        try:
            scenario = self.guard.check(session, step)
        except IllegalTransitionError:
            record_step(step.id, "rejected")
            raise

        submission = self._to_submission(request_data)

        updated = await self.store.update(
            session.id,
            expected_version=session.version,
            current_scenario=scenario.id,
            current_step=step.id,
        )

        result = await self.step_validator.validate(step, submission)

        notified = False
        if not result.is_valid():
            notified = await self._notify(session.id, result)

        record_step(step.id, "valid" if result.is_valid() else "invalid")
        logger.info(
            "step.processed",
            session_id=session.id,
            scenario_id=scenario.id,
            step_id=step.id,
            errors=len(result.errors),
            warnings=len(result.warnings),
        )

        return StepOutcome(session=updated, result=result, notified=notified)

    async def _notify(self, session_id: str, result: ValidationResult) -> bool:
        # At most once: a failed push is logged and the step stays processed
        try:
            await self.channel.send_validation_result(session_id, result)
        except Exception as e:
            record_notification(False)
            logger.error(
                "notification.failed",
                session_id=session_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        record_notification(True)
        return True

    @staticmethod
    def _to_submission(request_data: StepSubmission | Mapping[str, Any] | None) -> StepSubmission:
        if request_data is None:
            return StepSubmission()
        if isinstance(request_data, StepSubmission):
            return request_data
        return StepSubmission.model_validate(dict(request_data))

"""Legal transitions of the session state machine.

A session may enter a step only when:

1. the step belongs to a scenario the session's granted capabilities permit;
2. the step is the legal successor of ``session.current_step``:

    - no current step: the first step of a permitted scenario
    - current step inside its scenario: the step right after it
    - current step is the last of its scenario: the first step of any
      permitted scenario

The scenario of the current step is ``session.current_scenario`` when that
scenario declares the step, otherwise it is looked up from the step id. A
current step no registered scenario declares only admits a first step.

The guard never mutates anything. It must fully pass before the processor
writes the session.
"""

from booking_conformance.core.registry import ScenarioRegistry
from booking_conformance.core.step import SessionScenario, Step
from booking_conformance.exceptions import IllegalTransitionError
from booking_conformance.models import Session
from booking_conformance.observability.logging import get_logger

logger = get_logger(__name__)


class SessionStepGuard:
    """Rejects steps a session is not allowed to enter."""

    def __init__(self, registry: ScenarioRegistry) -> None:
        self.registry = registry

    def check(self, session: Session, step: Step) -> SessionScenario:
        """Verify that ``session`` may enter ``step``.

        Args:
            session: The session as last read from the store.
            step: The step being submitted.

        Returns:
            The scenario the session will be in after entering the step.

        Raises:
            IllegalTransitionError: If the step's scenario is not permitted
                or the step is not the legal successor of the current step.
        """
        permitted = self.registry.permitted(session.capabilities)
        owning = [scenario for scenario in permitted if scenario.has_step(step.id)]

        if not owning:
            raise self._reject(
                session,
                step,
                reason="not_permitted",
                message=(
                    f"Step {step.id} does not belong to any scenario permitted "
                    f"for session {session.id}"
                ),
            )

        if session.current_step is None:
            return self._first_step_of(owning, session, step)

        candidates = self._scenarios_of_current_step(session)
        if not candidates:
            return self._first_step_of(owning, session, step)

        for scenario in candidates:
            if scenario in owning and scenario.next_step_id(session.current_step) == step.id:
                return scenario

        if any(scenario.is_last_step(session.current_step) for scenario in candidates):
            return self._first_step_of(owning, session, step)

        raise self._reject(
            session,
            step,
            reason="out_of_order",
            message=(
                f"Step {step.id} cannot follow step {session.current_step} "
                f"of scenario {candidates[0].id}"
            ),
        )

    def _scenarios_of_current_step(self, session: Session) -> list[SessionScenario]:
        # The recorded scenario wins; otherwise every scenario declaring the step
        current = self.registry.get(session.current_scenario)
        if current is not None and current.has_step(session.current_step):
            return [current]
        return self.registry.scenarios_with_step(session.current_step)

    def _first_step_of(
        self,
        owning: list[SessionScenario],
        session: Session,
        step: Step,
    ) -> SessionScenario:
        for scenario in owning:
            if scenario.is_first_step(step.id):
                return scenario

        raise self._reject(
            session,
            step,
            reason="out_of_order",
            message=f"Step {step.id} is not the first step of a permitted scenario",
        )

    def _reject(
        self,
        session: Session,
        step: Step,
        reason: str,
        message: str,
    ) -> IllegalTransitionError:
        logger.warning(
            "step.rejected",
            session_id=session.id,
            step_id=step.id,
            current_step=session.current_step,
            reason=reason,
        )
        return IllegalTransitionError(
            message=message,
            session_id=session.id,
            step_id=step.id,
            reason=reason,
        )

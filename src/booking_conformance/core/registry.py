"""Static registration table of session scenarios.

The registry is built once at startup from an explicit list of scenarios and
answers the lookups the session state machine needs: which scenarios a set
of capabilities permits, which scenarios contain a step, and the step
definition behind a step id.
"""

from collections.abc import Iterable

from booking_conformance.core.step import SessionScenario, Step
from booking_conformance.exceptions import UnknownStepError
from booking_conformance.models import CapabilityId


class ScenarioRegistry:
    """Immutable lookup table over the session scenarios of one process."""

    def __init__(self, scenarios: Iterable[SessionScenario]) -> None:
        self._scenarios: dict[str, SessionScenario] = {}
        self._steps: dict[str, Step] = {}

        for scenario in scenarios:
            if scenario.id in self._scenarios:
                raise ValueError(f"Duplicate scenario id: {scenario.id}")
            self._scenarios[scenario.id] = scenario
            for step in scenario.steps:
                known = self._steps.get(step.id)
                if known is not None and known is not step:
                    raise ValueError(f"Step id {step.id} is bound to two different steps")
                self._steps[step.id] = step

    def __iter__(self):
        return iter(self._scenarios.values())

    def __len__(self) -> int:
        return len(self._scenarios)

    def get(self, scenario_id: str | None) -> SessionScenario | None:
        if scenario_id is None:
            return None
        return self._scenarios.get(scenario_id)

    def step(self, step_id: str) -> Step:
        """Return the step registered under ``step_id``.

        Raises:
            UnknownStepError: If no registered scenario declares the step.
        """
        step = self._steps.get(step_id)
        if step is None:
            raise UnknownStepError(f"Unknown step: {step_id}", identifier=step_id)
        return step

    def permitted(self, capabilities: Iterable[CapabilityId] | None) -> list[SessionScenario]:
        """Return scenarios whose required capabilities are all granted.

        A None capability set grants nothing, so only scenarios without
        required capabilities are permitted.
        """
        granted = frozenset(capabilities or ())
        return [scenario for scenario in self._scenarios.values() if scenario.is_permitted(granted)]

    def scenarios_with_step(self, step_id: str) -> list[SessionScenario]:
        return [scenario for scenario in self._scenarios.values() if scenario.has_step(step_id)]

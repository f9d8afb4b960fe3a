"""Step, Question and scenario definitions for certification sessions.

A certification session walks through the ordered steps of a scenario. Each
step owns zero or more questions (an expected answer resolved
asynchronously, usually from the target API) and zero or more validators
(checks run against the data the client submitted for the step).

All definitions are immutable and built once by the composition root.

Examples:
    Declaring a step::

        async def supplier_name() -> str | None:
            result = await client.get_supplier()
            return result.data.name if result.data else None

        step = Step(
            id="supplier",
            name="Get Supplier",
            questions=(Question(id="supplier-name", answer=supplier_name),),
        )

    Declaring a scenario::

        scenario = SessionScenario(
            id="basic",
            name="Basic",
            optional_capabilities=frozenset({CapabilityId.PRICING}),
            steps=(supplier_step, products_step),
        )
"""

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from booking_conformance.models import CapabilityId, StepSubmission, ValidationResult


@runtime_checkable
class Validator(Protocol):
    """A check run against the data submitted for a step."""

    async def validate(self, submission: StepSubmission) -> ValidationResult:
        ...


@dataclass(frozen=True)
class Question:
    """A question whose expected answer is resolved asynchronously.

    Attributes:
        id: Question id, matched against ``QuestionAnswer.question_id``.
        answer: Coroutine function returning the expected answer.
        text: The question as shown to the certified party.
    """

    id: str
    answer: Callable[[], Awaitable[Any]]
    text: str = ""


@dataclass(frozen=True)
class Step:
    """One unit of a multi-stage certification session."""

    id: str
    name: str
    description: str = ""
    docs_url: str = ""
    questions: tuple[Question, ...] = ()
    validators: tuple[Validator, ...] = ()


@dataclass(frozen=True)
class SessionScenario:
    """A scenario made of an ordered list of steps.

    Attributes:
        id: Scenario id.
        name: Human-readable name.
        description: What the scenario certifies.
        required_capabilities: Capabilities a session must be granted to
            enter the scenario.
        optional_capabilities: Capabilities the scenario exercises when
            granted but does not require.
        steps: Steps in the order a session must enter them.
    """

    id: str
    name: str
    description: str = ""
    required_capabilities: frozenset[CapabilityId] = field(default_factory=frozenset)
    optional_capabilities: frozenset[CapabilityId] = field(default_factory=frozenset)
    steps: tuple[Step, ...] = ()

    @property
    def capabilities(self) -> frozenset[CapabilityId]:
        return self.required_capabilities | self.optional_capabilities

    def is_permitted(self, granted: Iterable[CapabilityId]) -> bool:
        """Return True when every required capability is granted."""
        return self.required_capabilities <= frozenset(granted)

    def step_ids(self) -> list[str]:
        return [step.id for step in self.steps]

    def has_step(self, step_id: str) -> bool:
        return step_id in self.step_ids()

    def is_first_step(self, step_id: str) -> bool:
        return bool(self.steps) and self.steps[0].id == step_id

    def is_last_step(self, step_id: str) -> bool:
        return bool(self.steps) and self.steps[-1].id == step_id

    def next_step_id(self, step_id: str) -> str | None:
        """Return the id of the step following ``step_id``, or None."""
        ids = self.step_ids()
        if step_id not in ids:
            return None
        index = ids.index(step_id)
        if index + 1 >= len(ids):
            return None
        return ids[index + 1]

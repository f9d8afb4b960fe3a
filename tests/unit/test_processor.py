"""Unit tests for StepValidator and SessionStepProcessor.

This test suite covers:
    - Guard rejection before any write
    - Exactly one store write per accepted submission
    - Notification only when the result carries errors or warnings
    - Contained validator and channel failures
    - Stale session detection
"""

import pytest
from prometheus_client import REGISTRY

from booking_conformance.core.guard import SessionStepGuard
from booking_conformance.core.processor import SessionStepProcessor
from booking_conformance.core.registry import ScenarioRegistry
from booking_conformance.core.step import Question, SessionScenario, Step
from booking_conformance.core.step_validator import StepValidator
from booking_conformance.exceptions import IllegalTransitionError, StaleSessionError
from booking_conformance.models import (
    FailureSeverity,
    StepSubmission,
    ValidationFailure,
    ValidationResult,
)
from booking_conformance.notifications.memory import MemoryResultChannel
from booking_conformance.storage.memory import MemorySessionStore


async def answer_acme():
    return "Acme"


class PayloadFlagValidator:
    """Reports a critical failure when the payload says so."""

    async def validate(self, submission: StepSubmission) -> ValidationResult:
        if submission.payload.get("broken"):
            return ValidationResult.from_failures(
                [
                    ValidationFailure(
                        severity=FailureSeverity.CRITICAL,
                        subject="payload.broken",
                        message="payload is broken",
                    )
                ]
            )
        return ValidationResult()


class ExplodingValidator:
    async def validate(self, submission: StepSubmission) -> ValidationResult:
        raise KeyError("request")


class FailingChannel:
    def __init__(self) -> None:
        self.attempts = 0

    async def send_validation_result(self, session_id: str, result: ValidationResult) -> None:
        self.attempts += 1
        raise ConnectionError("socket closed")


class CountingStore(MemorySessionStore):
    def __init__(self) -> None:
        super().__init__()
        self.updates = 0

    async def update(self, session_id, expected_version=None, **changes):
        self.updates += 1
        return await super().update(session_id, expected_version=expected_version, **changes)


SUPPLIER = Step(
    id="supplier",
    name="Supplier",
    questions=(Question(id="supplier-name", answer=answer_acme),),
    validators=(PayloadFlagValidator(),),
)
PRODUCTS = Step(id="products", name="Products")
EXPLODING = Step(id="exploding", name="Exploding", validators=(ExplodingValidator(), PayloadFlagValidator()))

SCENARIOS = [
    SessionScenario(id="basic", name="Basic", steps=(SUPPLIER, PRODUCTS)),
    SessionScenario(id="faulty", name="Faulty", steps=(EXPLODING,)),
]


@pytest.fixture
def store():
    return CountingStore()


@pytest.fixture
def channel():
    return MemoryResultChannel()


@pytest.fixture
def processor(store, channel):
    guard = SessionStepGuard(ScenarioRegistry(SCENARIOS))
    return SessionStepProcessor(store, guard, StepValidator(), channel)


def correct_answer(**payload):
    return {"answers": [{"question_id": "supplier-name", "value": "Acme"}], "payload": payload}


# ============================================================================
# StepValidator
# ============================================================================


@pytest.mark.asyncio
async def test_step_validator_runs_validators_then_questions():
    result = await StepValidator().validate(
        SUPPLIER,
        StepSubmission.model_validate({"answers": [], "payload": {"broken": True}}),
    )

    assert [f.subject for f in result.errors] == ["payload.broken"]
    assert [f.subject for f in result.warnings] == ["supplier-name"]


@pytest.mark.asyncio
async def test_step_validator_contains_validator_fault():
    result = await StepValidator().validate(EXPLODING, StepSubmission(payload={"broken": True}))

    assert [f.subject for f in result.errors] == ["exploding", "payload.broken"]
    assert result.errors[0].severity == FailureSeverity.CRITICAL
    assert "ExplodingValidator failed" in result.errors[0].message


# ============================================================================
# Processor
# ============================================================================


@pytest.mark.asyncio
async def test_valid_submission_advances_without_notification(processor, store, channel):
    session = await store.create(name="Acme")

    outcome = await processor.process(session, SUPPLIER, correct_answer())

    assert outcome.result.is_valid()
    assert outcome.notified is False
    assert outcome.session.current_step == "supplier"
    assert outcome.session.current_scenario == "basic"
    assert outcome.session.version == session.version + 1
    assert store.updates == 1
    assert channel.sent(session.id) == []


@pytest.mark.asyncio
async def test_invalid_submission_advances_and_notifies(processor, store, channel):
    session = await store.create()

    outcome = await processor.process(
        session,
        SUPPLIER,
        {"answers": [{"question_id": "supplier-name", "value": "Other"}]},
    )

    assert outcome.notified is True
    assert outcome.session.current_step == "supplier"
    [pushed] = channel.sent(session.id)
    assert pushed == outcome.result
    assert pushed.errors[0].message == "Wrong answer for question"


@pytest.mark.asyncio
async def test_warning_only_result_is_pushed(processor, store, channel):
    session = await store.create()

    outcome = await processor.process(session, SUPPLIER, None)

    assert not outcome.result.has_errors()
    assert outcome.result.has_warnings()
    assert len(channel.sent(session.id)) == 1


@pytest.mark.asyncio
async def test_rejected_step_writes_nothing(processor, store, channel):
    session = await store.create()
    rejected_before = REGISTRY.get_sample_value(
        "conformance_step_submissions_total", {"step_id": "products", "outcome": "rejected"}
    ) or 0

    with pytest.raises(IllegalTransitionError):
        await processor.process(session, PRODUCTS, None)

    stored = await store.get(session.id)
    assert stored.current_step is None
    assert stored.version == session.version
    assert store.updates == 0
    assert channel.sent(session.id) == []
    assert REGISTRY.get_sample_value(
        "conformance_step_submissions_total", {"step_id": "products", "outcome": "rejected"}
    ) == rejected_before + 1


@pytest.mark.asyncio
async def test_channel_failure_keeps_transition(store):
    channel = FailingChannel()
    guard = SessionStepGuard(ScenarioRegistry(SCENARIOS))
    processor = SessionStepProcessor(store, guard, StepValidator(), channel)
    session = await store.create()

    outcome = await processor.process(session, SUPPLIER, None)

    assert channel.attempts == 1
    assert outcome.notified is False
    assert (await store.get(session.id)).current_step == "supplier"


@pytest.mark.asyncio
async def test_stale_session_rejected(processor, store):
    session = await store.create()
    await processor.process(session, SUPPLIER, correct_answer())

    with pytest.raises(StaleSessionError) as exc_info:
        await processor.process(session, SUPPLIER, correct_answer())

    assert exc_info.value.expected_version == session.version


@pytest.mark.asyncio
async def test_walks_scenario_in_order(processor, store):
    session = await store.create()

    session = (await processor.process(session, SUPPLIER, correct_answer())).session
    session = (await processor.process(session, PRODUCTS, None)).session
    session = (await processor.process(session, EXPLODING, None)).session

    assert session.current_scenario == "faulty"
    assert session.current_step == "exploding"
    assert session.version == 3


@pytest.mark.asyncio
async def test_accepts_step_submission_instance(processor, store):
    session = await store.create()

    outcome = await processor.process(session, SUPPLIER, StepSubmission.model_validate(correct_answer()))

    assert outcome.result.is_valid()


@pytest.mark.asyncio
async def test_step_written_without_scenario_still_guards_order(processor, store):
    session = await store.create()
    session = await store.update(session.id, current_step="supplier")
    assert session.current_scenario is None

    with pytest.raises(IllegalTransitionError):
        await processor.process(session, EXPLODING, None)

    outcome = await processor.process(session, PRODUCTS, None)
    assert outcome.session.current_scenario == "basic"


@pytest.mark.asyncio
async def test_accepts_camel_case_answers(processor, store, channel):
    session = await store.create()

    outcome = await processor.process(
        session,
        SUPPLIER,
        {"answers": [{"questionId": "supplier-name", "value": "Acme"}]},
    )

    assert outcome.result.is_valid()
    assert channel.sent(session.id) == []

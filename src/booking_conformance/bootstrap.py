"""Composition root.

Builds every engine component once, from one ConformanceConfig, and wires
them together explicitly.

Example:
    Running every flow against a target API::

        config = ConformanceConfig.from_env()
        container = build_container(config)
        try:
            results = await run_flows(container)
        finally:
            await container.aclose()

    Processing a session step::

        session = await container.store.create(name="Acme certification")
        outcome = await container.processor.process(
            session,
            container.registry.step(StepId.SUPPLIER),
            {"answers": [{"question_id": "supplier-name", "value": "Acme"}]},
        )
"""

from collections.abc import Iterable
from dataclasses import dataclass

import httpx

from booking_conformance.client import TargetApiClient
from booking_conformance.config import ConformanceConfig
from booking_conformance.core.flow import Flow, FlowContext
from booking_conformance.core.guard import SessionStepGuard
from booking_conformance.core.processor import SessionStepProcessor
from booking_conformance.core.registry import ScenarioRegistry
from booking_conformance.core.step_validator import StepValidator
from booking_conformance.flows import FLOWS
from booking_conformance.models import FlowResult
from booking_conformance.notifications.base import ResultChannel
from booking_conformance.notifications.websocket import WebSocketResultChannel
from booking_conformance.observability.logging import configure_logging, get_logger
from booking_conformance.steps import build_scenarios
from booking_conformance.storage.base import SessionStore
from booking_conformance.storage.memory import MemorySessionStore
from booking_conformance.validators.booking import BookingEndpointValidator

logger = get_logger(__name__)


@dataclass
class Container:
    """Every long-lived component of one process."""

    config: ConformanceConfig
    client: TargetApiClient
    store: SessionStore
    channel: ResultChannel
    registry: ScenarioRegistry
    guard: SessionStepGuard
    processor: SessionStepProcessor
    flows: tuple[Flow, ...]

    def flow_context(self) -> FlowContext:
        return FlowContext(client=self.client, config=self.config)

    async def aclose(self) -> None:
        await self.client.aclose()


def build_container(
    config: ConformanceConfig,
    client: TargetApiClient | None = None,
    store: SessionStore | None = None,
    channel: ResultChannel | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    configure_logs: bool = True,
) -> Container:
    """Build the engine from ``config``.

    Args:
        config: Run configuration.
        client: Target API client. Built from ``config`` when omitted.
        store: Session store. A MemorySessionStore when omitted.
        channel: Live result channel. A WebSocketResultChannel when omitted.
        transport: httpx transport for the client built from ``config``.
        configure_logs: Configure structlog from ``config``.

    Returns:
        The wired container.
    """
    if configure_logs:
        configure_logging(level=config.log_level, json_output=config.json_logs)

    client = client or TargetApiClient.from_config(config, transport=transport)
    store = store or MemorySessionStore()
    channel = channel or WebSocketResultChannel()

    registry = ScenarioRegistry(build_scenarios(client, BookingEndpointValidator()))
    guard = SessionStepGuard(registry)
    processor = SessionStepProcessor(store, guard, StepValidator(), channel)

    logger.info(
        "container.built",
        target=config.target_base_url,
        scenarios=len(registry),
        flows=len(FLOWS),
    )

    return Container(
        config=config,
        client=client,
        store=store,
        channel=channel,
        registry=registry,
        guard=guard,
        processor=processor,
        flows=FLOWS,
    )


async def run_flows(container: Container, flows: Iterable[Flow] | None = None) -> list[FlowResult]:
    """Run flows one after another and return their results in order.

    Scenarios inside a flow run concurrently; flows themselves run in
    sequence so a slow target API sees at most
    ``max_concurrent_scenarios`` calls in flight.
    """
    context = container.flow_context()
    results = []
    for flow in container.flows if flows is None else flows:
        results.append(await flow.validate(context))
    return results

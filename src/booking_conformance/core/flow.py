"""Flow and Scenario execution.

A Scenario is one independent conformance check: it calls the target API
and returns a ScenarioResult. A Flow groups the scenarios of one operation
family and aggregates their results into a FlowResult.

Fault isolation:
    Every scenario runs behind its own boundary. Whatever a scenario raises,
    whether a TargetApiError from the client or an unexpected runtime
    error, is turned into a CRITICAL failure of that scenario only. The
    other scenarios of the flow still run and report their own results.

Scenarios of one flow run concurrently, bounded by
``ConformanceConfig.max_concurrent_scenarios``. The FlowResult lists them in
declaration order.

Examples:
    Declaring a flow::

        class BookingGetFlow(BaseFlow):
            name = "Get Booking"
            docs = "https://docs.octo.travel/octo-api-core/bookings#get-booking"

            def scenarios(self) -> list[Scenario]:
                return [BookingGetReservationScenario(), BookingGetInvalidUUIDScenario()]

        result = await BookingGetFlow().validate(FlowContext(client=client, config=config))
"""

import asyncio
import time
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from booking_conformance.client import ApiResult, TargetApiClient
from booking_conformance.config import ConformanceConfig
from booking_conformance.exceptions import ScenarioSetupError, TargetApiError
from booking_conformance.models import CapabilityId, FlowResult, ScenarioResult, ValidationFailure
from booking_conformance.observability.logging import get_logger
from booking_conformance.observability.metrics import record_flow_duration, record_scenario
from booking_conformance.validators.helpers import critical

logger = get_logger(__name__)


@dataclass(frozen=True)
class FlowContext:
    """Inputs shared read-only by every scenario of a run."""

    client: TargetApiClient
    config: ConformanceConfig


@runtime_checkable
class Scenario(Protocol):
    """One independent conformance check against the target API."""

    name: str
    description: str

    async def validate(self, context: FlowContext) -> ScenarioResult:
        ...


@runtime_checkable
class Flow(Protocol):
    """An ordered group of scenarios for one operation family."""

    name: str
    docs: str
    required_capabilities: frozenset[CapabilityId]

    async def validate(self, context: FlowContext) -> FlowResult:
        ...


class BaseScenario:
    """Helpers shared by concrete scenarios."""

    name: str = ""
    description: str = ""

    async def validate(self, context: FlowContext) -> ScenarioResult:
        raise NotImplementedError

    def result(self, failures: Iterable[ValidationFailure]) -> ScenarioResult:
        return ScenarioResult.from_failures(self.name, self.description, failures)

    @staticmethod
    def expect_success(result: ApiResult, subject: str) -> list[ValidationFailure]:
        """Fail critically when a call that should succeed did not."""
        if result.data is not None:
            return []
        return [
            critical(
                subject,
                f"{result.method} {result.url} responded with status {result.status_code}, "
                "but a successful response was expected",
                result.body,
            )
        ]

    @staticmethod
    def expect_error(
        result: ApiResult,
        status_code: int,
        error_code: str,
    ) -> list[ValidationFailure]:
        """Check that a call was rejected with the given status and error code."""
        failures: list[ValidationFailure] = []
        if result.status_code != status_code:
            failures.append(
                critical(
                    "response.status",
                    f"Response status has to be {status_code}, "
                    f"but the provided value was: {result.status_code}",
                    result.status_code,
                )
            )
        if result.error_code != error_code:
            failures.append(
                critical(
                    "response.error",
                    f'Response error has to be "{error_code}", '
                    f'but the provided value was: "{result.error_code}"',
                    result.body,
                )
            )
        return failures

    @staticmethod
    def setup_failed(action: str, result: ApiResult) -> ValidationFailure:
        """Failure reported when a prerequisite call did not produce a booking."""
        return critical(
            "setup",
            f"{action} failed with status {result.status_code}",
            result.body,
        )


class BaseFlow:
    """Runs scenarios behind per-scenario fault boundaries."""

    name: str = ""
    docs: str = ""
    required_capabilities: frozenset[CapabilityId] = frozenset()

    def scenarios(self) -> list[Scenario]:
        raise NotImplementedError

    async def validate(self, context: FlowContext) -> FlowResult:
        return await self.validate_scenarios(self.scenarios(), context)

    async def validate_scenarios(
        self,
        scenarios: list[Scenario],
        context: FlowContext,
    ) -> FlowResult:
        """Run every scenario and aggregate the results without early exit."""
        start_time = time.monotonic()
        semaphore = asyncio.Semaphore(context.config.max_concurrent_scenarios)

        results = await asyncio.gather(
            *(self._run_scenario(scenario, context, semaphore) for scenario in scenarios)
        )

        record_flow_duration(self.name, time.monotonic() - start_time)
        flow_result = FlowResult(name=self.name, docs=self.docs, scenarios=list(results))
        logger.info(
            "flow.completed",
            flow=self.name,
            scenarios=len(results),
            success=flow_result.success,
        )
        return flow_result

    async def _run_scenario(
        self,
        scenario: Scenario,
        context: FlowContext,
        semaphore: asyncio.Semaphore,
    ) -> ScenarioResult:
        name = getattr(scenario, "name", type(scenario).__name__)
        description = getattr(scenario, "description", "")

        async with semaphore:
            try:
                result = await scenario.validate(context)
            except ScenarioSetupError as e:
                logger.warning("scenario.setup_failed", flow=self.name, scenario=name, error=e.message)
                result = ScenarioResult.from_failures(name, description, [critical("setup", e.message)])
            except TargetApiError as e:
                logger.warning("scenario.target_failed", flow=self.name, scenario=name, error=e.message)
                result = ScenarioResult.from_failures(
                    name,
                    description,
                    [critical("target", e.message, e.url)],
                )
            except Exception as e:
                logger.error(
                    "scenario.failed",
                    flow=self.name,
                    scenario=name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                result = ScenarioResult.from_failures(
                    name,
                    description,
                    [critical("scenario", f"Unexpected error: {type(e).__name__}: {e}")],
                )

        record_scenario(self.name, result.success)
        return result

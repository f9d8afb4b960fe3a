"""Prometheus metrics for the conformance engine.

Metrics include:

- Scenario outcomes per flow
- Flow execution time
- Step submissions per step and outcome
- Live-notification deliveries and failures

Examples:
    Recording a scenario outcome::

        from booking_conformance.observability.metrics import record_scenario

        record_scenario(flow="Get Booking", success=False)

    Recording a step submission::

        from booking_conformance.observability.metrics import record_step

        record_step(step_id="booking_reservation", outcome="invalid")
"""

from prometheus_client import Counter, Histogram

# Labels: flow, outcome (passed, failed)
scenarios_total = Counter(
    "conformance_scenarios_total",
    "Total number of scenarios executed against the target API",
    ["flow", "outcome"],
)

flow_duration_seconds = Histogram(
    "conformance_flow_duration_seconds",
    "Wall clock time of one flow run in seconds",
    ["flow"],
    buckets=[0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30, 60, 120],
)

# Labels: step_id, outcome (valid, invalid, rejected)
step_submissions_total = Counter(
    "conformance_step_submissions_total",
    "Total number of step submissions processed",
    ["step_id", "outcome"],
)

# Labels: outcome (sent, failed)
notifications_total = Counter(
    "conformance_notifications_total",
    "Validation results pushed to the live-notification channel",
    ["outcome"],
)


def record_scenario(flow: str, success: bool) -> None:
    """Record one scenario outcome.

    Examples:
        >>> record_scenario("Get Booking", True)
    """
    scenarios_total.labels(flow=flow, outcome="passed" if success else "failed").inc()


def record_flow_duration(flow: str, seconds: float) -> None:
    flow_duration_seconds.labels(flow=flow).observe(seconds)


def record_step(step_id: str, outcome: str) -> None:
    """Record a processed step submission.

    Args:
        step_id: Id of the submitted step
        outcome: valid, invalid or rejected
    """
    step_submissions_total.labels(step_id=step_id, outcome=outcome).inc()


def record_notification(success: bool) -> None:
    notifications_total.labels(outcome="sent" if success else "failed").inc()

"""Observability utilities for the conformance engine.

This package provides monitoring and debugging capabilities:
- Prometheus metrics for scenario, step and notification outcomes
- Structured logging with contextual information
"""

from booking_conformance.observability.logging import configure_logging, get_logger
from booking_conformance.observability.metrics import (
    record_flow_duration,
    record_notification,
    record_scenario,
    record_step,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "record_scenario",
    "record_flow_duration",
    "record_step",
    "record_notification",
]

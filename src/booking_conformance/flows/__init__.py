"""Conformance flows run against a target booking API.

``FLOWS`` is the static registration table of every flow, in run order.
"""

from collections.abc import Iterable

from booking_conformance.core.flow import Flow
from booking_conformance.flows.booker import Booker
from booking_conformance.flows.booking import (
    BookingCancellationFlow,
    BookingConfirmationFlow,
    BookingGetFlow,
    BookingListFlow,
    BookingReservationExtendFlow,
    BookingReservationFlow,
    BookingUpdateFlow,
)
from booking_conformance.models import CapabilityId

FLOWS: tuple[Flow, ...] = (
    BookingReservationFlow(),
    BookingReservationExtendFlow(),
    BookingConfirmationFlow(),
    BookingUpdateFlow(),
    BookingCancellationFlow(),
    BookingGetFlow(),
    BookingListFlow(),
)


def flows_for(capabilities: Iterable[CapabilityId] | None, flows: Iterable[Flow] = FLOWS) -> list[Flow]:
    """Return the flows whose required capabilities are all granted."""
    granted = frozenset(capabilities or ())
    return [flow for flow in flows if flow.required_capabilities <= granted]


__all__ = [
    "FLOWS",
    "Booker",
    "BookingCancellationFlow",
    "BookingConfirmationFlow",
    "BookingGetFlow",
    "BookingListFlow",
    "BookingReservationExtendFlow",
    "BookingReservationFlow",
    "BookingUpdateFlow",
    "flows_for",
]

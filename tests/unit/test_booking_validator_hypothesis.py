"""Property-based tests for BookingEndpointValidator using Hypothesis.

Verifies the unit item and cancel rules across generated bookings.
"""

from hypothesis import given
from hypothesis import strategies as st

from booking_conformance.resources import (
    Booking,
    BookingStatus,
    CancelBookingRequest,
    CreateBookingRequest,
    UnitItem,
    UnitItemRequest,
)
from booking_conformance.validators.booking import BookingEndpointValidator

validator = BookingEndpointValidator()

unit_ids_strategy = st.lists(
    st.sampled_from(["adult", "child", "infant", "senior", "family"]),
    min_size=1,
    max_size=8,
)


def request_for(unit_ids: list[str]) -> CreateBookingRequest:
    return CreateBookingRequest(
        product_id="p-1",
        option_id="DEFAULT",
        availability_id="a-1",
        unit_items=[UnitItemRequest(unit_id=unit_id) for unit_id in unit_ids],
    )


def reservation_with(unit_ids: list[str]) -> Booking:
    return Booking(
        status=BookingStatus.ON_HOLD.value,
        unit_items=[UnitItem(unit_id=unit_id) for unit_id in unit_ids],
    )


@given(unit_ids=unit_ids_strategy, data=st.data())
def test_unit_item_order_does_not_matter(unit_ids, data):
    """A reservation returning the requested units in any order is clean."""
    shuffled = data.draw(st.permutations(unit_ids))
    assert validator.validate_reservation(reservation_with(shuffled), request_for(unit_ids)) == []


@given(unit_ids=unit_ids_strategy, extra=st.integers(min_value=1, max_value=3))
def test_extra_unit_items_are_critical(unit_ids, extra):
    """Returning more items than requested always fails the count check."""
    returned = unit_ids + unit_ids[:1] * extra
    failures = validator.validate_reservation(reservation_with(returned), request_for(unit_ids))
    assert failures
    assert failures[0].message == f"booking.unitItems field must have {len(unit_ids)} items"


@given(
    prior=st.sampled_from(list(BookingStatus)),
    returned=st.sampled_from(list(BookingStatus)),
)
def test_cancel_status_rule(prior, returned):
    """Only ON_HOLD and CONFIRMED bookings get a status assertion after cancelling."""
    failures = validator.validate_cancel(
        Booking(status=prior.value),
        Booking(status=returned.value),
        CancelBookingRequest(),
    )

    expected = BookingEndpointValidator.expected_cancel_status(prior.value)
    if expected is None or expected == returned:
        assert failures == []
    else:
        assert [f.subject for f in failures] == ["booking.status"]

"""Booking lifecycle rules.

BookingEndpointValidator compares what the target API returned for a booking
call with the request that triggered it, across the whole lifecycle:

    reservation (ON_HOLD) -> extend -> confirmation (CONFIRMED) -> update
                          \\-> cancel (EXPIRED)      \\-> cancel (CANCELLED)

Every operation returns an ordered list of ``ValidationFailure`` and never
raises for a mismatch. Field mismatches are CRITICAL. A reservation hold that
was not actually extended is only a WARNING.

Examples:
    Checking a reservation::

        validator = BookingEndpointValidator()
        failures = validator.validate_reservation(
            reservation=booking,
            request=CreateBookingRequest(
                product_id="p-1",
                option_id="DEFAULT",
                availability_id="a-1",
                unit_items=[UnitItemRequest(unit_id="adult")],
            ),
        )
        if failures:
            ...
"""

from datetime import UTC, datetime

from pydantic.alias_generators import to_camel

from booking_conformance.models import ValidationFailure
from booking_conformance.resources import (
    Booking,
    BookingStatus,
    CancelBookingRequest,
    ConfirmBookingRequest,
    Contact,
    CreateBookingRequest,
    ExtendBookingRequest,
    GetBookingsQuery,
    UnitItemRequest,
    UpdateBookingRequest,
)
from booking_conformance.validators.helpers import collect, critical, equals, min_length, warning

CONTACT_FIELDS = ("first_name", "full_name", "last_name", "email_address", "notes")


def _aware(moment: datetime | None) -> datetime | None:
    # Naive timestamps are treated as UTC so they compare with aware ones
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


class BookingEndpointValidator:
    """Stateless comparator for booking responses against their requests."""

    def __init__(self, path: str = "booking") -> None:
        self.path = path

    def validate(
        self,
        booking: Booking | None,
        product_id: str,
        option_id: str,
        availability_id: str,
    ) -> list[ValidationFailure]:
        """Check the returned identity fields against the requested ids.

        Nested ``product``, ``option`` and ``availability`` objects are only
        checked when present; a missing nested object is not a failure.
        """
        booking = booking or Booking()
        return collect(
            [
                equals(f"{self.path}.productId", booking.product_id, product_id),
                equals(f"{self.path}.product.id", booking.product.id, product_id)
                if booking.product is not None
                else None,
                equals(f"{self.path}.optionId", booking.option_id, option_id),
                equals(f"{self.path}.option.id", booking.option.id, option_id)
                if booking.option is not None
                else None,
                equals(f"{self.path}.availabilityId", booking.availability_id, availability_id),
                equals(f"{self.path}.availability.id", booking.availability.id, availability_id)
                if booking.availability is not None
                else None,
            ]
        )

    def validate_reservation(
        self,
        reservation: Booking | None,
        request: CreateBookingRequest,
    ) -> list[ValidationFailure]:
        reservation = reservation or Booking()
        failures = collect([equals(f"{self.path}.status", reservation.status, BookingStatus.ON_HOLD)])
        failures.extend(self._validate_unit_items(request.unit_items, reservation))

        if request.notes:
            failures.extend(collect([equals(f"{self.path}.notes", reservation.notes, request.notes)]))

        return failures

    def validate_reservation_extend(
        self,
        reservation: Booking,
        reservation_extended: Booking | None,
        request: ExtendBookingRequest | None = None,
    ) -> list[ValidationFailure]:
        """Check that an extended reservation is still on hold and expires later.

        Args:
            reservation: The reservation before the extend call.
            reservation_extended: The reservation returned by the extend call.
            request: The extend request, used in the failure message.
        """
        extended = reservation_extended or Booking()
        failures = collect([equals(f"{self.path}.status", extended.status, BookingStatus.ON_HOLD)])

        previous = _aware(reservation.utc_expires_at)
        current = _aware(extended.utc_expires_at)
        if previous is not None and current is not None and current <= previous:
            minutes = request.expiration_minutes if request is not None else None
            failures.append(
                warning(
                    f"{self.path}.utcExpiresAt",
                    f"{self.path}.utcExpiresAt has to be extended by {minutes} minutes. "
                    f'Provided value was: "{current.isoformat()}" '
                    f'Previous value of {self.path}.utcExpiresAt was: "{previous.isoformat()}"',
                    current.isoformat(),
                )
            )

        return failures

    def validate_confirmation(
        self,
        booking: Booking | None,
        request: ConfirmBookingRequest,
    ) -> list[ValidationFailure]:
        booking = booking or Booking()
        failures = collect(
            [
                equals(
                    f"{self.path}.resellerReference",
                    booking.reseller_reference,
                    request.reseller_reference,
                ),
                equals(f"{self.path}.status", booking.status, BookingStatus.CONFIRMED),
            ]
        )
        failures.extend(self._validate_contact(booking, request.contact))

        if request.unit_items is not None:
            failures.extend(self._validate_unit_items(request.unit_items, booking))

        return failures

    def validate_update(
        self,
        booking_updated: Booking | None,
        request: UpdateBookingRequest,
    ) -> list[ValidationFailure]:
        booking_updated = booking_updated or Booking()
        failures = self._validate_contact(booking_updated, request.contact)
        failures.extend(self._validate_unit_items(request.unit_items, booking_updated))

        if request.notes:
            failures.extend(
                collect([equals(f"{self.path}.notes", booking_updated.notes, request.notes)])
            )

        return failures

    def validate_cancel(
        self,
        booking: Booking,
        booking_cancelled: Booking | None,
        request: CancelBookingRequest,
    ) -> list[ValidationFailure]:
        """Check a cancelled booking against its status before cancellation.

        An ON_HOLD booking must end up EXPIRED and a CONFIRMED one CANCELLED.
        Any other prior status gets no status assertion.
        """
        cancelled = booking_cancelled or Booking()
        reason = cancelled.cancellation.reason if cancelled.cancellation is not None else None
        failures = collect([equals(f"{self.path}.cancellation.reason", reason, request.reason)])

        expected_status = self.expected_cancel_status(booking.status)
        if expected_status is not None:
            failures.extend(
                collect([equals(f"{self.path}.status", cancelled.status, expected_status)])
            )

        return failures

    @staticmethod
    def expected_cancel_status(prior_status: str | None) -> BookingStatus | None:
        """Return the status a booking must have after cancelling it from ``prior_status``."""
        if prior_status == BookingStatus.ON_HOLD:
            return BookingStatus.EXPIRED
        if prior_status == BookingStatus.CONFIRMED:
            return BookingStatus.CANCELLED
        return None

    def validate_get_bookings(
        self,
        bookings: list[Booking] | None,
        query: GetBookingsQuery | None = None,
    ) -> list[ValidationFailure]:
        bookings = bookings or []
        failures = collect([min_length("bookings", bookings, 1)])

        if query is not None and query.reseller_reference:
            failures.extend(
                collect(
                    equals(
                        f"bookings[{i}].resellerReference",
                        booking.reseller_reference,
                        query.reseller_reference,
                    )
                    for i, booking in enumerate(bookings)
                )
            )

        if query is not None and query.supplier_reference:
            failures.extend(
                collect(
                    equals(
                        f"bookings[{i}].supplierReference",
                        booking.supplier_reference,
                        query.supplier_reference,
                    )
                    for i, booking in enumerate(bookings)
                )
            )

        return failures

    def _validate_unit_items(
        self,
        requested: list[UnitItemRequest] | None,
        booking: Booking,
    ) -> list[ValidationFailure]:
        if requested is None:
            return []

        label = f"{self.path}.unitItems"
        failures: list[ValidationFailure] = []
        returned = booking.unit_items

        if returned is None or len(returned) != len(requested):
            failures.append(
                critical(
                    label,
                    f"{label} field must have {len(requested)} items",
                    None if returned is None else len(returned),
                )
            )

        requested_ids = {item.unit_id for item in requested}
        returned_ids = [item.unit_id for item in returned or []]
        if returned is None or any(unit_id not in requested_ids for unit_id in returned_ids):
            failures.append(
                critical(
                    label,
                    f"{label} field must contain these unitIds: "
                    f"{','.join(item.unit_id for item in requested)}, "
                    f"but the provided unitIds are: {','.join(str(u) for u in returned_ids)}",
                    returned_ids,
                )
            )

        return failures

    def _validate_contact(self, booking: Booking, contact: Contact | None) -> list[ValidationFailure]:
        if contact is None:
            return []

        returned = booking.contact or Contact()
        return collect(
            equals(
                f"{self.path}.contact.{to_camel(field)}",
                getattr(returned, field),
                getattr(contact, field),
            )
            for field in CONTACT_FIELDS
        )

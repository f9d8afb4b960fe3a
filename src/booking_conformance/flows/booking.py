"""Booking lifecycle flows.

Each flow certifies one booking operation of the target API. Scenarios
create their own bookings through a Booker, call the operation under test
and hand the response to BookingEndpointValidator. Error scenarios send a
deliberately invalid request and check the status code and error code.
"""

from booking_conformance.client import ApiResult
from booking_conformance.core.flow import BaseFlow, BaseScenario, FlowContext, Scenario
from booking_conformance.flows.booker import DEFAULT_CONTACT, Booker
from booking_conformance.models import ScenarioResult, ValidationFailure
from booking_conformance.resources import (
    Booking,
    BookingStatus,
    CancelBookingRequest,
    ExtendBookingRequest,
    GetBookingsQuery,
    UpdateBookingRequest,
)
from booking_conformance.validators.booking import BookingEndpointValidator
from booking_conformance.validators.helpers import collect, critical, equals

DOCS_URL = "https://docs.octo.travel/octo-api-core/bookings"

INVALID_PRODUCT_ID = "invalid-product-id"
INVALID_OPTION_ID = "invalid-option-id"
INVALID_BOOKING_UUID = "invalid-booking-uuid"


class BookingScenario(BaseScenario):
    """Scenario working on bookings of the configured product."""

    validator = BookingEndpointValidator()

    def booker(self, context: FlowContext) -> Booker:
        return Booker(context.client, context.config)

    @staticmethod
    def require_booking(action: str, result: ApiResult[Booking] | None) -> ValidationFailure | None:
        """Return a failure unless ``result`` holds a booking with a uuid."""
        if result is None:
            return critical("setup", f"{action} was not attempted")
        if result.data is None:
            return BaseScenario.setup_failed(action, result)
        if result.data.uuid is None:
            return critical("booking.uuid", f"{action} returned a booking without uuid", result.body)
        return None

    def require_confirmed(
        self,
        reservation: ApiResult[Booking],
        confirmation: ApiResult[Booking] | None,
    ) -> ValidationFailure | None:
        return self.require_booking("Reservation", reservation) or self.require_booking(
            "Confirmation", confirmation
        )


# =============================================================================
# Reservation
# =============================================================================


class BookingReservationScenario(BookingScenario):
    name = "Booking Reservation"
    description = "Create a reservation and check it is ON_HOLD with the requested units"

    async def validate(self, context: FlowContext) -> ScenarioResult:
        request, result = await self.booker(context).create_reservation("reservation", notes="Test note")

        failures = self.expect_success(result, "booking")
        if result.data is not None:
            failures.extend(
                self.validator.validate(
                    result.data,
                    request.product_id,
                    request.option_id,
                    request.availability_id,
                )
            )
            failures.extend(self.validator.validate_reservation(result.data, request))
        return self.result(failures)


class BookingReservationInvalidProductScenario(BookingScenario):
    name = "Booking Reservation Invalid Product"
    description = "Reserve an unknown product and expect INVALID_PRODUCT_ID"

    async def validate(self, context: FlowContext) -> ScenarioResult:
        request = await self.booker(context).reservation_request("reservation-invalid-product")
        result = await context.client.create_booking(
            request.model_copy(update={"product_id": INVALID_PRODUCT_ID})
        )
        return self.result(self.expect_error(result, 400, "INVALID_PRODUCT_ID"))


class BookingReservationInvalidOptionScenario(BookingScenario):
    name = "Booking Reservation Invalid Option"
    description = "Reserve an unknown option and expect INVALID_OPTION_ID"

    async def validate(self, context: FlowContext) -> ScenarioResult:
        request = await self.booker(context).reservation_request("reservation-invalid-option")
        result = await context.client.create_booking(
            request.model_copy(update={"option_id": INVALID_OPTION_ID})
        )
        return self.result(self.expect_error(result, 400, "INVALID_OPTION_ID"))


class BookingReservationFlow(BaseFlow):
    name = "Booking Reservation"
    docs = f"{DOCS_URL}#create-booking"

    def scenarios(self) -> list[Scenario]:
        return [
            BookingReservationScenario(),
            BookingReservationInvalidProductScenario(),
            BookingReservationInvalidOptionScenario(),
        ]


# =============================================================================
# Reservation extend
# =============================================================================


class BookingReservationExtendScenario(BookingScenario):
    name = "Booking Reservation Extend"
    description = "Extend an ON_HOLD reservation and check it expires later"

    async def validate(self, context: FlowContext) -> ScenarioResult:
        _, reservation = await self.booker(context).create_reservation("reservation-extend")
        failure = self.require_booking("Reservation", reservation)
        if failure is not None:
            return self.result([failure])

        request = ExtendBookingRequest(expiration_minutes=context.config.expiration_minutes)
        extended = await context.client.extend_booking(reservation.data.uuid, request)

        failures = self.expect_success(extended, "booking")
        if extended.data is not None:
            failures.extend(
                self.validator.validate_reservation_extend(reservation.data, extended.data, request)
            )
        return self.result(failures)


class BookingReservationExtendFlow(BaseFlow):
    name = "Booking Reservation Extend"
    docs = f"{DOCS_URL}#extend-reservation"

    def scenarios(self) -> list[Scenario]:
        return [BookingReservationExtendScenario()]


# =============================================================================
# Confirmation
# =============================================================================


class BookingConfirmationScenario(BookingScenario):
    name = "Booking Confirmation"
    description = "Confirm a reservation with contact details and a reseller reference"

    async def validate(self, context: FlowContext) -> ScenarioResult:
        booker = self.booker(context)
        reservation_request, reservation = await booker.create_reservation("confirmation")
        failure = self.require_booking("Reservation", reservation)
        if failure is not None:
            return self.result([failure])

        request = booker.confirmation_request("confirmation").model_copy(
            update={"unit_items": booker.unit_items()}
        )
        confirmed = await context.client.confirm_booking(reservation.data.uuid, request)

        failures = self.expect_success(confirmed, "booking")
        if confirmed.data is not None:
            failures.extend(
                self.validator.validate(
                    confirmed.data,
                    reservation_request.product_id,
                    reservation_request.option_id,
                    reservation_request.availability_id,
                )
            )
            failures.extend(self.validator.validate_confirmation(confirmed.data, request))
        return self.result(failures)


class BookingConfirmationFlow(BaseFlow):
    name = "Booking Confirmation"
    docs = f"{DOCS_URL}#confirm-booking"

    def scenarios(self) -> list[Scenario]:
        return [BookingConfirmationScenario()]


# =============================================================================
# Update
# =============================================================================


class BookingUpdateContactScenario(BookingScenario):
    name = "Booking Update Contact"
    description = "Update the contact and notes of a reservation"

    async def validate(self, context: FlowContext) -> ScenarioResult:
        booker = self.booker(context)
        _, reservation = await booker.create_reservation("update-contact")
        failure = self.require_booking("Reservation", reservation)
        if failure is not None:
            return self.result([failure])

        request = UpdateBookingRequest(
            reseller_reference=booker.reseller_reference("update-contact-updated"),
            contact=DEFAULT_CONTACT.model_copy(
                update={"first_name": "Jane", "full_name": "Jane Doe", "notes": "Updated note"}
            ),
            notes="Updated booking note",
        )
        updated = await context.client.update_booking(reservation.data.uuid, request)

        failures = self.expect_success(updated, "booking")
        if updated.data is not None:
            failures.extend(self.validator.validate_update(updated.data, request))
        return self.result(failures)


class BookingUpdateUnitItemsScenario(BookingScenario):
    name = "Booking Update Unit Items"
    description = "Add a unit item to a reservation"

    async def validate(self, context: FlowContext) -> ScenarioResult:
        booker = self.booker(context)
        _, reservation = await booker.create_reservation("update-unit-items")
        failure = self.require_booking("Reservation", reservation)
        if failure is not None:
            return self.result([failure])

        unit_items = booker.unit_items()
        request = UpdateBookingRequest(unit_items=[*unit_items, unit_items[0]])
        updated = await context.client.update_booking(reservation.data.uuid, request)

        failures = self.expect_success(updated, "booking")
        if updated.data is not None:
            failures.extend(self.validator.validate_update(updated.data, request))
        return self.result(failures)


class BookingUpdateFlow(BaseFlow):
    name = "Booking Update"
    docs = f"{DOCS_URL}#update-booking"

    def scenarios(self) -> list[Scenario]:
        return [BookingUpdateContactScenario(), BookingUpdateUnitItemsScenario()]


# =============================================================================
# Cancellation
# =============================================================================


class BookingCancellationReservationScenario(BookingScenario):
    name = "Booking Cancellation (Reservation)"
    description = "Cancel an ON_HOLD reservation and expect EXPIRED"

    async def validate(self, context: FlowContext) -> ScenarioResult:
        _, reservation = await self.booker(context).create_reservation("cancel-reservation")
        failure = self.require_booking("Reservation", reservation)
        if failure is not None:
            return self.result([failure])

        request = CancelBookingRequest(reason="Cancelled by conformance run")
        cancelled = await context.client.cancel_booking(reservation.data.uuid, request)

        failures = self.expect_success(cancelled, "booking")
        if cancelled.data is not None:
            failures.extend(self.validator.validate_cancel(reservation.data, cancelled.data, request))
        return self.result(failures)


class BookingCancellationBookingScenario(BookingScenario):
    name = "Booking Cancellation (Booking)"
    description = "Cancel a CONFIRMED booking and expect CANCELLED"

    async def validate(self, context: FlowContext) -> ScenarioResult:
        reservation, confirmation = await self.booker(context).create_confirmed_booking("cancel-booking")
        failure = self.require_confirmed(reservation, confirmation)
        if failure is not None:
            return self.result([failure])

        request = CancelBookingRequest(reason="Cancelled by conformance run")
        cancelled = await context.client.cancel_booking(confirmation.data.uuid, request)

        failures = self.expect_success(cancelled, "booking")
        if cancelled.data is not None:
            failures.extend(self.validator.validate_cancel(confirmation.data, cancelled.data, request))
        return self.result(failures)


class BookingCancellationFlow(BaseFlow):
    name = "Booking Cancellation"
    docs = f"{DOCS_URL}#cancel-booking"

    def scenarios(self) -> list[Scenario]:
        return [BookingCancellationReservationScenario(), BookingCancellationBookingScenario()]


# =============================================================================
# Get booking
# =============================================================================


def _check_fetched(expected: Booking, fetched: Booking, status: BookingStatus) -> list[ValidationFailure]:
    return collect(
        [
            equals("booking.uuid", fetched.uuid, expected.uuid),
            equals("booking.status", fetched.status, status),
        ]
    )


class BookingGetReservationScenario(BookingScenario):
    name = "Get Booking (Reservation)"
    description = "Fetch an ON_HOLD reservation by uuid"

    async def validate(self, context: FlowContext) -> ScenarioResult:
        request, reservation = await self.booker(context).create_reservation("get-reservation")
        failure = self.require_booking("Reservation", reservation)
        if failure is not None:
            return self.result([failure])

        fetched = await context.client.get_booking(reservation.data.uuid)

        failures = self.expect_success(fetched, "booking")
        if fetched.data is not None:
            failures.extend(
                self.validator.validate(
                    fetched.data,
                    request.product_id,
                    request.option_id,
                    request.availability_id,
                )
            )
            failures.extend(_check_fetched(reservation.data, fetched.data, BookingStatus.ON_HOLD))
        return self.result(failures)


class BookingGetBookingScenario(BookingScenario):
    name = "Get Booking (Booking)"
    description = "Fetch a CONFIRMED booking by uuid"

    async def validate(self, context: FlowContext) -> ScenarioResult:
        reservation, confirmation = await self.booker(context).create_confirmed_booking("get-booking")
        failure = self.require_confirmed(reservation, confirmation)
        if failure is not None:
            return self.result([failure])

        fetched = await context.client.get_booking(confirmation.data.uuid)

        failures = self.expect_success(fetched, "booking")
        if fetched.data is not None:
            failures.extend(_check_fetched(confirmation.data, fetched.data, BookingStatus.CONFIRMED))
        return self.result(failures)


class BookingGetInvalidUUIDScenario(BookingScenario):
    name = "Get Booking Invalid UUID"
    description = "Fetch an unknown booking and expect INVALID_BOOKING_UUID"

    async def validate(self, context: FlowContext) -> ScenarioResult:
        result = await context.client.get_booking(INVALID_BOOKING_UUID)
        return self.result(self.expect_error(result, 400, "INVALID_BOOKING_UUID"))


class BookingGetFlow(BaseFlow):
    name = "Get Booking"
    docs = f"{DOCS_URL}#get-booking"

    def scenarios(self) -> list[Scenario]:
        return [
            BookingGetReservationScenario(),
            BookingGetBookingScenario(),
            BookingGetInvalidUUIDScenario(),
        ]


# =============================================================================
# List bookings
# =============================================================================


class BookingListResellerReferenceScenario(BookingScenario):
    name = "List Bookings (Reseller Reference)"
    description = "List bookings filtered by reseller reference"

    async def validate(self, context: FlowContext) -> ScenarioResult:
        booker = self.booker(context)
        reservation, confirmation = await booker.create_confirmed_booking("list-reseller-reference")
        failure = self.require_confirmed(reservation, confirmation)
        if failure is not None:
            return self.result([failure])

        query = GetBookingsQuery(reseller_reference=booker.reseller_reference("list-reseller-reference"))
        listed = await context.client.get_bookings(query)

        failures = self.expect_success(listed, "bookings")
        if listed.data is not None:
            failures.extend(self.validator.validate_get_bookings(listed.data, query))
        return self.result(failures)


class BookingListSupplierReferenceScenario(BookingScenario):
    name = "List Bookings (Supplier Reference)"
    description = "List bookings filtered by supplier reference"

    async def validate(self, context: FlowContext) -> ScenarioResult:
        reservation, confirmation = await self.booker(context).create_confirmed_booking(
            "list-supplier-reference"
        )
        failure = self.require_confirmed(reservation, confirmation)
        if failure is not None:
            return self.result([failure])

        supplier_reference = confirmation.data.supplier_reference
        if not supplier_reference:
            return self.result(
                [critical("booking.supplierReference", "booking.supplierReference is missing")]
            )

        query = GetBookingsQuery(supplier_reference=supplier_reference)
        listed = await context.client.get_bookings(query)

        failures = self.expect_success(listed, "bookings")
        if listed.data is not None:
            failures.extend(self.validator.validate_get_bookings(listed.data, query))
        return self.result(failures)


class BookingListBadRequestScenario(BookingScenario):
    name = "List Bookings Bad Request"
    description = "List bookings without any filter and expect BAD_REQUEST"

    async def validate(self, context: FlowContext) -> ScenarioResult:
        result = await context.client.get_bookings()
        return self.result(self.expect_error(result, 400, "BAD_REQUEST"))


class BookingListFlow(BaseFlow):
    name = "List Bookings"
    docs = f"{DOCS_URL}#get-bookings"

    def scenarios(self) -> list[Scenario]:
        return [
            BookingListResellerReferenceScenario(),
            BookingListSupplierReferenceScenario(),
            BookingListBadRequestScenario(),
        ]

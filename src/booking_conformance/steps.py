"""Session scenarios and their steps.

A certification session walks through these scenarios one step at a time.
Questions resolve their expected answers from the target API, so the table
is built once at startup by ``build_scenarios`` around a client.

Scenarios:
    basic          supplier -> products                (optional: pricing)
    content        product-content                     (requires: content)
    availability   availability-calendar -> availability-check
    booking        booking-reservation -> booking-confirmation -> booking-cancellation

Booking steps receive what the certified party sent to and got back from
the booking API in ``StepSubmission.payload``::

    {
        "request": {...},          # the request body that was sent
        "booking": {...},          # the booking the API returned
        "previousBooking": {...},  # cancellation only: the booking before cancelling
    }
"""

from typing import Any

from booking_conformance.client import TargetApiClient
from booking_conformance.core.step import Question, SessionScenario, Step
from booking_conformance.models import (
    CapabilityId,
    StepSubmission,
    ValidationFailure,
    ValidationResult,
)
from booking_conformance.resources import (
    Booking,
    CancelBookingRequest,
    ConfirmBookingRequest,
    CreateBookingRequest,
    WireModel,
)
from booking_conformance.validators.booking import BookingEndpointValidator
from booking_conformance.validators.helpers import critical

DOCS_URL = "https://docs.octo.travel/octo-api-core"


class StepId:
    SUPPLIER = "supplier"
    PRODUCTS = "products"
    PRODUCT_CONTENT = "product-content"
    AVAILABILITY_CALENDAR = "availability-calendar"
    AVAILABILITY_CHECK = "availability-check"
    BOOKING_RESERVATION = "booking-reservation"
    BOOKING_CONFIRMATION = "booking-confirmation"
    BOOKING_CANCELLATION = "booking-cancellation"


class ScenarioId:
    BASIC = "basic"
    CONTENT = "content"
    AVAILABILITY = "availability"
    BOOKING = "booking"


# =============================================================================
# Step validators
# =============================================================================


class BookingPayloadValidator:
    """Reads the request and booking of a submission and checks them.

    Subclasses name the request model and implement ``check``.
    """

    request_model: type[WireModel] = WireModel

    def __init__(self, validator: BookingEndpointValidator | None = None) -> None:
        self.validator = validator or BookingEndpointValidator()

    async def validate(self, submission: StepSubmission) -> ValidationResult:
        payload = submission.payload
        if payload.get("request") is None:
            return ValidationResult.from_failures(
                [critical("payload.request", "The request sent to the booking API is missing")]
            )

        request = self.request_model.model_validate(payload["request"])
        booking = Booking.model_validate(payload.get("booking") or {})
        return ValidationResult.from_failures(self.check(booking, request, payload))

    def check(
        self,
        booking: Booking,
        request: Any,
        payload: dict[str, Any],
    ) -> list[ValidationFailure]:
        raise NotImplementedError


class BookingReservationStepValidator(BookingPayloadValidator):
    request_model = CreateBookingRequest

    def check(
        self,
        booking: Booking,
        request: CreateBookingRequest,
        payload: dict[str, Any],
    ) -> list[ValidationFailure]:
        failures = self.validator.validate(
            booking,
            request.product_id,
            request.option_id,
            request.availability_id,
        )
        failures.extend(self.validator.validate_reservation(booking, request))
        return failures


class BookingConfirmationStepValidator(BookingPayloadValidator):
    request_model = ConfirmBookingRequest

    def check(
        self,
        booking: Booking,
        request: ConfirmBookingRequest,
        payload: dict[str, Any],
    ) -> list[ValidationFailure]:
        return self.validator.validate_confirmation(booking, request)


class BookingCancellationStepValidator(BookingPayloadValidator):
    request_model = CancelBookingRequest

    def check(
        self,
        booking: Booking,
        request: CancelBookingRequest,
        payload: dict[str, Any],
    ) -> list[ValidationFailure]:
        previous = Booking.model_validate(payload.get("previousBooking") or {})
        return self.validator.validate_cancel(previous, booking, request)


# =============================================================================
# Scenario table
# =============================================================================


def build_scenarios(
    client: TargetApiClient,
    validator: BookingEndpointValidator | None = None,
) -> list[SessionScenario]:
    """Build the session scenarios, resolving question answers through ``client``."""
    validator = validator or BookingEndpointValidator()

    async def supplier_name() -> str | None:
        result = await client.get_supplier()
        return result.data.name if result.data is not None else None

    async def products_count() -> int | None:
        result = await client.get_products()
        return len(result.data) if result.data is not None else None

    async def first_product_name() -> str | None:
        result = await client.get_products()
        if not result.data:
            return None
        return result.data[0].internal_name

    supplier = Step(
        id=StepId.SUPPLIER,
        name="Get Supplier",
        description="Fetch the supplier and report its name.",
        docs_url=f"{DOCS_URL}/suppliers",
        questions=(
            Question(
                id="supplier-name",
                answer=supplier_name,
                text="What is the name of the supplier?",
            ),
        ),
    )
    products = Step(
        id=StepId.PRODUCTS,
        name="Get Products",
        description="Fetch every product of the supplier.",
        docs_url=f"{DOCS_URL}/products#get-products",
        questions=(
            Question(
                id="products-count",
                answer=products_count,
                text="How many products does the supplier have?",
            ),
        ),
    )
    product_content = Step(
        id=StepId.PRODUCT_CONTENT,
        name="Product Content",
        description="Fetch products with content and report the first product's name.",
        docs_url="https://docs.octo.travel/octo-api-content/products",
        questions=(
            Question(
                id="product-internal-name",
                answer=first_product_name,
                text="What is the internal name of the first product?",
            ),
        ),
    )
    availability_calendar = Step(
        id=StepId.AVAILABILITY_CALENDAR,
        name="Availability Calendar",
        description="Query the availability calendar for a date range.",
        docs_url=f"{DOCS_URL}/availability#availability-calendar",
    )
    availability_check = Step(
        id=StepId.AVAILABILITY_CHECK,
        name="Availability Check",
        description="Check availability for the dates picked from the calendar.",
        docs_url=f"{DOCS_URL}/availability#availability-check",
    )
    booking_reservation = Step(
        id=StepId.BOOKING_RESERVATION,
        name="Booking Reservation",
        description="Create an ON_HOLD reservation.",
        docs_url=f"{DOCS_URL}/bookings#create-booking",
        validators=(BookingReservationStepValidator(validator),),
    )
    booking_confirmation = Step(
        id=StepId.BOOKING_CONFIRMATION,
        name="Booking Confirmation",
        description="Confirm the reservation with contact details.",
        docs_url=f"{DOCS_URL}/bookings#confirm-booking",
        validators=(BookingConfirmationStepValidator(validator),),
    )
    booking_cancellation = Step(
        id=StepId.BOOKING_CANCELLATION,
        name="Booking Cancellation",
        description="Cancel the confirmed booking.",
        docs_url=f"{DOCS_URL}/bookings#cancel-booking",
        validators=(BookingCancellationStepValidator(validator),),
    )

    return [
        SessionScenario(
            id=ScenarioId.BASIC,
            name="Basic",
            description="Discover the supplier and its products.",
            optional_capabilities=frozenset({CapabilityId.PRICING}),
            steps=(supplier, products),
        ),
        SessionScenario(
            id=ScenarioId.CONTENT,
            name="Content",
            description="Read product content.",
            required_capabilities=frozenset({CapabilityId.CONTENT}),
            steps=(product_content,),
        ),
        SessionScenario(
            id=ScenarioId.AVAILABILITY,
            name="Availability",
            description="Find a bookable slot.",
            optional_capabilities=frozenset({CapabilityId.PRICING}),
            steps=(availability_calendar, availability_check),
        ),
        SessionScenario(
            id=ScenarioId.BOOKING,
            name="Booking",
            description="Reserve, confirm and cancel a booking.",
            optional_capabilities=frozenset({CapabilityId.PRICING}),
            steps=(booking_reservation, booking_confirmation, booking_cancellation),
        ),
    ]

"""Creates the bookings that booking scenarios start from.

Every scenario gets its own Booker and its own bookings, so scenarios of a
flow never observe each other's state. Generated reseller references are
derived from the configured prefix and a per-scenario tag, which keeps the
requests identical across runs.
"""

from datetime import UTC, datetime, timedelta

from booking_conformance.client import ApiResult, TargetApiClient
from booking_conformance.config import ConformanceConfig
from booking_conformance.exceptions import ScenarioSetupError
from booking_conformance.observability.logging import get_logger
from booking_conformance.resources import (
    AvailabilityQuery,
    Booking,
    ConfirmBookingRequest,
    Contact,
    CreateBookingRequest,
    UnitItemRequest,
)

logger = get_logger(__name__)

AVAILABILITY_WINDOW_DAYS = 30

DEFAULT_CONTACT = Contact(
    full_name="John Doe",
    first_name="John",
    last_name="Doe",
    email_address="johndoe@email.com",
    phone_number="+44 1234 567890",
    country="GB",
    notes="Test note",
)


class Booker:
    """Booking factory bound to one scenario run.

    Attributes:
        client: Target API client
        config: Run configuration
    """

    def __init__(self, client: TargetApiClient, config: ConformanceConfig) -> None:
        self.client = client
        self.config = config
        self._availability_id: str | None = config.availability_id

    def reseller_reference(self, tag: str) -> str:
        return f"{self.config.reseller_reference_prefix}-{tag}"

    def unit_items(self) -> list[UnitItemRequest]:
        return [UnitItemRequest(unit_id=unit_id) for unit_id in self.config.unit_ids]

    async def availability_id(self) -> str:
        """Return the availability to book, looking one up when none is configured.

        Raises:
            ScenarioSetupError: If the target API offers no available slot
                in the lookup window.
            TargetApiError: If the availability endpoint cannot be reached.
        """
        if self._availability_id is not None:
            return self._availability_id

        today = datetime.now(UTC).date()
        result = await self.client.check_availability(
            AvailabilityQuery(
                product_id=self.config.product_id,
                option_id=self.config.option_id,
                local_date_start=today.isoformat(),
                local_date_end=(today + timedelta(days=AVAILABILITY_WINDOW_DAYS)).isoformat(),
                units=[{"id": unit_id, "quantity": 1} for unit_id in self.config.unit_ids],
            )
        )

        for availability in result.data or []:
            if availability.id and availability.available is not False:
                self._availability_id = availability.id
                logger.debug("booker.availability_resolved", availability_id=availability.id)
                return availability.id

        raise ScenarioSetupError(
            f"No availability found for product {self.config.product_id} "
            f"option {self.config.option_id} (status {result.status_code})"
        )

    async def reservation_request(
        self,
        tag: str,
        notes: str | None = None,
    ) -> CreateBookingRequest:
        return CreateBookingRequest(
            product_id=self.config.product_id,
            option_id=self.config.option_id,
            availability_id=await self.availability_id(),
            unit_items=self.unit_items(),
            notes=notes,
            expiration_minutes=self.config.expiration_minutes,
            reseller_reference=self.reseller_reference(tag),
        )

    async def create_reservation(
        self,
        tag: str,
        notes: str | None = None,
    ) -> tuple[CreateBookingRequest, ApiResult[Booking]]:
        request = await self.reservation_request(tag, notes=notes)
        return request, await self.client.create_booking(request)

    def confirmation_request(self, tag: str) -> ConfirmBookingRequest:
        return ConfirmBookingRequest(
            reseller_reference=self.reseller_reference(tag),
            contact=DEFAULT_CONTACT,
            email_receipt=False,
        )

    async def create_confirmed_booking(
        self,
        tag: str,
    ) -> tuple[ApiResult[Booking], ApiResult[Booking] | None]:
        """Create a reservation and confirm it.

        Returns:
            The reservation call and the confirmation call. The confirmation
            is None when the reservation did not produce a booking.
        """
        _, reservation = await self.create_reservation(tag)
        if reservation.data is None or reservation.data.uuid is None:
            return reservation, None

        confirmation = await self.client.confirm_booking(
            reservation.data.uuid,
            self.confirmation_request(tag),
        )
        return reservation, confirmation

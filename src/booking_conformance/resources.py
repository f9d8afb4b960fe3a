"""Resources exchanged with the target booking API.

The target API speaks camelCase JSON. Every model here accepts both the wire
names (``unitItems``) and the Python names (``unit_items``), and serializes
back to the wire names with ``to_wire()``.

Resources returned by the target API are untrusted: every field is optional
and unknown fields are kept, so a malformed booking is reported as a failed
check by the validators rather than rejected while parsing.

Examples:
    Parsing a booking returned by the target API::

        booking = Booking.model_validate(
            {"uuid": "b-1", "status": "ON_HOLD", "unitItems": [{"unitId": "adult"}]}
        )
        assert booking.unit_items[0].unit_id == "adult"

    Building a request body::

        body = CreateBookingRequest(
            product_id="p-1",
            option_id="DEFAULT",
            availability_id="2024-06-01T00:00:00+00:00",
            unit_items=[UnitItemRequest(unit_id="adult")],
        )
        body.to_wire()
        # {"productId": "p-1", "optionId": "DEFAULT", ...}
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class BookingStatus(str, Enum):
    """Lifecycle status of a booking."""

    ON_HOLD = "ON_HOLD"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
    PENDING = "PENDING"
    REDEEMED = "REDEEMED"


class WireModel(BaseModel):
    """Base for models that map to camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize to a JSON-ready dict using the wire names, dropping unset values."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Reference(WireModel):
    """A nested ``{"id": ...}`` object such as ``booking.product``."""

    id: str | None = None


class UnitItem(WireModel):
    uuid: str | None = None
    unit_id: str | None = None
    reseller_reference: str | None = None
    supplier_reference: str | None = None
    status: str | None = None


class Contact(WireModel):
    full_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email_address: str | None = None
    phone_number: str | None = None
    country: str | None = None
    notes: str | None = None


class Cancellation(WireModel):
    refund: str | None = None
    reason: str | None = None
    utc_cancelled_at: datetime | None = None


class Booking(WireModel):
    """A booking resource as returned by the target API."""

    id: str | None = None
    uuid: str | None = None
    status: str | None = None
    product_id: str | None = None
    product: Reference | None = None
    option_id: str | None = None
    option: Reference | None = None
    availability_id: str | None = None
    availability: Reference | None = None
    utc_expires_at: datetime | None = None
    unit_items: list[UnitItem] | None = None
    contact: Contact | None = None
    cancellation: Cancellation | None = None
    notes: str | None = None
    reseller_reference: str | None = None
    supplier_reference: str | None = None


class Availability(WireModel):
    id: str | None = None
    local_date_time_start: str | None = None
    status: str | None = None
    available: bool | None = None


class Supplier(WireModel):
    id: str | None = None
    name: str | None = None
    endpoint: str | None = None
    contact: dict[str, Any] | None = None


class Product(WireModel):
    id: str | None = None
    internal_name: str | None = None
    options: list[dict[str, Any]] | None = None


class UnitItemRequest(WireModel):
    unit_id: str


class CreateBookingRequest(WireModel):
    product_id: str
    option_id: str
    availability_id: str
    unit_items: list[UnitItemRequest] | None = None
    notes: str | None = None
    expiration_minutes: int | None = None
    reseller_reference: str | None = None


class ExtendBookingRequest(WireModel):
    expiration_minutes: int | None = None


class ConfirmBookingRequest(WireModel):
    reseller_reference: str | None = None
    contact: Contact | None = None
    unit_items: list[UnitItemRequest] | None = None
    email_receipt: bool | None = None


class UpdateBookingRequest(WireModel):
    reseller_reference: str | None = None
    product_id: str | None = None
    option_id: str | None = None
    availability_id: str | None = None
    expiration_minutes: int | None = None
    contact: Contact | None = None
    unit_items: list[UnitItemRequest] | None = None
    notes: str | None = None


class CancelBookingRequest(WireModel):
    reason: str | None = None


class GetBookingsQuery(WireModel):
    reseller_reference: str | None = None
    supplier_reference: str | None = None
    local_date: str | None = None
    local_date_start: str | None = None
    local_date_end: str | None = None
    product_id: str | None = None
    option_id: str | None = None


class AvailabilityQuery(WireModel):
    product_id: str
    option_id: str
    local_date_start: str | None = None
    local_date_end: str | None = None
    units: list[dict[str, Any]] | None = Field(default=None)

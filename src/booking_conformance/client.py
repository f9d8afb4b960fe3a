"""Asynchronous client for the booking API under test.

The target API is untrusted. The client never retries and never hides a
failure:

- a transport failure (connection refused, timeout) raises TargetApiError
- a non-2xx response is returned as an ApiResult with ``data=None`` so the
  scenario can check the error body
- a 2xx response whose body cannot be read as the expected resource raises
  TargetApiError

Scenarios catch TargetApiError at their boundary and report it as a CRITICAL
failure.

Examples:
    Creating a reservation::

        async with TargetApiClient.from_config(config) as client:
            result = await client.create_booking(
                CreateBookingRequest(
                    product_id="p-1",
                    option_id="DEFAULT",
                    availability_id="a-1",
                    unit_items=[UnitItemRequest(unit_id="adult")],
                )
            )
            if result.data is None:
                print(result.status_code, result.error_code)
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from booking_conformance.config import ConformanceConfig
from booking_conformance.exceptions import TargetApiError
from booking_conformance.observability.logging import get_logger
from booking_conformance.resources import (
    Availability,
    AvailabilityQuery,
    Booking,
    CancelBookingRequest,
    ConfirmBookingRequest,
    CreateBookingRequest,
    ExtendBookingRequest,
    GetBookingsQuery,
    Product,
    Supplier,
    UpdateBookingRequest,
)

logger = get_logger(__name__)

T = TypeVar("T")

_bookings = TypeAdapter(list[Booking])
_products = TypeAdapter(list[Product])
_availabilities = TypeAdapter(list[Availability])


@dataclass
class ApiResult(Generic[T]):
    """One call to the target API.

    Attributes:
        method: HTTP method.
        url: Full request URL.
        status_code: HTTP status code.
        body: Decoded JSON body, or the raw text when it is not JSON.
        data: Parsed resource for 2xx responses, None otherwise.
    """

    method: str
    url: str
    status_code: int
    body: Any
    data: T | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def error_code(self) -> str | None:
        """The ``error`` field of an error body, e.g. ``INVALID_OPTION_ID``."""
        if isinstance(self.body, dict):
            error = self.body.get("error")
            return str(error) if error is not None else None
        return None


class TargetApiClient:
    """Async client for the booking API under test.

    Attributes:
        base_url: Base URL of the target API
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_seconds,
            headers={"content-type": "application/json", **(headers or {})},
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: ConformanceConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "TargetApiClient":
        return cls(
            base_url=config.target_base_url,
            timeout_seconds=config.request_timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "TargetApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def get_supplier(self) -> ApiResult[Supplier]:
        return await self._request("GET", "/supplier", Supplier.model_validate)

    async def get_products(self) -> ApiResult[list[Product]]:
        return await self._request("GET", "/products", _products.validate_python)

    async def check_availability(self, query: AvailabilityQuery) -> ApiResult[list[Availability]]:
        return await self._request(
            "POST",
            "/availability",
            _availabilities.validate_python,
            json=query.to_wire(),
        )

    async def create_booking(self, request: CreateBookingRequest) -> ApiResult[Booking]:
        return await self._request("POST", "/bookings", Booking.model_validate, json=request.to_wire())

    async def extend_booking(self, uuid: str, request: ExtendBookingRequest) -> ApiResult[Booking]:
        return await self._request(
            "POST",
            f"/bookings/{uuid}/extend",
            Booking.model_validate,
            json=request.to_wire(),
        )

    async def confirm_booking(self, uuid: str, request: ConfirmBookingRequest) -> ApiResult[Booking]:
        return await self._request(
            "POST",
            f"/bookings/{uuid}/confirm",
            Booking.model_validate,
            json=request.to_wire(),
        )

    async def update_booking(self, uuid: str, request: UpdateBookingRequest) -> ApiResult[Booking]:
        return await self._request(
            "PATCH",
            f"/bookings/{uuid}",
            Booking.model_validate,
            json=request.to_wire(),
        )

    async def cancel_booking(self, uuid: str, request: CancelBookingRequest) -> ApiResult[Booking]:
        return await self._request(
            "POST",
            f"/bookings/{uuid}/cancel",
            Booking.model_validate,
            json=request.to_wire(),
        )

    async def get_booking(self, uuid: str) -> ApiResult[Booking]:
        return await self._request("GET", f"/bookings/{uuid}", Booking.model_validate)

    async def get_bookings(self, query: GetBookingsQuery | None = None) -> ApiResult[list[Booking]]:
        params = query.to_wire() if query is not None else None
        return await self._request("GET", "/bookings", _bookings.validate_python, params=params)

    async def _request(
        self,
        method: str,
        path: str,
        parse: Callable[[Any], T],
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> ApiResult[T]:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            logger.warning("target.request_failed", method=method, url=url, error=str(e))
            raise TargetApiError(
                message=f"{method} {url} failed: {e}",
                method=method,
                url=url,
                cause=e,
            ) from e

        try:
            body: Any = response.json()
        except ValueError:
            body = response.text

        logger.debug("target.response", method=method, url=url, status_code=response.status_code)

        result: ApiResult[T] = ApiResult(
            method=method,
            url=str(response.request.url),
            status_code=response.status_code,
            body=body,
        )
        if not result.ok:
            return result

        try:
            result.data = parse(body)
        except ValidationError as e:
            raise TargetApiError(
                message=f"{method} {url} returned an unreadable body: {e}",
                method=method,
                url=url,
                cause=e,
            ) from e

        return result

"""
Pytest configuration and shared fixtures for booking_conformance tests.

FakeBookingApi is an in-process booking API served through
httpx.MockTransport. It implements the booking lifecycle correctly and
deterministically; tests break it on purpose through ``mutations`` (rewrite
the booking returned by one operation) and ``unreachable`` (raise a
transport error for one operation).
"""

import json
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
import pytest

from booking_conformance.client import TargetApiClient
from booking_conformance.config import ConformanceConfig

PRODUCT_ID = "p-1"
OPTION_ID = "DEFAULT"
AVAILABILITY_ID = "2030-01-01T09:00:00+00:00"
BASE_TIME = datetime(2030, 1, 1, 8, 0, tzinfo=UTC)


def _error(error: str, message: str) -> httpx.Response:
    return httpx.Response(400, json={"error": error, "errorMessage": message})


class FakeBookingApi:
    """A conforming booking API with injectable faults."""

    def __init__(self) -> None:
        self.bookings: dict[str, dict[str, Any]] = {}
        self.mutations: dict[str, Callable[[dict[str, Any]], None]] = {}
        self.unreachable: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self._counter = 0

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        parts = [part for part in request.url.path.split("/") if part]
        body = json.loads(request.content) if request.content else {}
        self.calls.append((method, request.url.path))

        if parts == ["supplier"] and method == "GET":
            return self._respond("supplier", {"id": "s-1", "name": "Acme Tours"})
        if parts == ["products"] and method == "GET":
            return self._respond(
                "products",
                [
                    {"id": PRODUCT_ID, "internalName": "Walking Tour", "options": [{"id": OPTION_ID}]},
                    {"id": "p-2", "internalName": "Boat Tour", "options": [{"id": OPTION_ID}]},
                ],
            )
        if parts == ["availability"] and method == "POST":
            return self._respond(
                "availability",
                [{"id": AVAILABILITY_ID, "status": "AVAILABLE", "available": True}],
            )
        if parts == ["bookings"] and method == "POST":
            return self._create(body)
        if parts == ["bookings"] and method == "GET":
            return self._list(request.url.params)
        if len(parts) >= 2 and parts[0] == "bookings":
            booking = self.bookings.get(parts[1])
            if booking is None:
                return _error("INVALID_BOOKING_UUID", f"Invalid booking uuid {parts[1]}")
            action = parts[2] if len(parts) == 3 else None
            if action == "extend" and method == "POST":
                return self._extend(booking, body)
            if action == "confirm" and method == "POST":
                return self._confirm(booking, body)
            if action == "cancel" and method == "POST":
                return self._cancel(booking, body)
            if action is None and method == "PATCH":
                return self._update(booking, body)
            if action is None and method == "GET":
                return self._respond("get", booking)

        return httpx.Response(404, json={"error": "NOT_FOUND"})

    def _respond(self, operation: str, payload: Any) -> httpx.Response:
        if operation in self.unreachable:
            raise httpx.ConnectError(f"{operation} is unreachable")
        payload = json.loads(json.dumps(payload))
        mutate = self.mutations.get(operation)
        if mutate is not None:
            mutate(payload)
        return httpx.Response(200, json=payload)

    def _unit_items(self, uuid: str, requested: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [
            {"uuid": f"{uuid}-unit-{i}", "unitId": item["unitId"], "status": "ON_HOLD"}
            for i, item in enumerate(requested)
        ]

    def _create(self, body: dict[str, Any]) -> httpx.Response:
        if body.get("productId") != PRODUCT_ID:
            return _error("INVALID_PRODUCT_ID", "The productId was missing or invalid")
        if body.get("optionId") != OPTION_ID:
            return _error("INVALID_OPTION_ID", "The optionId was missing or invalid")

        self._counter += 1
        uuid = f"booking-{self._counter}"
        booking = {
            "id": uuid,
            "uuid": uuid,
            "status": "ON_HOLD",
            "productId": body["productId"],
            "product": {"id": body["productId"]},
            "optionId": body["optionId"],
            "option": {"id": body["optionId"]},
            "availabilityId": body.get("availabilityId"),
            "availability": {"id": body.get("availabilityId")},
            "utcExpiresAt": (
                BASE_TIME + timedelta(minutes=body.get("expirationMinutes") or 30)
            ).isoformat(),
            "unitItems": self._unit_items(uuid, body.get("unitItems") or []),
            "notes": body.get("notes"),
            "resellerReference": body.get("resellerReference"),
            "supplierReference": f"SR-{self._counter}",
            "contact": {},
            "cancellation": None,
        }
        self.bookings[uuid] = booking
        return self._respond("create", booking)

    def _extend(self, booking: dict[str, Any], body: dict[str, Any]) -> httpx.Response:
        expires_at = datetime.fromisoformat(booking["utcExpiresAt"])
        minutes = body.get("expirationMinutes") or 30
        booking["utcExpiresAt"] = (expires_at + timedelta(minutes=minutes)).isoformat()
        return self._respond("extend", booking)

    def _confirm(self, booking: dict[str, Any], body: dict[str, Any]) -> httpx.Response:
        booking["status"] = "CONFIRMED"
        booking["resellerReference"] = body.get("resellerReference", booking["resellerReference"])
        booking["contact"] = body.get("contact") or {}
        if body.get("unitItems") is not None:
            booking["unitItems"] = self._unit_items(booking["uuid"], body["unitItems"])
        return self._respond("confirm", booking)

    def _update(self, booking: dict[str, Any], body: dict[str, Any]) -> httpx.Response:
        for key in ("resellerReference", "notes", "contact"):
            if key in body:
                booking[key] = body[key]
        if "unitItems" in body:
            booking["unitItems"] = self._unit_items(booking["uuid"], body["unitItems"])
        return self._respond("update", booking)

    def _cancel(self, booking: dict[str, Any], body: dict[str, Any]) -> httpx.Response:
        booking["status"] = "EXPIRED" if booking["status"] == "ON_HOLD" else "CANCELLED"
        booking["cancellation"] = {"refund": "FULL", "reason": body.get("reason")}
        return self._respond("cancel", booking)

    def _list(self, params: httpx.QueryParams) -> httpx.Response:
        reseller_reference = params.get("resellerReference")
        supplier_reference = params.get("supplierReference")
        if reseller_reference is None and supplier_reference is None:
            return _error("BAD_REQUEST", "At least one filter is required")

        bookings = [
            booking
            for booking in self.bookings.values()
            if (reseller_reference is None or booking["resellerReference"] == reseller_reference)
            and (supplier_reference is None or booking["supplierReference"] == supplier_reference)
        ]
        return self._respond("list", bookings)


@pytest.fixture
def config() -> ConformanceConfig:
    """Configuration pointing at the fake booking API."""
    return ConformanceConfig(
        target_base_url="http://target.test",
        product_id=PRODUCT_ID,
        option_id=OPTION_ID,
        unit_ids=["adult", "child"],
        max_concurrent_scenarios=2,
        json_logs=False,
    )


@pytest.fixture
def fake_api() -> FakeBookingApi:
    """Provide a fresh conforming booking API."""
    return FakeBookingApi()


@pytest.fixture
def client(fake_api: FakeBookingApi, config: ConformanceConfig) -> TargetApiClient:
    """Client wired to the fake booking API."""
    return TargetApiClient.from_config(config, transport=fake_api.transport())

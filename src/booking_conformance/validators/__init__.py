"""Domain validators for target API responses."""

from booking_conformance.validators.booking import BookingEndpointValidator

__all__ = ["BookingEndpointValidator"]

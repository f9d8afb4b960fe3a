"""
Conformance engine for booking APIs.

This package certifies that a booking API implements the reservation,
confirmation, update, cancellation and lookup operations correctly, either
through stateless flows run against the API or through multi-step sessions
driven by the certified party.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]

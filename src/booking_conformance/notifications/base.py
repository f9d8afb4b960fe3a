"""Live-notification channel protocol.

A channel pushes a ValidationResult to whoever watches a session. Delivery
is at-most-once with no acknowledgement; the processor treats a failed push
as logged and forgotten.
"""

from typing import Protocol, runtime_checkable

from booking_conformance.models import ValidationResult


@runtime_checkable
class ResultChannel(Protocol):
    """Push target for validation results, keyed by session id."""

    async def send_validation_result(self, session_id: str, result: ValidationResult) -> None:
        """Push ``result`` to the watchers of ``session_id``.

        Implementations may raise on delivery failure; the caller does not
        retry.
        """
        ...

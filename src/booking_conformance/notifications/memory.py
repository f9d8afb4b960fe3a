"""In-memory result channel.

Keeps every pushed result per session id. Useful for single-process runs
and for inspecting what a session's watchers would have received.
"""

from booking_conformance.models import ValidationResult
from booking_conformance.notifications.base import ResultChannel


class MemoryResultChannel(ResultChannel):
    def __init__(self) -> None:
        self._sent: dict[str, list[ValidationResult]] = {}

    async def send_validation_result(self, session_id: str, result: ValidationResult) -> None:
        self._sent.setdefault(session_id, []).append(result.model_copy(deep=True))

    def sent(self, session_id: str) -> list[ValidationResult]:
        """Return the results pushed for ``session_id``, oldest first."""
        return list(self._sent.get(session_id, []))

"""Session store protocol for the conformance engine.

This module defines the interface every session store backend implements.
The store offers plain CRUD on sessions by id. Read-modify-write sequencing
is the caller's responsibility: ``SessionStepProcessor`` reads a session,
checks the transition and writes the new progress fields in one ``update``
call.

Every write increments ``Session.version``. Passing ``expected_version`` to
``update`` turns the write into a compare-and-set, so a writer that acted on
an outdated session gets a ``StaleSessionError`` instead of silently
overwriting a concurrent submission (last-write-wins).

Examples:
    Implementing a custom store::

        class MySessionStore:
            async def get(self, session_id: str) -> Session | None:
                row = await self.db.fetch_session(session_id)
                return None if row is None else Session.model_validate(row)
            ...

    Using a store::

        session = await store.create(name="Acme certification")
        session = await store.update(
            session.id,
            expected_version=session.version,
            current_step="supplier",
        )
"""

from typing import Any, Protocol, runtime_checkable

from booking_conformance.models import CapabilityId, Session


@runtime_checkable
class SessionStore(Protocol):
    """Protocol defining the interface for session storage backends.

    Atomicity:
        ``update`` must apply all changes and the version increment as one
        atomic write. When ``expected_version`` is given the comparison and
        the write must happen atomically as well.

    Error Handling:
        Methods raise ``SessionNotFoundError`` for unknown ids,
        ``StaleSessionError`` for failed version checks and ``StorageError``
        for backend failures. Backend-specific exceptions must not leak.
    """

    async def create(
        self,
        name: str = "",
        capabilities: list[CapabilityId] | None = None,
        session_id: str | None = None,
    ) -> Session:
        """Create and persist a new session with no progress.

        Args:
            name: Human-readable session name.
            capabilities: Granted capabilities, None if not chosen yet.
            session_id: Explicit id; a UUID4 is generated when omitted.

        Returns:
            The stored session at version 0.
        """
        ...

    async def get(self, session_id: str) -> Session | None:
        """Retrieve a session by id, or None when it does not exist."""
        ...

    async def update(
        self,
        session_id: str,
        expected_version: int | None = None,
        **changes: Any,
    ) -> Session:
        """Apply field changes, bump ``updated_at`` and ``version``.

        Args:
            session_id: Id of the session to update.
            expected_version: When given, the write only succeeds if the
                stored version still equals it.
            **changes: Session fields to overwrite (name, capabilities,
                current_scenario, current_step).

        Returns:
            The session as stored after the write.
        """
        ...

    async def list_sessions(self) -> list[Session]:
        """Return every stored session, oldest first."""
        ...

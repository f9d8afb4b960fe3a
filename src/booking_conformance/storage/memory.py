"""In-memory session store with asyncio concurrency control.

This module provides an in-memory implementation of the SessionStore
interface using an asyncio.Lock to make each write atomic.

The MemorySessionStore is suitable for:
    - Single-process deployments
    - Development and testing

Isolation:
    - Sessions are copied on the way in and on the way out, so callers never
      hold a reference to the stored object
    - The lock is held only while a single write is applied

Examples:
    Basic usage::

        store = MemorySessionStore()
        session = await store.create(name="Acme", capabilities=[CapabilityId.PRICING])

        session = await store.update(
            session.id,
            expected_version=session.version,
            current_scenario="basic",
            current_step="supplier",
        )
        assert session.version == 1
"""

import asyncio
import uuid
from datetime import UTC, datetime
from typing import Any

from booking_conformance.exceptions import SessionNotFoundError, StaleSessionError, StorageError
from booking_conformance.models import CapabilityId, Session
from booking_conformance.observability.logging import get_logger
from booking_conformance.storage.base import SessionStore

logger = get_logger(__name__)

UPDATABLE_FIELDS = frozenset({"name", "capabilities", "current_scenario", "current_step"})


class MemorySessionStore(SessionStore):
    """In-memory session store.

    Attributes:
        _sessions: Dictionary mapping session ids to Session objects.
        _lock: Lock serializing writes.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = asyncio.Lock()

    async def create(
        self,
        name: str = "",
        capabilities: list[CapabilityId] | None = None,
        session_id: str | None = None,
    ) -> Session:
        session_id = session_id or str(uuid.uuid4())
        async with self._lock:
            if session_id in self._sessions:
                raise StorageError(f"Session {session_id} already exists")

            now = datetime.now(UTC)
            session = Session(
                id=session_id,
                name=name,
                capabilities=capabilities,
                created_at=now,
                updated_at=now,
            )
            self._sessions[session_id] = session

        logger.info("session.created", session_id=session_id)
        return session.model_copy(deep=True)

    async def get(self, session_id: str) -> Session | None:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        return session.model_copy(deep=True)

    async def update(
        self,
        session_id: str,
        expected_version: int | None = None,
        **changes: Any,
    ) -> Session:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise StorageError(f"Cannot update session fields: {', '.join(sorted(unknown))}")

        async with self._lock:
            stored = self._sessions.get(session_id)
            if stored is None:
                raise SessionNotFoundError(
                    message=f"Session {session_id} not found",
                    session_id=session_id,
                )

            if expected_version is not None and stored.version != expected_version:
                raise StaleSessionError(
                    message=(
                        f"Session {session_id} was modified concurrently "
                        f"(expected version {expected_version}, found {stored.version})"
                    ),
                    session_id=session_id,
                    expected_version=expected_version,
                    actual_version=stored.version,
                )

            updated = stored.model_copy(
                update={
                    **changes,
                    "updated_at": datetime.now(UTC),
                    "version": stored.version + 1,
                },
                deep=True,
            )
            # Re-validate so bad field values never reach the store
            updated = Session.model_validate(updated.model_dump())
            self._sessions[session_id] = updated

        logger.debug("session.updated", session_id=session_id, version=updated.version)
        return updated.model_copy(deep=True)

    async def list_sessions(self) -> list[Session]:
        sessions = sorted(self._sessions.values(), key=lambda s: s.created_at)
        return [session.model_copy(deep=True) for session in sessions]

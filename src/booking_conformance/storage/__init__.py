"""Session stores for the conformance engine.

All stores implement the SessionStore protocol defined in base.py.

Available Stores:
    - MemorySessionStore: In-memory storage with asyncio concurrency
"""

from booking_conformance.storage.base import SessionStore
from booking_conformance.storage.memory import MemorySessionStore

__all__ = [
    "SessionStore",
    "MemorySessionStore",
]

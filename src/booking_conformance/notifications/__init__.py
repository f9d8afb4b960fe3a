"""Live-notification channels for step validation results.

Available Channels:
    - MemoryResultChannel: keeps pushed results in memory
    - WebSocketResultChannel: pushes results to Starlette WebSockets
"""

from booking_conformance.notifications.base import ResultChannel
from booking_conformance.notifications.memory import MemoryResultChannel
from booking_conformance.notifications.websocket import WebSocketResultChannel

__all__ = [
    "ResultChannel",
    "MemoryResultChannel",
    "WebSocketResultChannel",
]

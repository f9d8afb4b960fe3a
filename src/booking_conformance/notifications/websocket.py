"""WebSocket result channel for Starlette applications.

Watchers register their accepted Starlette WebSocket under a session id.
Each pushed result is sent as JSON to every socket watching that session.
A socket that fails to receive is dropped; the remaining sockets still get
the message.

Examples:
    Wiring into a Starlette route::

        channel = WebSocketResultChannel()

        async def watch(websocket: WebSocket) -> None:
            await websocket.accept()
            session_id = websocket.path_params["session_id"]
            channel.register(session_id, websocket)
            try:
                while True:
                    await websocket.receive_text()
            except WebSocketDisconnect:
                channel.unregister(session_id, websocket)

        app = Starlette(routes=[WebSocketRoute("/sessions/{session_id}", watch)])
"""

from starlette.websockets import WebSocket

from booking_conformance.models import ValidationResult
from booking_conformance.notifications.base import ResultChannel
from booking_conformance.observability.logging import get_logger

logger = get_logger(__name__)


class WebSocketResultChannel(ResultChannel):
    """Fans validation results out to the WebSockets watching a session."""

    def __init__(self) -> None:
        self._sockets: dict[str, list[WebSocket]] = {}

    def register(self, session_id: str, websocket: WebSocket) -> None:
        self._sockets.setdefault(session_id, []).append(websocket)

    def unregister(self, session_id: str, websocket: WebSocket) -> None:
        sockets = self._sockets.get(session_id, [])
        if websocket in sockets:
            sockets.remove(websocket)
        if not sockets:
            self._sockets.pop(session_id, None)

    def watchers(self, session_id: str) -> int:
        return len(self._sockets.get(session_id, []))

    async def send_validation_result(self, session_id: str, result: ValidationResult) -> None:
        message = {
            "event": "validation_result",
            "sessionId": session_id,
            "result": result.model_dump(mode="json"),
        }

        for websocket in list(self._sockets.get(session_id, [])):
            try:
                await websocket.send_json(message)
            except Exception as e:
                self.unregister(session_id, websocket)
                logger.warning(
                    "notification.socket_dropped",
                    session_id=session_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )

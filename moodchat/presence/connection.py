"""Connection handles.

The engine talks to clients only through ``ConnectionHandle``; the
websocket-backed implementation adapts a Starlette ``WebSocket``.
"""

import logging
import uuid
from typing import AsyncIterator, Optional, Protocol, Union, runtime_checkable

from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

logger = logging.getLogger(__name__)


class ConnectionClosed(Exception):
    """Raised when writing to a connection that has gone away."""


@runtime_checkable
class ConnectionHandle(Protocol):
    """A duplex, frame-oriented connection to one client."""

    connection_id: str

    @property
    def writable(self) -> bool:
        ...

    async def send(self, frame: dict) -> None:
        ...

    async def close(self, code: int = 1000, reason: str = "") -> None:
        ...

    def frames(self) -> AsyncIterator[Union[str, bytes]]:
        ...


class WebSocketConnection:
    """ConnectionHandle over a Starlette/FastAPI websocket."""

    def __init__(self, websocket: WebSocket, connection_id: Optional[str] = None):
        self.websocket = websocket
        self.connection_id = connection_id or uuid.uuid4().hex[:16]

    @property
    def writable(self) -> bool:
        return (
            self.websocket.application_state == WebSocketState.CONNECTED
            and self.websocket.client_state == WebSocketState.CONNECTED
        )

    async def send(self, frame: dict) -> None:
        try:
            await self.websocket.send_json(frame)
        except (WebSocketDisconnect, RuntimeError, OSError) as exc:
            raise ConnectionClosed(str(exc)) from exc

    async def close(self, code: int = 1000, reason: str = "") -> None:
        if self.websocket.application_state == WebSocketState.DISCONNECTED:
            return
        try:
            await self.websocket.close(code=code, reason=reason)
        except (RuntimeError, OSError) as exc:
            logger.debug("Close on %s ignored: %s", self.connection_id, exc)

    async def frames(self) -> AsyncIterator[Union[str, bytes]]:
        """Yield inbound frames until the peer disconnects.

        Binary frames are passed through undecoded so invalid UTF-8 is
        rejected by the protocol decoder rather than rewritten.
        """
        while self.websocket.application_state == WebSocketState.CONNECTED:
            try:
                message = await self.websocket.receive()
            except RuntimeError:
                return
            if message["type"] == "websocket.disconnect":
                return
            text = message.get("text")
            yield text if text is not None else (message.get("bytes") or b"")


async def deliver(connection: ConnectionHandle, frame: dict) -> bool:
    """Best-effort write of one frame. Returns False if it could not be sent."""
    if not connection.writable:
        return False
    try:
        await connection.send(frame)
    except ConnectionClosed as exc:
        logger.debug("Dropped %s frame to %s: %s", frame.get("type"), connection.connection_id, exc)
        return False
    return True

"""Chat websocket endpoint.

A single endpoint at /ws carries the duplex chat protocol; everything
after ``accept`` is handled by the ChatHub connection loop.
"""

import logging

from fastapi import APIRouter, WebSocket

from moodchat.presence.connection import WebSocketConnection

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat-websocket"])

POLICY_VIOLATION = 1008


@router.websocket("/ws")
async def chat_websocket_endpoint(websocket: WebSocket) -> None:
    """Accept a chat connection and hand it to the hub."""
    settings = websocket.app.state.settings
    hub = websocket.app.state.hub

    origin = websocket.headers.get("origin")
    if settings.is_production and origin not in settings.allowed_ws_origins:
        logger.warning("Rejected connection from unauthorized origin: %s", origin)
        await websocket.close(code=POLICY_VIOLATION, reason="Origin not allowed")
        return

    await websocket.accept()
    await hub.serve(WebSocketConnection(websocket))

"""Chat hub.

Owns the engine's shared services and runs the per-connection loop:
each connection is served by one task that decodes and dispatches its
frames strictly in arrival order.
"""

import logging
from typing import Optional, Union

from moodchat.errors import NotAuthenticated, ProtocolError, ValidationError
from moodchat.logging_config.context import ConnectionContext
from moodchat.persistence.writer import HistoryWriter
from moodchat.presence.broadcaster import PresenceBroadcaster
from moodchat.presence.config import PresenceConfig, SessionState
from moodchat.presence.connection import ConnectionHandle, deliver
from moodchat.presence.groups import GroupDirectory
from moodchat.presence.handshake import SessionHandshake
from moodchat.presence.liveness import LivenessMonitor
from moodchat.presence.protocol import (
    ConnectFrame,
    ErrorFrame,
    MessageFrame,
    PongFrame,
    TypingFrame,
    decode_frame,
)
from moodchat.presence.registry import ConnectionRegistry, Session
from moodchat.presence.router import MessageRouter
from moodchat.sentiment.classifier import LexiconSentimentClassifier, SentimentClassifier

logger = logging.getLogger(__name__)

# Close code sent to connections evicted for missing liveness probes.
GOING_AWAY = 1001


class ChatHub:
    """Presence & message-routing engine for one process."""

    def __init__(
        self,
        config: Optional[PresenceConfig] = None,
        registry: Optional[ConnectionRegistry] = None,
        groups: Optional[GroupDirectory] = None,
        classifier: Optional[SentimentClassifier] = None,
        writer: Optional[HistoryWriter] = None,
    ):
        self.config = config or PresenceConfig()
        self.registry = registry if registry is not None else ConnectionRegistry()
        self.groups = groups if groups is not None else GroupDirectory()
        self.writer = writer
        self.broadcaster = PresenceBroadcaster(self.registry)
        self.router = MessageRouter(
            self.registry,
            self.groups,
            classifier or LexiconSentimentClassifier(),
            writer=writer,
            config=self.config,
        )
        self.monitor = LivenessMonitor(
            self.registry,
            self.evict,
            interval_seconds=self.config.heartbeat_interval_seconds,
        )

    async def serve(self, connection: ConnectionHandle) -> None:
        """Process *connection* until it closes or the handshake rejects it."""
        handshake = SessionHandshake(connection, self.registry, self.broadcaster)
        with ConnectionContext(connection_id=connection.connection_id) as ctx:
            logger.debug("Connection opened")
            try:
                async for raw in connection.frames():
                    await self.dispatch(handshake, raw, ctx)
                    if handshake.state is SessionState.CLOSED:
                        break
            finally:
                await handshake.close()
                logger.debug("Connection closed")

    async def dispatch(
        self,
        handshake: SessionHandshake,
        raw: Union[str, bytes],
        ctx: Optional[ConnectionContext] = None,
    ) -> None:
        """Decode one raw frame and act on it according to the handshake state."""
        try:
            frame = decode_frame(raw)

            if isinstance(frame, ConnectFrame):
                session = await handshake.connect(frame)
                if session is not None and ctx is not None:
                    ctx.bind_username(session.username)
                return

            session = handshake.require_session()
            if isinstance(frame, PongFrame):
                session.acknowledge_probe()
            elif isinstance(frame, MessageFrame):
                await self.router.route(session, frame)
            elif isinstance(frame, TypingFrame):
                await self.router.relay_typing(session, frame)
        except (ProtocolError, NotAuthenticated, ValidationError) as exc:
            logger.info("Frame rejected [%s]: %s", exc.error_code.value, exc.message)
            await deliver(handshake.connection, ErrorFrame(message=exc.message).to_wire())

    async def evict(self, session: Session) -> bool:
        """Terminate *session* as if its connection had closed.

        Returns True if the session was still registered. The identity
        check in ``unregister`` keeps a concurrent close, or a newer
        session under the same username, from being affected twice.
        """
        removed = self.registry.unregister(session.username, session)
        await session.connection.close(code=GOING_AWAY, reason="Liveness timeout")
        if removed:
            await self.broadcaster.broadcast()
        return removed

    async def start(self) -> None:
        if self.writer is not None:
            self.writer.start()
        self.monitor.start()

    async def stop(self) -> None:
        await self.monitor.stop()
        if self.writer is not None:
            await self.writer.stop()

"""Session handshake.

Per-connection state machine gating access to routing:

    UNAUTHENTICATED --connect ok--> AUTHENTICATED
    UNAUTHENTICATED --bad/taken username--> CLOSED
    any --close event--> CLOSED
"""

import logging
from typing import Optional

from moodchat.errors import DuplicateUsername, NotAuthenticated, ValidationError
from moodchat.presence.broadcaster import PresenceBroadcaster
from moodchat.presence.config import SessionState
from moodchat.presence.connection import ConnectionHandle, deliver
from moodchat.presence.protocol import ConnectFrame, ConnectResponseFrame, ErrorFrame
from moodchat.presence.registry import ConnectionRegistry, Session

logger = logging.getLogger(__name__)


class SessionHandshake:
    """Tracks one connection's authentication state."""

    def __init__(
        self,
        connection: ConnectionHandle,
        registry: ConnectionRegistry,
        broadcaster: PresenceBroadcaster,
    ):
        self.connection = connection
        self.state = SessionState.UNAUTHENTICATED
        self.session: Optional[Session] = None
        self._registry = registry
        self._broadcaster = broadcaster

    async def connect(self, frame: ConnectFrame) -> Optional[Session]:
        """Handle a ``connect`` frame.

        Returns the new Session on success. On a missing or taken
        username the client gets an error frame, the connection is
        closed and None is returned.

        Raises:
            ValidationError: ``connect`` on an already authenticated connection.
        """
        if self.state is SessionState.AUTHENTICATED:
            raise ValidationError("Already connected", field="type")
        if self.state is SessionState.CLOSED:
            return None

        username = frame.username.strip() if isinstance(frame.username, str) else ""
        if not username:
            await self._reject("Valid username required")
            return None

        try:
            session = self._registry.register(username, self.connection)
        except DuplicateUsername as exc:
            logger.info("Rejected connect for taken username %s", username)
            await self._reject(exc.message)
            return None

        self.session = session
        self.state = SessionState.AUTHENTICATED
        logger.info("%s connected", username)

        await deliver(self.connection, ConnectResponseFrame(username=username).to_wire())
        await self._broadcaster.broadcast()
        return session

    def require_session(self) -> Session:
        """The authenticated Session, or NotAuthenticated."""
        if self.state is not SessionState.AUTHENTICATED or self.session is None:
            raise NotAuthenticated()
        return self.session

    async def close(self) -> bool:
        """Apply the connection-close event. Safe to call more than once.

        Returns True if this call removed the session from the registry.
        """
        self.state = SessionState.CLOSED
        session, self.session = self.session, None
        if session is None:
            return False

        removed = self._registry.unregister(session.username, session)
        if removed:
            logger.info("%s disconnected", session.username)
            await self._broadcaster.broadcast()
        return removed

    async def _reject(self, reason: str) -> None:
        await deliver(self.connection, ErrorFrame(message=reason).to_wire())
        await self.connection.close()
        self.state = SessionState.CLOSED

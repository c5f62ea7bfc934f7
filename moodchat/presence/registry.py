"""Connection registry for tracking authenticated sessions."""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from moodchat.errors import DuplicateUsername
from moodchat.presence.connection import ConnectionHandle

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(eq=False)
class Session:
    """Server-side record of one authenticated connection.

    Compared by identity: a reconnect under the same username is a
    different Session even though every field may match.
    """

    username: str
    connection: ConnectionHandle
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    authenticated: bool = True
    alive: bool = True
    connected_at: datetime = field(default_factory=_utcnow)
    last_pong: datetime = field(default_factory=_utcnow)

    def acknowledge_probe(self) -> None:
        """Record a liveness acknowledgment from the client."""
        self.alive = True
        self.last_pong = _utcnow()


class ConnectionRegistry:
    """Thread-safe map from username to its single active Session.

    All mutations hold the lock; reads copy under the lock so callers
    never observe a half-applied update.
    """

    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def register(self, username: str, connection: ConnectionHandle) -> Session:
        """Insert a new Session for *username*.

        Raises DuplicateUsername if the username already has a session;
        the existing session is left untouched.
        """
        with self._lock:
            if username in self._sessions:
                raise DuplicateUsername(username)
            session = Session(username=username, connection=connection)
            self._sessions[username] = session

        logger.info("Registered session %s for user=%s", session.session_id, username)
        return session

    def unregister(self, username: str, session: Optional[Session] = None) -> bool:
        """Remove the entry for *username*. Returns True if something was removed.

        When *session* is given, the entry is removed only if it is that
        exact Session, so a stale close or eviction can never remove a
        newer session registered under the same name.
        """
        with self._lock:
            current = self._sessions.get(username)
            if current is None:
                return False
            if session is not None and current is not session:
                return False
            del self._sessions[username]

        logger.info("Unregistered session %s for user=%s", current.session_id, username)
        return True

    def lookup(self, username: str) -> Optional[ConnectionHandle]:
        """Return the connection handle for *username*, or None if absent."""
        session = self.get_session(username)
        return session.connection if session else None

    def get_session(self, username: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(username)

    def snapshot(self) -> Tuple[str, ...]:
        """Immutable sequence of currently registered usernames."""
        with self._lock:
            return tuple(self._sessions)

    def sessions(self) -> List[Session]:
        """Copy of all registered sessions."""
        with self._lock:
            return list(self._sessions.values())

    def __contains__(self, username: str) -> bool:
        with self._lock:
            return username in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def get_stats(self) -> dict:
        """Return a summary of registry statistics."""
        sessions = self.sessions()
        return {
            "total_sessions": len(sessions),
            "unresponsive_sessions": sum(1 for s in sessions if not s.alive),
        }

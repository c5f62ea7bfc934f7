"""Presence broadcaster.

Sends the full online-user list to every writable session whenever
registry membership changes. Cost is O(active sessions) per change.
"""

import logging
from typing import List

from moodchat.presence.connection import deliver
from moodchat.presence.protocol import UpdateUsersFrame
from moodchat.presence.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class PresenceBroadcaster:
    """Announces registry membership changes to all active sessions."""

    def __init__(self, registry: ConnectionRegistry):
        self._registry = registry
        self.broadcasts_sent = 0

    def online_users(self) -> List[str]:
        """Registered usernames whose connection is currently writable."""
        writable = {s.username for s in self._registry.sessions() if s.connection.writable}
        return [username for username in self._registry.snapshot() if username in writable]

    async def broadcast(self) -> int:
        """Send ``updateUsers`` to every writable session. Returns the count delivered."""
        users = self.online_users()
        frame = UpdateUsersFrame(users=users).to_wire()

        delivered = 0
        for username in users:
            connection = self._registry.lookup(username)
            if connection is not None and await deliver(connection, frame):
                delivered += 1

        self.broadcasts_sent += 1
        logger.debug("Presence update (%d online) delivered to %d sessions", len(users), delivered)
        return delivered

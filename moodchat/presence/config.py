"""Configuration for the presence & message-routing engine."""

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle states for a connection's handshake."""
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


class TargetKind(str, Enum):
    """How a message recipient is addressed."""
    DIRECT = "direct"
    GROUP = "group"


@dataclass
class PresenceConfig:
    """Policy values for the engine."""

    heartbeat_interval_seconds: float = 30.0
    max_message_length: int = 5000
    group_prefix: str = "group-"

    @classmethod
    def from_settings(cls, settings) -> "PresenceConfig":
        return cls(
            heartbeat_interval_seconds=settings.heartbeat_interval_seconds,
            max_message_length=settings.max_message_length,
            group_prefix=settings.group_prefix,
        )

"""Presence & message-routing engine.

Connection registry, session handshake, message router, liveness
monitor and presence broadcaster, wired together by ChatHub.
"""

from moodchat.presence.broadcaster import PresenceBroadcaster
from moodchat.presence.config import PresenceConfig, SessionState, TargetKind
from moodchat.presence.connection import ConnectionClosed, ConnectionHandle, WebSocketConnection, deliver
from moodchat.presence.groups import GroupDirectory
from moodchat.presence.handshake import SessionHandshake
from moodchat.presence.hub import ChatHub
from moodchat.presence.liveness import LivenessMonitor
from moodchat.presence.registry import ConnectionRegistry, Session
from moodchat.presence.router import MessageRouter

__all__ = [
    # Config
    "PresenceConfig",
    "SessionState",
    "TargetKind",
    # Connections
    "ConnectionClosed",
    "ConnectionHandle",
    "WebSocketConnection",
    "deliver",
    # Registry
    "ConnectionRegistry",
    "Session",
    "GroupDirectory",
    # Engine
    "SessionHandshake",
    "MessageRouter",
    "LivenessMonitor",
    "PresenceBroadcaster",
    "ChatHub",
]

"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path
from typing import List, Optional

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from moodchat.presence.broadcaster import PresenceBroadcaster
from moodchat.presence.connection import ConnectionClosed
from moodchat.presence.groups import GroupDirectory
from moodchat.presence.registry import ConnectionRegistry
from moodchat.settings import get_settings


class FakeConnection:
    """In-memory ConnectionHandle recording everything sent to it."""

    def __init__(self, connection_id: str = "conn", inbound: Optional[List[str]] = None):
        self.connection_id = connection_id
        self.inbound = list(inbound or [])
        self.sent: List[dict] = []
        self.closed = False
        self.close_code: Optional[int] = None
        self.fail_sends = False

    @property
    def writable(self) -> bool:
        return not self.closed

    async def send(self, frame: dict) -> None:
        if self.fail_sends:
            raise ConnectionClosed("peer went away")
        self.sent.append(frame)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.closed = True
        self.close_code = code

    async def frames(self):
        for raw in self.inbound:
            if self.closed:
                return
            yield raw

    def of_type(self, frame_type: str) -> List[dict]:
        return [f for f in self.sent if f.get("type") == frame_type]


@pytest.fixture
def make_connection():
    def _make(connection_id: str = "conn", inbound: Optional[List[str]] = None) -> FakeConnection:
        return FakeConnection(connection_id, inbound)
    return _make


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def broadcaster(registry):
    return PresenceBroadcaster(registry)


@pytest.fixture
def groups():
    return GroupDirectory({
        "group-team": ["alice", "bob", "carol"],
        "group-empty": [],
    })


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; isolate env changes between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

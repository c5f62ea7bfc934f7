"""Tests for the HTTP endpoints and the chat websocket."""

import asyncio
import time
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from moodchat.api import create_app
from moodchat.errors import StartupFailure
from moodchat.persistence import ChatMessage, InMemoryHistoryStore, PairKey
from moodchat.settings import Settings
from moodchat.sentiment import Mood


def _settings(**overrides):
    values = {
        "persistence_backend": "memory",
        "groups": {"group-team": ["alice", "bob", "carol"]},
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(**values)


def _seed(store, key, count):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for i in range(count):
        message = ChatMessage(
            sender=key.owner,
            recipient=key.peer,
            body=f"m{i}",
            mood=Mood.NEUTRAL,
            timestamp=base + timedelta(seconds=i),
        )
        asyncio.run(store.append(key, message))


# ── Health ───────────────────────────────────────────────────────────


class TestHealth:
    """Tests for the health endpoint."""

    def test_health(self):
        with TestClient(create_app(_settings())) as client:
            resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["database"] == "connected"
        assert data["activeConnections"] == 0
        assert "timestamp" in data

    def test_request_id_echoed(self):
        with TestClient(create_app(_settings())) as client:
            resp = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert resp.headers["x-request-id"] == "req-123"

    def test_request_id_generated(self):
        with TestClient(create_app(_settings())) as client:
            resp = client.get("/health")
        assert resp.headers["x-request-id"]


# ── History ──────────────────────────────────────────────────────────


class TestHistoryEndpoint:
    """Tests for GET /history and GET /contacts."""

    def setup_method(self):
        self.store = InMemoryHistoryStore()
        self.app = create_app(_settings(), store=self.store)

    def test_missing_parameters(self):
        with TestClient(self.app) as client:
            for query in ("", "?user=alice", "?peer=bob"):
                resp = client.get(f"/history{query}")
                assert resp.status_code == 400
                assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_unknown_user_is_empty(self):
        with TestClient(self.app) as client:
            resp = client.get("/history", params={"user": "ghost", "peer": "bob"})
        assert resp.status_code == 200
        assert resp.json() == []

    def test_returns_history_oldest_first(self):
        _seed(self.store, PairKey("alice", "bob"), 3)
        with TestClient(self.app) as client:
            resp = client.get("/history", params={"user": "alice", "peer": "bob"})
        assert resp.status_code == 200
        entries = resp.json()
        assert [e["message"] for e in entries] == ["m0", "m1", "m2"]
        assert entries[0]["sender"] == "alice"
        assert entries[0]["recipient"] == "bob"
        assert entries[0]["mood"] == "neutral"
        assert entries[0]["timestamp"].startswith("2024-01-01T00:00:00")

    def test_limit_returns_most_recent(self):
        _seed(self.store, PairKey("alice", "bob"), 10)
        with TestClient(self.app) as client:
            resp = client.get("/history", params={"user": "alice", "peer": "bob", "limit": 3})
        assert [e["message"] for e in resp.json()] == ["m7", "m8", "m9"]

    def test_limit_is_clamped(self):
        _seed(self.store, PairKey("alice", "bob"), 5)
        app = create_app(_settings(history_max_limit=2), store=self.store)
        with TestClient(app) as client:
            resp = client.get("/history", params={"user": "alice", "peer": "bob", "limit": 50})
        assert len(resp.json()) == 2

    def test_default_limit(self):
        _seed(self.store, PairKey("alice", "bob"), 5)
        app = create_app(_settings(history_default_limit=4), store=self.store)
        with TestClient(app) as client:
            resp = client.get("/history", params={"user": "alice", "peer": "bob"})
        assert len(resp.json()) == 4

    def test_non_positive_limit_returns_one(self):
        _seed(self.store, PairKey("alice", "bob"), 3)
        with TestClient(self.app) as client:
            resp = client.get("/history", params={"user": "alice", "peer": "bob", "limit": 0})
        assert [e["message"] for e in resp.json()] == ["m2"]

    def test_contacts(self):
        _seed(self.store, PairKey("alice", "bob"), 1)
        _seed(self.store, PairKey("alice", "group-team"), 1)
        with TestClient(self.app) as client:
            assert client.get("/contacts", params={"user": "alice"}).json() == ["bob", "group-team"]
            assert client.get("/contacts", params={"user": "zed"}).json() == []
            assert client.get("/contacts").status_code == 400


# ── WebSocket ────────────────────────────────────────────────────────


class TestChatWebSocket:
    """End-to-end tests over the /ws endpoint."""

    def test_connect_and_presence(self):
        with TestClient(create_app(_settings())) as client:
            with client.websocket_connect("/ws") as alice:
                alice.send_json({"type": "connect", "username": "alice"})
                assert alice.receive_json()["type"] == "connect-response"
                assert alice.receive_json() == {"type": "updateUsers", "users": ["alice"]}

                with client.websocket_connect("/ws") as bob:
                    bob.send_json({"type": "connect", "username": "bob"})
                    assert bob.receive_json()["type"] == "connect-response"
                    assert bob.receive_json() == {"type": "updateUsers", "users": ["alice", "bob"]}
                    assert alice.receive_json() == {"type": "updateUsers", "users": ["alice", "bob"]}

                assert alice.receive_json() == {"type": "updateUsers", "users": ["alice"]}

    def test_direct_message_with_mood(self):
        with TestClient(create_app(_settings())) as client:
            with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
                alice.send_json({"type": "connect", "username": "alice"})
                alice.receive_json()
                alice.receive_json()
                bob.send_json({"type": "connect", "username": "bob"})
                bob.receive_json()
                bob.receive_json()
                alice.receive_json()

                alice.send_json({"type": "message", "recipient": "bob", "message": "I love this!"})
                frame = bob.receive_json()

        assert frame["type"] == "message"
        assert frame["sender"] == "alice"
        assert frame["recipient"] == "bob"
        assert frame["message"] == "I love this!"
        assert frame["mood"] == "happy"

    def test_duplicate_username(self):
        with TestClient(create_app(_settings())) as client:
            with client.websocket_connect("/ws") as first:
                first.send_json({"type": "connect", "username": "alice"})
                first.receive_json()
                first.receive_json()

                with client.websocket_connect("/ws") as second:
                    second.send_json({"type": "connect", "username": "alice"})
                    assert second.receive_json() == {"type": "error", "message": "Username already taken"}
                    with pytest.raises(WebSocketDisconnect):
                        second.receive_json()

                resp = client.get("/health")
                assert resp.json()["activeConnections"] == 1

    def test_message_before_connect(self):
        with TestClient(create_app(_settings())) as client:
            with client.websocket_connect("/ws") as ws:
                ws.send_json({"type": "message", "recipient": "bob", "message": "hi"})
                assert ws.receive_json() == {"type": "error", "message": "Not authenticated"}
                ws.send_text("not json")
                assert ws.receive_json() == {"type": "error", "message": "Invalid message format"}

    def test_invalid_utf8_binary_frame(self):
        with TestClient(create_app(_settings())) as client:
            with client.websocket_connect("/ws") as ws:
                ws.send_json({"type": "connect", "username": "alice"})
                ws.receive_json()
                ws.receive_json()
                ws.send_bytes(b'{"type": "message", "recipient": "bob", "message": "\xff"}')
                assert ws.receive_json() == {"type": "error", "message": "Invalid message format"}
                ws.send_bytes(b'{"type": "pong"}')
                ws.send_text("nope")
                assert ws.receive_json() == {"type": "error", "message": "Invalid message format"}

    def test_group_message_excludes_sender(self):
        with TestClient(create_app(_settings())) as client:
            with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
                alice.send_json({"type": "connect", "username": "alice"})
                alice.receive_json()
                alice.receive_json()
                bob.send_json({"type": "connect", "username": "bob"})
                bob.receive_json()
                bob.receive_json()
                alice.receive_json()

                alice.send_json({"type": "message", "recipient": "group-team", "message": "standup"})
                frame = bob.receive_json()
                # A follow-up direct message proves alice got nothing in between.
                bob.send_json({"type": "message", "recipient": "alice", "message": "ok"})
                reply = alice.receive_json()

        assert frame["recipient"] == "group-team"
        assert frame["sender"] == "alice"
        assert reply["sender"] == "bob"
        assert reply["message"] == "ok"

    def test_messages_are_persisted(self):
        store = InMemoryHistoryStore()
        with TestClient(create_app(_settings(), store=store)) as client:
            with client.websocket_connect("/ws") as alice:
                alice.send_json({"type": "connect", "username": "alice"})
                alice.receive_json()
                alice.receive_json()
                alice.send_json({"type": "message", "recipient": "bob", "message": "first"})
                alice.send_json({"type": "message", "recipient": "bob", "message": "second"})

                entries = []
                deadline = time.monotonic() + 5
                while len(entries) < 2 and time.monotonic() < deadline:
                    entries = client.get("/history", params={"user": "bob", "peer": "alice"}).json()
                    time.sleep(0.01)

        assert [e["message"] for e in entries] == ["first", "second"]

    def test_production_rejects_unknown_origin(self):
        app = create_app(_settings(environment="production"))
        with TestClient(app) as client:
            with pytest.raises(WebSocketDisconnect) as exc_info:
                with client.websocket_connect("/ws", headers={"origin": "http://evil.example"}):
                    pass
        assert exc_info.value.code == 1008

    def test_production_accepts_allowed_origin(self):
        app = create_app(_settings(environment="production"))
        with TestClient(app) as client:
            with client.websocket_connect("/ws", headers={"origin": "http://localhost:8000"}) as ws:
                ws.send_json({"type": "connect", "username": "alice"})
                assert ws.receive_json()["type"] == "connect-response"


class TestLifespan:
    """Tests for startup and shutdown wiring."""

    def test_unreachable_store_aborts_startup(self, tmp_path):
        url = f"sqlite+aiosqlite:///{tmp_path}/no/such/dir/history.db"
        app = create_app(_settings(persistence_backend="sql", database_url=url))
        with pytest.raises(StartupFailure):
            with TestClient(app):
                pass

    def test_engine_tasks_run_while_app_is_up(self):
        app = create_app(_settings())
        with TestClient(app):
            assert app.state.hub.monitor.running
            assert app.state.hub.writer.running
        assert not app.state.hub.monitor.running
        assert not app.state.hub.writer.running

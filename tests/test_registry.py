"""Tests for the connection registry, session records and group directory."""

import json
import threading

import pytest

from moodchat.errors import DuplicateUsername
from moodchat.presence.config import PresenceConfig, SessionState, TargetKind
from moodchat.presence.groups import GroupDirectory
from moodchat.presence.registry import ConnectionRegistry, Session
from moodchat.settings import Settings


# ── Config Tests ─────────────────────────────────────────────────────


class TestPresenceConfig:
    """Tests for enums and PresenceConfig defaults."""

    def test_session_state_values(self):
        assert SessionState.UNAUTHENTICATED.value == "unauthenticated"
        assert SessionState.AUTHENTICATED.value == "authenticated"
        assert SessionState.CLOSED.value == "closed"
        assert len(SessionState) == 3

    def test_target_kind_values(self):
        assert TargetKind.DIRECT.value == "direct"
        assert TargetKind.GROUP.value == "group"

    def test_default_config(self):
        cfg = PresenceConfig()
        assert cfg.heartbeat_interval_seconds == 30.0
        assert cfg.max_message_length == 5000
        assert cfg.group_prefix == "group-"

    def test_from_settings(self):
        settings = Settings(heartbeat_interval_seconds=5, max_message_length=10, group_prefix="g:")
        cfg = PresenceConfig.from_settings(settings)
        assert cfg.heartbeat_interval_seconds == 5
        assert cfg.max_message_length == 10
        assert cfg.group_prefix == "g:"


# ── ConnectionRegistry Tests ─────────────────────────────────────────


class TestConnectionRegistry:
    """Tests for the connection registry."""

    def test_register(self, registry, make_connection):
        conn = make_connection("c1")
        session = registry.register("alice", conn)
        assert isinstance(session, Session)
        assert session.username == "alice"
        assert session.connection is conn
        assert session.authenticated is True
        assert session.alive is True
        assert registry.lookup("alice") is conn

    def test_register_duplicate_keeps_original(self, registry, make_connection):
        original = make_connection("c1")
        registry.register("alice", original)
        with pytest.raises(DuplicateUsername) as exc_info:
            registry.register("alice", make_connection("c2"))
        assert exc_info.value.message == "Username already taken"
        assert registry.lookup("alice") is original
        assert len(registry) == 1

    def test_lookup_absent(self, registry):
        assert registry.lookup("nobody") is None
        assert registry.get_session("nobody") is None

    def test_unregister(self, registry, make_connection):
        registry.register("alice", make_connection())
        assert registry.unregister("alice") is True
        assert "alice" not in registry
        assert registry.unregister("alice") is False

    def test_unregister_absent_is_noop(self, registry):
        assert registry.unregister("ghost") is False

    def test_unregister_checks_session_identity(self, registry, make_connection):
        old = registry.register("alice", make_connection("old"))
        registry.unregister("alice", old)
        new = registry.register("alice", make_connection("new"))

        # A late removal for the old generation must not touch the new one.
        assert registry.unregister("alice", old) is False
        assert registry.get_session("alice") is new
        assert registry.unregister("alice", new) is True

    def test_snapshot_is_immutable_copy(self, registry, make_connection):
        registry.register("alice", make_connection())
        registry.register("bob", make_connection())
        snap = registry.snapshot()
        assert isinstance(snap, tuple)
        assert set(snap) == {"alice", "bob"}
        registry.unregister("bob")
        assert set(snap) == {"alice", "bob"}
        assert registry.snapshot() == ("alice",)

    def test_sessions_returns_copy(self, registry, make_connection):
        registry.register("alice", make_connection())
        sessions = registry.sessions()
        sessions.clear()
        assert len(registry.sessions()) == 1

    def test_stats(self, registry, make_connection):
        registry.register("alice", make_connection())
        bob = registry.register("bob", make_connection())
        bob.alive = False
        stats = registry.get_stats()
        assert stats["total_sessions"] == 2
        assert stats["unresponsive_sessions"] == 1

    def test_concurrent_register_single_winner(self, registry, make_connection):
        results = []

        def attempt(i):
            try:
                registry.register("alice", make_connection(f"c{i}"))
                results.append(True)
            except DuplicateUsername:
                results.append(False)

        threads = [threading.Thread(target=attempt, args=(i,)) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1
        assert len(registry) == 1


class TestSession:
    """Tests for the session record."""

    def test_acknowledge_probe(self, make_connection):
        session = Session(username="alice", connection=make_connection())
        before = session.last_pong
        session.alive = False
        session.acknowledge_probe()
        assert session.alive is True
        assert session.last_pong >= before

    def test_sessions_compare_by_identity(self, make_connection):
        conn = make_connection()
        a = Session(username="alice", connection=conn, session_id="x")
        b = Session(username="alice", connection=conn, session_id="x")
        assert a != b


# ── GroupDirectory Tests ─────────────────────────────────────────────


class TestGroupDirectory:
    """Tests for the static group directory."""

    def test_members(self, groups):
        assert groups.members("group-team") == frozenset({"alice", "bob", "carol"})

    def test_unknown_group_is_empty(self, groups):
        assert groups.members("group-nope") == frozenset()

    def test_contains_and_ids(self, groups):
        assert "group-team" in groups
        assert groups.group_ids() == ["group-empty", "group-team"]
        assert len(groups) == 2

    def test_source_mapping_changes_do_not_leak(self):
        source = {"group-a": ["alice"]}
        directory = GroupDirectory(source)
        source["group-a"].append("mallory")
        assert directory.members("group-a") == frozenset({"alice"})

    def test_from_file(self, tmp_path):
        path = tmp_path / "groups.json"
        path.write_text(json.dumps({"group-x": ["a", "b"]}))
        directory = GroupDirectory.from_file(str(path))
        assert directory.members("group-x") == frozenset({"a", "b"})

    def test_from_file_rejects_non_object(self, tmp_path):
        path = tmp_path / "groups.json"
        path.write_text("[]")
        with pytest.raises(ValueError):
            GroupDirectory.from_file(str(path))

    def test_from_settings_merges_file_and_inline(self, tmp_path):
        path = tmp_path / "groups.json"
        path.write_text(json.dumps({"group-x": ["a"], "group-y": ["b"]}))
        settings = Settings(groups_file=str(path), groups={"group-y": ["c"]})
        directory = GroupDirectory.from_settings(settings)
        assert directory.members("group-x") == frozenset({"a"})
        assert directory.members("group-y") == frozenset({"c"})

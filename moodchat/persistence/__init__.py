"""History persistence: value objects, adapter protocol, stores, writer."""

from moodchat.persistence.adapter import PersistenceAdapter
from moodchat.persistence.memory import InMemoryHistoryStore
from moodchat.persistence.models import ChatMessage, PairKey, history_keys
from moodchat.persistence.sql import SqlHistoryStore
from moodchat.persistence.writer import HistoryWriter, WriterStats

__all__ = [
    "PersistenceAdapter",
    "InMemoryHistoryStore",
    "ChatMessage",
    "PairKey",
    "history_keys",
    "SqlHistoryStore",
    "HistoryWriter",
    "WriterStats",
    "create_store",
]


def create_store(settings) -> PersistenceAdapter:
    """Build the history store selected by ``settings.persistence_backend``."""
    if settings.persistence_backend == "memory":
        return InMemoryHistoryStore()
    if settings.persistence_backend == "sql":
        return SqlHistoryStore(settings.database_url)
    raise ValueError(f"Unknown persistence backend: {settings.persistence_backend}")

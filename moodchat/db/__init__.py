"""Database package: declarative base, async engine factory, ORM models."""

from moodchat.db.base import Base
from moodchat.db.engine import create_engine_for_url
from moodchat.db.models import ChatMessageRecord

__all__ = [
    "Base",
    "create_engine_for_url",
    "ChatMessageRecord",
]

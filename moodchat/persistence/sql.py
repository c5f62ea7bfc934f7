"""SQLAlchemy-backed history store."""

import logging
from datetime import timezone
from typing import List, Optional

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from moodchat.db.base import Base
from moodchat.db.engine import create_engine_for_url
from moodchat.db.models import ChatMessageRecord
from moodchat.errors import PersistenceFailure, StartupFailure
from moodchat.persistence.models import ChatMessage, PairKey
from moodchat.sentiment.mood import Mood

logger = logging.getLogger(__name__)


def _to_message(record: ChatMessageRecord) -> ChatMessage:
    sent_at = record.sent_at
    # SQLite drops tzinfo on the way back.
    if sent_at.tzinfo is None:
        sent_at = sent_at.replace(tzinfo=timezone.utc)
    try:
        mood = Mood(record.mood)
    except ValueError:
        mood = Mood.NEUTRAL
    return ChatMessage(
        sender=record.sender,
        recipient=record.recipient,
        body=record.body,
        mood=mood,
        timestamp=sent_at,
    )


class SqlHistoryStore:
    """PersistenceAdapter over the ``chat_messages`` table.

    Example::

        store = SqlHistoryStore("sqlite+aiosqlite:///./moodchat.db")
        await store.initialize()
        await store.append(PairKey("alice", "bob"), message)
        history = await store.read(PairKey("alice", "bob"), limit=50)
    """

    def __init__(self, database_url: str = "", engine: Optional[AsyncEngine] = None):
        if engine is None and not database_url:
            raise ValueError("SqlHistoryStore needs a database_url or an engine")
        self._engine = engine or create_engine_for_url(database_url)
        self._session_factory = async_sessionmaker(bind=self._engine, expire_on_commit=False)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def initialize(self) -> None:
        """Create the schema if missing and verify connectivity."""
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            raise StartupFailure(f"History store unavailable at startup: {exc}") from exc
        logger.info("History store ready (%s)", self._engine.url.render_as_string(hide_password=True))

    async def append(self, key: PairKey, message: ChatMessage) -> bool:
        record = ChatMessageRecord(
            owner=key.owner,
            peer=key.peer,
            sender=message.sender,
            recipient=message.recipient,
            body=message.body,
            mood=message.mood.value,
            sent_at=message.timestamp,
        )
        try:
            async with self._session_factory() as session:
                session.add(record)
                await session.commit()
        except SQLAlchemyError as exc:
            logger.error("Append to %s failed: %s", key, exc)
            return False
        return True

    async def read(self, key: PairKey, limit: int) -> List[ChatMessage]:
        if limit <= 0:
            return []
        stmt = (
            select(ChatMessageRecord)
            .where(ChatMessageRecord.owner == key.owner, ChatMessageRecord.peer == key.peer)
            .order_by(ChatMessageRecord.id.desc())
            .limit(limit)
        )
        try:
            async with self._session_factory() as session:
                records = (await session.scalars(stmt)).all()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Failed to fetch chat history: {exc}") from exc
        return [_to_message(r) for r in reversed(records)]

    async def contacts(self, owner: str) -> List[str]:
        stmt = (
            select(ChatMessageRecord.peer)
            .where(ChatMessageRecord.owner == owner)
            .distinct()
            .order_by(ChatMessageRecord.peer)
        )
        try:
            async with self._session_factory() as session:
                return list((await session.scalars(stmt)).all())
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Failed to fetch contacts: {exc}") from exc

    async def ping(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("History store ping failed: %s", exc)
            return False
        return True

    async def close(self) -> None:
        await self._engine.dispose()

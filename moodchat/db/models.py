"""SQLAlchemy ORM models.

Tables:
- chat_messages: append-only per-owner message history. Each row
  belongs to the history ``owner`` keeps with ``peer``.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from moodchat.db.base import Base


class ChatMessageRecord(Base):
    """One message as stored in one owner's history with one peer."""

    __tablename__ = "chat_messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner: Mapped[str] = mapped_column(String(64), nullable=False)
    peer: Mapped[str] = mapped_column(String(128), nullable=False)
    sender: Mapped[str] = mapped_column(String(64), nullable=False)
    recipient: Mapped[str] = mapped_column(String(128), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    mood: Mapped[str] = mapped_column(String(16), nullable=False, default="neutral")
    sent_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_chat_messages_owner_peer_id", "owner", "peer", "id"),
    )

    def __repr__(self) -> str:
        return f"<ChatMessageRecord {self.owner}:{self.peer} #{self.id}>"

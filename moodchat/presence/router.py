"""Message routing.

Validates, classifies, persists and delivers chat messages from an
authenticated session to a single user or to the online members of a
group. Delivery is best-effort: offline recipients and unknown groups
are silent no-ops.
"""

import logging
from typing import List, Optional, Tuple

from moodchat.errors import ValidationError
from moodchat.persistence.models import ChatMessage, history_keys
from moodchat.persistence.writer import HistoryWriter
from moodchat.presence.config import PresenceConfig, TargetKind
from moodchat.presence.connection import deliver
from moodchat.presence.groups import GroupDirectory
from moodchat.presence.protocol import ChatMessageFrame, MessageFrame, TypingFrame, TypingNoticeFrame
from moodchat.presence.registry import ConnectionRegistry, Session
from moodchat.sentiment.classifier import SentimentClassifier
from moodchat.sentiment.mood import Mood, mood_for_score

logger = logging.getLogger(__name__)


class MessageRouter:
    """Routes ``message`` and ``typing`` frames between sessions."""

    def __init__(
        self,
        registry: ConnectionRegistry,
        groups: GroupDirectory,
        classifier: SentimentClassifier,
        writer: Optional[HistoryWriter] = None,
        config: Optional[PresenceConfig] = None,
    ):
        self._registry = registry
        self._groups = groups
        self._classifier = classifier
        self._writer = writer
        self._config = config or PresenceConfig()

    def target_kind(self, recipient: str) -> TargetKind:
        if recipient.startswith(self._config.group_prefix):
            return TargetKind.GROUP
        return TargetKind.DIRECT

    def validate(self, frame: MessageFrame) -> Tuple[str, str]:
        """Return (recipient, body) or raise ValidationError."""
        recipient = frame.recipient.strip() if isinstance(frame.recipient, str) else ""
        if not recipient:
            raise ValidationError("Recipient required", field="recipient")

        body = frame.message
        if not isinstance(body, str) or not body.strip():
            raise ValidationError("Message content required", field="message")
        if len(body) > self._config.max_message_length:
            raise ValidationError("Message too long", field="message")

        return recipient, body

    def classify(self, body: str) -> Mood:
        """Mood for *body*. A failing classifier yields neutral."""
        try:
            score = self._classifier.score(body)
        except Exception:
            logger.exception("Sentiment classifier failed; defaulting to neutral")
            return Mood.NEUTRAL
        return mood_for_score(score)

    async def route(self, session: Session, frame: MessageFrame) -> int:
        """Route one message frame. Returns the number of frames delivered.

        Raises:
            ValidationError: missing recipient, empty or oversized body.
        """
        recipient, body = self.validate(frame)
        kind = self.target_kind(recipient)

        message = ChatMessage(
            sender=session.username,
            recipient=recipient,
            body=body,
            mood=self.classify(body),
        )

        if self._writer is not None:
            self._writer.submit(message, history_keys(message, is_group=kind is TargetKind.GROUP))

        payload = ChatMessageFrame.from_message(message).to_wire()
        targets = self._targets(message.sender, recipient, kind)

        delivered = 0
        for username in targets:
            connection = self._registry.lookup(username)
            if connection is not None and await deliver(connection, payload):
                delivered += 1

        logger.debug(
            "Routed %s message to %s (%d/%d delivered, mood=%s)",
            kind.value,
            recipient,
            delivered,
            len(targets),
            message.mood.value,
        )
        return delivered

    async def relay_typing(self, session: Session, frame: TypingFrame) -> bool:
        """Forward a typing indicator to an online direct recipient."""
        recipient = frame.recipient if isinstance(frame.recipient, str) else ""
        if not recipient:
            return False
        connection = self._registry.lookup(recipient)
        if connection is None:
            return False
        notice = TypingNoticeFrame(sender=session.username, recipient=recipient)
        return await deliver(connection, notice.to_wire())

    def _targets(self, sender: str, recipient: str, kind: TargetKind) -> List[str]:
        if kind is TargetKind.GROUP:
            return sorted(m for m in self._groups.members(recipient) if m != sender)
        return [recipient]

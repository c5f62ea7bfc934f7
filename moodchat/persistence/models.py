"""Chat message and history-key value objects."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from moodchat.sentiment.mood import Mood


@dataclass(frozen=True)
class ChatMessage:
    """One sent message. Created once per send and never mutated."""

    sender: str
    recipient: str
    body: str
    mood: Mood = Mood.NEUTRAL
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """History representation, as returned by the history endpoint."""
        return {
            "sender": self.sender,
            "recipient": self.recipient,
            "message": self.body,
            "timestamp": self.timestamp.isoformat(),
            "mood": self.mood.value,
        }


@dataclass(frozen=True)
class PairKey:
    """Identifies the history one user keeps with one peer (user or group)."""

    owner: str
    peer: str

    def __str__(self) -> str:
        return f"{self.owner}:{self.peer}"


def history_keys(message: ChatMessage, is_group: bool) -> List[PairKey]:
    """History records a message is appended to.

    Direct messages land in both participants' histories; group
    messages only in the sender's history with the group.
    """
    keys = [PairKey(message.sender, message.recipient)]
    if not is_group and message.recipient != message.sender:
        keys.append(PairKey(message.recipient, message.sender))
    return keys

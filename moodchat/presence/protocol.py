"""Wire protocol.

Every frame is a JSON object with a mandatory ``type`` discriminator.
Inbound frames are decoded into a tagged union at the connection
boundary; anything that does not decode is a ProtocolError.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from moodchat.errors import ProtocolError
from moodchat.persistence.models import ChatMessage
from moodchat.sentiment.mood import Mood

logger = logging.getLogger(__name__)


# ─── Client → server ─────────────────────────────────────────────────────


class InboundFrame(BaseModel):
    """Base for frames sent by clients. Unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")


class ConnectFrame(InboundFrame):
    type: Literal["connect"]
    # Validated by the handshake so a bad value gets its own error message.
    username: Any = None


class MessageFrame(InboundFrame):
    type: Literal["message"]
    recipient: Any = None
    message: Any = None


class TypingFrame(InboundFrame):
    type: Literal["typing"]
    recipient: Any = None


class PongFrame(InboundFrame):
    type: Literal["pong"]


ClientFrame = Annotated[
    Union[ConnectFrame, MessageFrame, TypingFrame, PongFrame],
    Field(discriminator="type"),
]

_CLIENT_FRAME_ADAPTER: TypeAdapter = TypeAdapter(ClientFrame)
INBOUND_TYPES = frozenset({"connect", "message", "typing", "pong"})


def decode_frame(raw: Union[str, bytes]) -> InboundFrame:
    """Parse one raw text frame into a typed inbound frame.

    Raises:
        ProtocolError: undecodable JSON, missing/unknown ``type``, or a
            payload that does not match its frame shape.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError, RecursionError) as exc:
        raise ProtocolError("Invalid message format") from exc

    if not isinstance(data, dict):
        raise ProtocolError("Invalid message format")

    frame_type = data.get("type")
    if not isinstance(frame_type, str) or not frame_type:
        raise ProtocolError("Message type required")
    if frame_type not in INBOUND_TYPES:
        raise ProtocolError("Unknown message type")

    try:
        return _CLIENT_FRAME_ADAPTER.validate_python(data)
    except PydanticValidationError as exc:
        raise ProtocolError("Invalid message format") from exc


# ─── Server → client ─────────────────────────────────────────────────────


class OutboundFrame(BaseModel):
    """Base for frames the server sends."""

    def to_wire(self) -> dict:
        return self.model_dump(mode="json")


class ConnectResponseFrame(OutboundFrame):
    type: Literal["connect-response"] = "connect-response"
    success: bool = True
    username: str


class ErrorFrame(OutboundFrame):
    type: Literal["error"] = "error"
    message: str


class UpdateUsersFrame(OutboundFrame):
    type: Literal["updateUsers"] = "updateUsers"
    users: list[str]


class ChatMessageFrame(OutboundFrame):
    type: Literal["message"] = "message"
    sender: str
    recipient: str
    message: str
    timestamp: str
    mood: Mood

    @classmethod
    def from_message(cls, message: ChatMessage) -> "ChatMessageFrame":
        return cls(
            sender=message.sender,
            recipient=message.recipient,
            message=message.body,
            timestamp=message.timestamp.isoformat(),
            mood=message.mood,
        )


class TypingNoticeFrame(OutboundFrame):
    type: Literal["typing"] = "typing"
    sender: str
    recipient: str


class PingFrame(OutboundFrame):
    type: Literal["ping"] = "ping"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

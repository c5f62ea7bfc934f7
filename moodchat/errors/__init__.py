"""Error taxonomy for the chat engine and its HTTP surface.

Frame-level errors become ``error`` frames on the websocket; HTTP-level
errors become structured JSON responses via registered handlers.
"""

from moodchat.errors.config import ErrorCode, ErrorSeverity
from moodchat.errors.exceptions import (
    ChatError,
    DuplicateUsername,
    NotAuthenticated,
    PersistenceFailure,
    ProtocolError,
    StartupFailure,
    ValidationError,
)
from moodchat.errors.handlers import ErrorResponse, create_error_response, register_exception_handlers

__all__ = [
    "ErrorCode",
    "ErrorSeverity",
    "ChatError",
    "DuplicateUsername",
    "NotAuthenticated",
    "PersistenceFailure",
    "ProtocolError",
    "StartupFailure",
    "ValidationError",
    "ErrorResponse",
    "create_error_response",
    "register_exception_handlers",
]

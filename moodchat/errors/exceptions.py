"""Custom Exception Hierarchy.

Every engine failure mode has a typed exception so the connection
loop and the HTTP layer can each map it to the right response.
"""

from typing import Any, Dict, List, Optional

from moodchat.errors.config import ERROR_STATUS_MAP, ErrorCode


class ChatError(Exception):
    """Base exception for all chat engine errors.

    ``message`` is the human-readable reason sent to clients verbatim.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = ERROR_STATUS_MAP.get(error_code, 500)
        self.details = details or []


class ProtocolError(ChatError):
    """Raised when a frame cannot be decoded or has no usable ``type``."""

    def __init__(self, message: str = "Invalid message format"):
        super().__init__(message, ErrorCode.PROTOCOL_ERROR)


class NotAuthenticated(ChatError):
    """Raised when a routing frame arrives before a successful ``connect``."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, ErrorCode.NOT_AUTHENTICATED)


class DuplicateUsername(ChatError):
    """Raised when registering a username that already has a session."""

    def __init__(self, username: str = "", message: str = "Username already taken"):
        super().__init__(message, ErrorCode.DUPLICATE_USERNAME)
        self.username = username


class ValidationError(ChatError):
    """Raised when a frame or request fails input validation."""

    def __init__(self, message: str = "Validation failed", field: Optional[str] = None):
        details = [{"field": field, "issue": message}] if field else None
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)
        self.field = field


class PersistenceFailure(ChatError):
    """Raised by storage backends when an append or read fails."""

    def __init__(self, message: str = "Failed to save message"):
        super().__init__(message, ErrorCode.PERSISTENCE_FAILURE)


class StartupFailure(ChatError):
    """Raised when the durable store is unreachable at startup. Process-fatal."""

    def __init__(self, message: str = "History store unavailable at startup"):
        super().__init__(message, ErrorCode.STARTUP_FAILURE)

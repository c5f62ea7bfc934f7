"""Error Configuration.

Defines error codes, severity levels, and their HTTP status mapping.
"""

from enum import Enum
from typing import Dict


class ErrorCode(Enum):
    """Standardized error codes."""

    # Client errors
    PROTOCOL_ERROR = "PROTOCOL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    DUPLICATE_USERNAME = "DUPLICATE_USERNAME"

    # Server errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"
    STARTUP_FAILURE = "STARTUP_FAILURE"


class ErrorSeverity(Enum):
    """Severity levels for error logging."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


ERROR_STATUS_MAP: Dict[ErrorCode, int] = {
    ErrorCode.PROTOCOL_ERROR: 400,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.NOT_AUTHENTICATED: 401,
    ErrorCode.DUPLICATE_USERNAME: 409,
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.PERSISTENCE_FAILURE: 500,
    ErrorCode.STARTUP_FAILURE: 503,
}

ERROR_SEVERITY_MAP: Dict[ErrorCode, ErrorSeverity] = {
    ErrorCode.PROTOCOL_ERROR: ErrorSeverity.LOW,
    ErrorCode.VALIDATION_ERROR: ErrorSeverity.LOW,
    ErrorCode.NOT_AUTHENTICATED: ErrorSeverity.LOW,
    ErrorCode.DUPLICATE_USERNAME: ErrorSeverity.MEDIUM,
    ErrorCode.INTERNAL_ERROR: ErrorSeverity.CRITICAL,
    ErrorCode.PERSISTENCE_FAILURE: ErrorSeverity.HIGH,
    ErrorCode.STARTUP_FAILURE: ErrorSeverity.CRITICAL,
}

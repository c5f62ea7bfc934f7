"""HTTP error rendering.

ChatError subclasses raised by HTTP routes, FastAPI's own request
validation failures, and anything unexpected all leave the service in
the same JSON envelope::

    {"error": {"code": ..., "message": ..., "timestamp": ..., "details": [...], "request_id": ...}}
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from moodchat.errors.config import ERROR_SEVERITY_MAP, ERROR_STATUS_MAP, ErrorCode, ErrorSeverity
from moodchat.errors.exceptions import ChatError
from moodchat.logging_config.context import get_request_id

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ErrorSeverity.LOW: logging.INFO,
    ErrorSeverity.MEDIUM: logging.WARNING,
    ErrorSeverity.HIGH: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


@dataclass
class ErrorResponse:
    """One rendered HTTP error."""

    code: str
    message: str
    status_code: int = 500
    details: List[Dict[str, Any]] = field(default_factory=list)
    request_id: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": self.code, "message": self.message, "timestamp": self.timestamp}
        if self.details:
            error["details"] = self.details
        if self.request_id:
            error["request_id"] = self.request_id
        return {"error": error}

    def to_json_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.to_dict())


def create_error_response(
    error_code: ErrorCode,
    message: str,
    details: Optional[List[Dict[str, Any]]] = None,
    request_id: Optional[str] = None,
    status_code: Optional[int] = None,
) -> ErrorResponse:
    """Build an ErrorResponse, deriving the HTTP status from *error_code* unless given."""
    return ErrorResponse(
        code=error_code.value,
        message=message,
        status_code=status_code or ERROR_STATUS_MAP.get(error_code, 500),
        details=details or [],
        request_id=request_id,
    )


def log_error(error_code: ErrorCode, message: str) -> None:
    """Log *message* at the level matching the code's severity."""
    severity = ERROR_SEVERITY_MAP.get(error_code, ErrorSeverity.MEDIUM)
    logger.log(_LOG_LEVELS[severity], "[%s] %s", error_code.value, message)


async def _chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
    log_error(exc.error_code, exc.message)
    return create_error_response(
        exc.error_code,
        exc.message,
        details=exc.details,
        request_id=get_request_id() or None,
        status_code=exc.status_code,
    ).to_json_response()


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": ".".join(str(part) for part in err.get("loc", ())[1:]), "issue": err.get("msg", "")}
        for err in exc.errors()
    ]
    log_error(ErrorCode.VALIDATION_ERROR, f"{request.url.path}: {details}")
    return create_error_response(
        ErrorCode.VALIDATION_ERROR,
        "Invalid request parameters",
        details=details,
        request_id=get_request_id() or None,
    ).to_json_response()


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled %s on %s", type(exc).__name__, request.url.path)
    return create_error_response(
        ErrorCode.INTERNAL_ERROR,
        "An internal error occurred",
        request_id=get_request_id() or None,
    ).to_json_response()


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope-producing handlers on *app*."""
    app.add_exception_handler(ChatError, _chat_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

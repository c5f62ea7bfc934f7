"""HTTP request tracing.

Binds an ``X-Request-ID`` to every HTTP request (taken from the caller
or freshly generated), echoes it on the response, and logs one line
per completed request. Websocket scopes pass through untouched; those
are traced per connection by the hub.
"""

import logging
import time
from typing import Optional

from moodchat.logging_config.config import DEFAULT_LOGGING_CONFIG, LoggingConfig
from moodchat.logging_config.context import bind_request_id, generate_request_id, reset_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
_HEADER_KEY = REQUEST_ID_HEADER.lower().encode()


def _incoming_request_id(scope) -> Optional[str]:
    for key, value in scope.get("headers", []):
        if key == _HEADER_KEY and value:
            return value.decode("utf-8", errors="replace")
    return None


class RequestTracingMiddleware:
    """Pure ASGI middleware; add with ``app.add_middleware(RequestTracingMiddleware)``."""

    def __init__(self, app, config: Optional[LoggingConfig] = None):
        self.app = app
        self.config = config or DEFAULT_LOGGING_CONFIG

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = _incoming_request_id(scope) or generate_request_id()
        token = bind_request_id(request_id)
        started = time.perf_counter()
        status = 500

        async def send_with_request_id(message):
            nonlocal status
            if message["type"] == "http.response.start":
                status = message.get("status", 500)
                headers = [*message.get("headers", []), (_HEADER_KEY, request_id.encode())]
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            self._log_completed(scope, status, (time.perf_counter() - started) * 1000)
            reset_request_id(token)

    def _log_completed(self, scope, status: int, duration_ms: float) -> None:
        path = scope.get("path", "")
        if path in self.config.exclude_paths:
            return

        if status >= 500:
            level = logging.ERROR
        elif status >= 400 or duration_ms >= self.config.slow_request_ms:
            level = logging.WARNING
        else:
            level = logging.INFO

        logger.log(
            level,
            "%s %s -> %d (%.1f ms)",
            scope.get("method", ""),
            path,
            status,
            duration_ms,
            extra={
                "method": scope.get("method", ""),
                "path": path,
                "status_code": status,
                "duration_ms": round(duration_ms, 2),
            },
        )

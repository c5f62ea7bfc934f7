"""Structured logging and connection tracing.

Provides JSON/console log formatting, request ID propagation for HTTP
requests, and per-connection context binding for websocket sessions.
"""

from moodchat.logging_config.config import LogFormat, LoggingConfig, LogLevel
from moodchat.logging_config.context import ConnectionContext, generate_request_id
from moodchat.logging_config.setup import configure_logging

__all__ = [
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "ConnectionContext",
    "configure_logging",
    "generate_request_id",
]

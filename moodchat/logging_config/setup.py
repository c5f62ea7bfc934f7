"""Logging Setup.

``configure_logging`` is called once from the app lifespan. It installs
a single stdout handler on the root logger: JSON lines in production,
colored one-liners in development. Every line carries whatever request
or connection context is bound at the time it is emitted.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from moodchat.logging_config.config import DEFAULT_LOGGING_CONFIG, LogFormat, LoggingConfig
from moodchat.logging_config.context import get_context_dict

# Attributes callers may attach via ``extra=`` that are copied into JSON lines.
EXTRA_FIELDS = ("method", "path", "status_code", "duration_ms", "recipient", "frame_type")

NOISY_LOGGERS = ("asyncio", "websockets", "httpx", "aiosqlite", "sqlalchemy.engine")


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def __init__(self, service_name: str = "moodchat", include_caller: bool = True):
        super().__init__()
        self.service_name = service_name
        self.include_caller = include_caller

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(self._entry(record), default=str)

    def _entry(self, record: logging.LogRecord) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "service": self.service_name,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.include_caller:
            entry.update(module=record.module, function=record.funcName, line=record.lineno)

        entry.update(get_context_dict())
        entry.update({key: getattr(record, key) for key in EXTRA_FIELDS if hasattr(record, key)})

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }
        return entry


class ConsoleFormatter(logging.Formatter):
    """Colored single-line output for a developer terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%H:%M:%S.%f")[:-3]
        color = self.COLORS.get(record.levelname, "")
        context = " ".join(f"{key}={value}" for key, value in get_context_dict().items())

        line = f"{stamp} {color}{record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}"
        if context:
            line = f"{line}  [{context}]"
        if record.exc_info and record.exc_info[0] is not None:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    """Install the service's root handler, replacing any existing ones.

    Args:
        config: Logging configuration; defaults to JSON at INFO. The app
            builds it from Settings, so MOODCHAT_LOG_LEVEL and
            MOODCHAT_LOG_FORMAT reach it through LoggingConfig.from_settings.
    """
    config = config or DEFAULT_LOGGING_CONFIG

    if config.format is LogFormat.JSON:
        formatter: logging.Formatter = StructuredFormatter(
            service_name=config.service_name,
            include_caller=config.include_caller,
        )
    else:
        formatter = ConsoleFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(config.level.value)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


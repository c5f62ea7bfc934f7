"""Connection & Request Context Management.

Binds request IDs (HTTP) and connection IDs / usernames (websocket)
to log entries using contextvars, so every line emitted while a
connection task runs carries the identity of that connection.
"""

import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any


_request_id_var: ContextVar[str] = ContextVar("request_id", default="")
_connection_id_var: ContextVar[str] = ContextVar("connection_id", default="")
_username_var: ContextVar[str] = ContextVar("username", default="")


def generate_request_id() -> str:
    """Generate a unique request ID using UUID4."""
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Get the current request ID from context."""
    return _request_id_var.get()


def get_connection_id() -> str:
    return _connection_id_var.get()


def get_username() -> str:
    return _username_var.get()


def bind_request_id(request_id: str):
    """Set the request ID for the current context. Returns the reset token."""
    return _request_id_var.set(request_id)


def reset_request_id(token) -> None:
    _request_id_var.reset(token)


def get_context_dict() -> dict[str, Any]:
    """Get all context variables as a dictionary for log binding."""
    ctx = {}
    req_id = _request_id_var.get()
    if req_id:
        ctx["request_id"] = req_id
    conn_id = _connection_id_var.get()
    if conn_id:
        ctx["connection_id"] = conn_id
    username = _username_var.get()
    if username:
        ctx["username"] = username
    return ctx


@dataclass
class ConnectionContext:
    """Context manager for connection-scoped logging context.

    Binds connection_id (and, once the handshake succeeds, username) to
    all log entries emitted by the task serving that connection.

    Example:
        with ConnectionContext() as ctx:
            logger.info("frame received")   # includes connection_id
            ctx.bind_username("alice")
            logger.info("routed")           # includes connection_id, username
    """

    connection_id: str = ""
    username: str = ""
    _tokens: list = field(default_factory=list, repr=False)

    def __post_init__(self):
        if not self.connection_id:
            self.connection_id = uuid.uuid4().hex[:16]

    def __enter__(self) -> "ConnectionContext":
        self._tokens = [
            (_connection_id_var, _connection_id_var.set(self.connection_id)),
            (_username_var, _username_var.set(self.username)),
        ]
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()

    def bind_username(self, username: str) -> None:
        """Attach the authenticated username to the current context."""
        self.username = username
        _username_var.set(username)

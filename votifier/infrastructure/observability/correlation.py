"""Connection ID management for per-connection log tracing.

Every accepted connection runs in its own asyncio task, and each task
gets its own copy of the current context. Setting the connection ID at
the start of a handler therefore tags every log line that handler (and
the listeners it calls) emits, without passing the ID around.

Usage:
    # At the start of a connection
    set_connection_id(generate_connection_id())

    # In structlog configuration
    processors = [..., connection_id_processor, ...]
"""

from contextvars import ContextVar
from typing import Any
from uuid import uuid4

# Default is empty string to avoid None type issues
_connection_id: ContextVar[str] = ContextVar("connection_id", default="")


def generate_connection_id() -> str:
    """Generate a new connection ID.

    Returns:
        A short random hex string, unique enough to tell apart
        concurrent connections in logs.
    """
    return uuid4().hex[:12]


def get_connection_id() -> str:
    """Get the current connection ID from context.

    Returns:
        The current connection ID or empty string if not set.
    """
    return _connection_id.get()


def set_connection_id(connection_id: str) -> None:
    """Set the connection ID in the current context.

    Args:
        connection_id: The connection ID to set.
    """
    _connection_id.set(connection_id)


def connection_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor to add connection_id to every log entry.

    Args:
        logger: The logger instance (unused, required by structlog).
        method_name: The logging method name (unused, required by structlog).
        event_dict: The event dictionary to modify.

    Returns:
        The event dictionary with connection_id added when one is set.
    """
    connection_id = get_connection_id()
    if connection_id:
        event_dict.setdefault("connection_id", connection_id)
    return event_dict

"""Observability infrastructure for structured logging and connection tracing.

Usage:
    from votifier.infrastructure.observability import (
        configure_structlog,
        set_connection_id,
    )

    # At startup
    configure_structlog(environment="production")

    # Per connection (done by the connection handler)
    set_connection_id(generate_connection_id())
"""

from votifier.infrastructure.observability.correlation import (
    connection_id_processor,
    generate_connection_id,
    get_connection_id,
    set_connection_id,
)
from votifier.infrastructure.observability.logging import (
    configure_structlog,
)

__all__: list[str] = [
    "configure_structlog",
    "connection_id_processor",
    "generate_connection_id",
    "get_connection_id",
    "set_connection_id",
]

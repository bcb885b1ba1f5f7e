"""Bootstrap wiring for logging configuration."""

from __future__ import annotations

from votifier.infrastructure.observability import configure_structlog as _configure_structlog


def configure_structlog(environment: str, debug: bool = False) -> None:
    """Configure structlog for the given environment."""
    _configure_structlog(environment=environment, debug=debug)


__all__ = ["configure_structlog"]

"""Bootstrap wiring for Votifier.

The host calls into this package once at startup to configure logging
and build a ready-to-enable VotifierService.
"""

from votifier.bootstrap.logging import configure_structlog
from votifier.bootstrap.votifier import create_votifier_service

__all__ = ["configure_structlog", "create_votifier_service"]

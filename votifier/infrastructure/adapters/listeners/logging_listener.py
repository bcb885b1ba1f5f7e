"""Listener that records every received vote in the log."""

from __future__ import annotations

import structlog

from votifier.application.ports.vote_listener import VoteListener
from votifier.domain.models.vote import VoteRecord


class LoggingVoteListener(VoteListener):
    """Logs each vote as a ``vote_received`` event."""

    def __init__(self) -> None:
        self._log = structlog.get_logger().bind(listener="logging")

    @property
    def name(self) -> str:
        return "logging"

    async def notify(self, vote: VoteRecord) -> None:
        self._log.info("vote_received", **vote.to_dict())

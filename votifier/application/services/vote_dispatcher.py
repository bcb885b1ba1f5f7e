"""Vote dispatcher: fans one VoteRecord out to every registered listener.

Delivery is sequential and follows registration order. Each listener is
isolated: an exception from one listener is wrapped, logged and recorded,
and the next listener is still notified. Nothing a listener raises
reaches the network layer.

Cancellation (asyncio.CancelledError) is not an Exception and is left
to propagate, so shutdown can still interrupt a slow listener.
"""

from __future__ import annotations

import structlog

from votifier.application.dtos.receiver import DispatchReport, ListenerFailure
from votifier.application.ports.listener_registry import ListenerRegistryPort
from votifier.domain.errors.vote import ListenerDispatchError
from votifier.domain.models.vote import VoteRecord


class VoteDispatcher:
    """Notifies the listener registry about decoded votes.

    Example:
        >>> dispatcher = VoteDispatcher(registry)
        >>> report = await dispatcher.dispatch(vote)
        >>> report.all_delivered
        True
    """

    def __init__(self, registry: ListenerRegistryPort) -> None:
        """Initialize the dispatcher.

        Args:
            registry: Source of listeners. A fresh snapshot is taken for
                every vote, so registrations take effect on the next vote.
        """
        self._registry = registry
        self._log = structlog.get_logger().bind(service="vote_dispatcher")

    @property
    def registry(self) -> ListenerRegistryPort:
        return self._registry

    async def dispatch(self, vote: VoteRecord) -> DispatchReport:
        """Notify every registered listener about a vote.

        Args:
            vote: The decoded vote.

        Returns:
            DispatchReport listing successful and failed listeners.
        """
        delivered: list[str] = []
        failures: list[ListenerFailure] = []

        for listener in self._registry.snapshot():
            name = type(listener).__name__
            try:
                name = listener.name
                await listener.notify(vote)
            except Exception as e:
                error = ListenerDispatchError(name, f"listener {name!r} failed: {e}")
                error.__cause__ = e
                failures.append(ListenerFailure(listener_name=name, error=error))
                self._log.error(
                    "listener_dispatch_failed",
                    listener=name,
                    service_name=vote.service_name,
                    username=vote.username,
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=e,
                )
            else:
                delivered.append(name)

        return DispatchReport(
            vote=vote,
            delivered=tuple(delivered),
            failures=tuple(failures),
        )

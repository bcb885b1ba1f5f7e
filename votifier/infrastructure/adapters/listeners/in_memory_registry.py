"""In-process listener registry.

Listeners are kept in an immutable tuple that is replaced on every
register/unregister (copy-on-write). Dispatch reads the current tuple
without locking, so a connection handler iterating a snapshot never
sees a registration made halfway through delivery. Writers take a
threading.Lock because the host may register listeners from a thread
other than the receiver's event loop.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable

import structlog

from votifier.application.ports.listener_registry import ListenerRegistryPort
from votifier.application.ports.vote_listener import VoteListener

log = structlog.get_logger()


def _name_of(listener: VoteListener) -> str:
    try:
        return listener.name
    except Exception:
        # A broken name is reported by the dispatcher on the next vote
        return type(listener).__name__


class InMemoryListenerRegistry(ListenerRegistryPort):
    """Ordered, thread-safe registry of vote listeners."""

    def __init__(self, listeners: Iterable[VoteListener] = ()) -> None:
        self._lock = threading.Lock()
        self._listeners: tuple[VoteListener, ...] = ()
        for listener in listeners:
            self.register(listener)

    def register(self, listener: VoteListener) -> None:
        with self._lock:
            if listener in self._listeners:
                return
            self._listeners = self._listeners + (listener,)
        log.info("vote_listener_registered", listener=_name_of(listener))

    def unregister(self, listener: VoteListener) -> bool:
        with self._lock:
            if listener not in self._listeners:
                return False
            self._listeners = tuple(
                existing for existing in self._listeners if existing is not listener
            )
        log.info("vote_listener_unregistered", listener=_name_of(listener))
        return True

    def snapshot(self) -> tuple[VoteListener, ...]:
        return self._listeners

    def __len__(self) -> int:
        return len(self._listeners)

"""Port definition for vote listeners.

A listener is an in-process consumer that wants to hear about every
received vote. Listeners are notified one at a time, in registration
order, and a listener that raises never stops delivery to the others.

Listeners must tolerate out-of-order delivery across connections.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Union

from votifier.domain.models.vote import VoteRecord

VoteCallback = Callable[[VoteRecord], Union[None, Awaitable[None]]]


class VoteListener(ABC):
    """Abstract consumer of VoteRecord events."""

    @property
    def name(self) -> str:
        """Human-readable listener name used in logs."""
        return type(self).__name__

    @abstractmethod
    async def notify(self, vote: VoteRecord) -> None:
        """Handle one received vote.

        Args:
            vote: The decoded vote. Shared with other listeners; it is
                immutable.
        """
        ...


class CallbackVoteListener(VoteListener):
    """Adapts a plain callable (sync or async) to the VoteListener port.

    Example:
        >>> received = []
        >>> listener = CallbackVoteListener(received.append, name="collector")
    """

    def __init__(self, callback: VoteCallback, name: str | None = None) -> None:
        self._callback = callback
        self._name = name or getattr(callback, "__qualname__", repr(callback))

    @property
    def name(self) -> str:
        return self._name

    async def notify(self, vote: VoteRecord) -> None:
        result = self._callback(vote)
        if inspect.isawaitable(result):
            await result

    def __repr__(self) -> str:
        return f"CallbackVoteListener(name={self._name!r})"

"""Port definition for the listener registry.

The host decides how listeners are discovered and registered; the
receiver only needs an ordered, safely iterable view of whoever is
registered at the moment a vote arrives.

Registration may happen from another thread while votes are being
dispatched. Implementations must therefore hand out snapshots that are
not affected by later register/unregister calls.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from votifier.application.ports.vote_listener import VoteListener


class ListenerRegistryPort(ABC):
    """Ordered set of vote listeners."""

    @abstractmethod
    def register(self, listener: VoteListener) -> None:
        """Add a listener at the end of the notification order.

        Registering a listener that is already present is a no-op.
        """
        ...

    @abstractmethod
    def unregister(self, listener: VoteListener) -> bool:
        """Remove a listener.

        Returns:
            True if the listener was registered and has been removed.
        """
        ...

    @abstractmethod
    def snapshot(self) -> tuple[VoteListener, ...]:
        """Return the listeners registered right now, in registration order."""
        ...

    def __len__(self) -> int:
        return len(self.snapshot())

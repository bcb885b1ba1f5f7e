"""Built-in listener registry and listeners."""

from votifier.infrastructure.adapters.listeners.in_memory_registry import (
    InMemoryListenerRegistry,
)
from votifier.infrastructure.adapters.listeners.logging_listener import (
    LoggingVoteListener,
)

__all__ = ["InMemoryListenerRegistry", "LoggingVoteListener"]

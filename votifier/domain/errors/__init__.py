"""Votifier error taxonomy.

Fatal errors (stop the owning service):
- BindError
- KeyStoreError, KeyGenerationError

Recoverable errors (contained per connection or per listener):
- DecryptionError
- MalformedVoteError
- ListenerDispatchError
- ShutdownTimeoutError
"""

from votifier.domain.errors.key_store import KeyGenerationError, KeyStoreError
from votifier.domain.errors.receiver import BindError, ShutdownTimeoutError
from votifier.domain.errors.vote import (
    DecryptionError,
    ListenerDispatchError,
    MalformedVoteError,
)

__all__ = [
    "BindError",
    "DecryptionError",
    "KeyGenerationError",
    "KeyStoreError",
    "ListenerDispatchError",
    "MalformedVoteError",
    "ShutdownTimeoutError",
]

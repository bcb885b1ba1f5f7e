"""
Domain layer - vote model, wire parser and errors for Votifier.

This layer contains:
- The VoteRecord model
- The vote payload parser
- The error taxonomy (fatal vs recoverable)

CRITICAL: This layer must NOT import from application, infrastructure,
config or bootstrap. Only stdlib and typing imports are allowed.
"""

from votifier.domain.errors import (
    BindError,
    DecryptionError,
    ListenerDispatchError,
    MalformedVoteError,
    ShutdownTimeoutError,
)
from votifier.domain.exceptions import ErrorKind, VotifierError
from votifier.domain.models import VoteRecord
from votifier.domain.services import VoteParser

__all__: list[str] = [
    "BindError",
    "DecryptionError",
    "ErrorKind",
    "ListenerDispatchError",
    "MalformedVoteError",
    "ShutdownTimeoutError",
    "VoteParser",
    "VoteRecord",
    "VotifierError",
]

"""Ports (interfaces) used by the Votifier application services."""

from votifier.application.ports.listener_registry import ListenerRegistryPort
from votifier.application.ports.vote_decryptor import VoteDecryptorPort
from votifier.application.ports.vote_listener import (
    CallbackVoteListener,
    VoteCallback,
    VoteListener,
)

__all__ = [
    "CallbackVoteListener",
    "ListenerRegistryPort",
    "VoteCallback",
    "VoteDecryptorPort",
    "VoteListener",
]

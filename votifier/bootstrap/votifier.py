"""Bootstrap wiring for the Votifier service.

Loads (or, on first run, generates) the key pair from the configured key
directory and assembles the service around it. Key failures propagate:
a receiver without its private key must not start.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from votifier.application.ports.listener_registry import ListenerRegistryPort
from votifier.application.ports.vote_listener import VoteListener
from votifier.application.services.votifier_service import VotifierService
from votifier.config.votifier_config import VotifierConfig
from votifier.infrastructure.adapters.crypto import (
    RSAKeyPair,
    RSAKeyStore,
    RSAVoteCodec,
)
from votifier.infrastructure.adapters.listeners import InMemoryListenerRegistry


def create_votifier_service(
    config: Optional[VotifierConfig] = None,
    key_pair: Optional[RSAKeyPair] = None,
    registry: Optional[ListenerRegistryPort] = None,
    listeners: Iterable[VoteListener] = (),
) -> VotifierService:
    """Create a VotifierService.

    Args:
        config: Receiver configuration (default: from environment).
        key_pair: Already-loaded key pair. When omitted, the key store at
            ``config.key_directory`` is loaded or initialised.
        registry: Listener registry (default: a new in-memory registry).
        listeners: Listeners to register before returning.

    Returns:
        A service ready for ``enable()``.

    Raises:
        KeyStoreError: If the key files are unreadable or damaged.
        KeyGenerationError: If first-run key generation fails.
    """
    if config is None:
        config = VotifierConfig.from_environment()
    if key_pair is None:
        key_pair = RSAKeyStore(config.key_directory).load_or_generate()
    if registry is None:
        registry = InMemoryListenerRegistry()

    service = VotifierService(
        config=config,
        decryptor=RSAVoteCodec(key_pair),
        registry=registry,
    )
    for listener in listeners:
        service.register_listener(listener)
    return service


__all__ = ["create_votifier_service"]

"""RSA key material and vote block codec."""

from votifier.infrastructure.adapters.crypto.key_pair import (
    DEFAULT_KEY_SIZE,
    RSAKeyPair,
    generate_key_pair,
)
from votifier.infrastructure.adapters.crypto.rsa_key_store import RSAKeyStore
from votifier.infrastructure.adapters.crypto.rsa_vote_codec import RSAVoteCodec

__all__ = [
    "DEFAULT_KEY_SIZE",
    "RSAKeyPair",
    "RSAKeyStore",
    "RSAVoteCodec",
    "generate_key_pair",
]

"""RSA codec for vote ciphertext blocks.

Vote sites encrypt the plaintext payload with the receiver's public key
using RSA with PKCS#1 v1.5 padding, producing one block exactly as long
as the modulus. This adapter decrypts such blocks with the private key.
"""

from __future__ import annotations

from cryptography.hazmat.primitives.asymmetric import padding

from votifier.application.ports.vote_decryptor import VoteDecryptorPort
from votifier.domain.errors.vote import DecryptionError
from votifier.infrastructure.adapters.crypto.key_pair import RSAKeyPair

# PKCS#1 v1.5 encryption padding overhead in bytes
PKCS1V15_OVERHEAD = 11


class RSAVoteCodec(VoteDecryptorPort):
    """Decrypts (and, for clients and tests, encrypts) vote blocks.

    The codec holds no mutable state; one instance is shared by all
    concurrent connection handlers.
    """

    def __init__(self, key_pair: RSAKeyPair) -> None:
        self._key_pair = key_pair

    @property
    def block_size(self) -> int:
        return self._key_pair.block_size

    @property
    def max_plaintext_size(self) -> int:
        """Largest plaintext that fits in one block."""
        return self.block_size - PKCS1V15_OVERHEAD

    def decrypt(self, ciphertext: bytes) -> bytes:
        if len(ciphertext) != self.block_size:
            raise DecryptionError(
                f"invalid block size: expected {self.block_size}, got {len(ciphertext)}"
            )
        try:
            return self._key_pair.private_key.decrypt(ciphertext, padding.PKCS1v15())
        except ValueError as e:
            raise DecryptionError(f"failed to decrypt vote block: {e}") from e

    def encrypt(self, plaintext: bytes) -> bytes:
        """Encrypt plaintext with the public key.

        Args:
            plaintext: At most ``max_plaintext_size`` bytes.

        Returns:
            A ciphertext block of exactly ``block_size`` bytes.

        Raises:
            ValueError: If the plaintext does not fit in one block.
        """
        if len(plaintext) > self.max_plaintext_size:
            raise ValueError(
                f"plaintext too long: {len(plaintext)} > {self.max_plaintext_size} bytes"
            )
        return self._key_pair.public_key.encrypt(plaintext, padding.PKCS1v15())

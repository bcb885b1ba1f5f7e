"""Port definition for ciphertext decryption.

The connection handler depends on this port rather than on a concrete
RSA implementation, so tests can substitute a fake decryptor.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class VoteDecryptorPort(ABC):
    """Decrypts one fixed-size ciphertext block.

    Implementations must be pure: no logging, no state change on
    failure, and safe to call from many connections at once.
    """

    @property
    @abstractmethod
    def block_size(self) -> int:
        """Exact ciphertext length in bytes (256 for a 2048-bit key)."""
        ...

    @abstractmethod
    def decrypt(self, ciphertext: bytes) -> bytes:
        """Decrypt a ciphertext block.

        Args:
            ciphertext: Exactly ``block_size`` bytes.

        Returns:
            The plaintext bytes.

        Raises:
            DecryptionError: On a length mismatch, corrupt ciphertext or
                a block encrypted for a different key.
        """
        ...

"""RSA key pair used by the receiver.

The key pair is created once (first run) or loaded once (later runs) by
the host, then shared read-only by every connection handler for the
lifetime of the process. Only the public half is ever handed out, to be
configured on vote-reporting sites.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from votifier.domain.errors.key_store import KeyGenerationError

DEFAULT_KEY_SIZE = 2048
PUBLIC_EXPONENT = 65537


@dataclass(frozen=True)
class RSAKeyPair:
    """Immutable wrapper around an RSA private key.

    Attributes:
        private_key: The loaded private key. Never serialised by this
            package except by the host's key store.
    """

    private_key: rsa.RSAPrivateKey

    @property
    def public_key(self) -> rsa.RSAPublicKey:
        return self.private_key.public_key()

    @property
    def key_size(self) -> int:
        """Modulus size in bits."""
        return self.private_key.key_size

    @property
    def block_size(self) -> int:
        """Ciphertext block length in bytes (256 for a 2048-bit key)."""
        return (self.key_size + 7) // 8

    def public_key_der(self) -> bytes:
        """Public key as X.509 SubjectPublicKeyInfo DER."""
        return self.public_key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    def public_key_base64(self) -> str:
        """Public key in the single-line base64 form vote sites expect."""
        return base64.b64encode(self.public_key_der()).decode("ascii")

    def public_key_pem(self) -> str:
        """Public key in PEM format."""
        return self.public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        ).decode("ascii")

    def __repr__(self) -> str:
        # Keep key material out of logs and tracebacks
        return f"RSAKeyPair(key_size={self.key_size})"


def generate_key_pair(key_size: int = DEFAULT_KEY_SIZE) -> RSAKeyPair:
    """Generate a fresh RSA key pair from the OS random source.

    Args:
        key_size: Modulus size in bits (default 2048).

    Returns:
        The new key pair.

    Raises:
        KeyGenerationError: If the key cannot be generated. This is a
            one-time setup step; the caller should not retry.
    """
    try:
        private_key = rsa.generate_private_key(
            public_exponent=PUBLIC_EXPONENT,
            key_size=key_size,
        )
    except (ValueError, TypeError) as e:
        raise KeyGenerationError(f"cannot generate {key_size}-bit RSA key: {e}") from e
    return RSAKeyPair(private_key=private_key)

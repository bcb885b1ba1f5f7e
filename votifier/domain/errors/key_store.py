"""Key material errors.

Loading or creating the RSA key pair happens once, when the host wires
the service. Any failure here is fatal: a receiver without its private
key cannot accept a single vote.
"""

from votifier.domain.exceptions import ErrorKind, VotifierError


class KeyStoreError(VotifierError):
    """Raised when the key pair cannot be read from or written to disk."""

    kind = ErrorKind.FATAL


class KeyGenerationError(KeyStoreError):
    """Raised when a fresh key pair cannot be generated."""

"""On-disk storage for the receiver's RSA key pair.

Keys are kept in a directory as two files, each holding a single line of
base64-encoded DER:

    public.key   X.509 SubjectPublicKeyInfo
    private.key  PKCS#8 PrivateKeyInfo (unencrypted)

This is the layout existing Votifier installations use, so a key
directory can be moved between them unchanged.
"""

from __future__ import annotations

import base64
import binascii
import os
from pathlib import Path

import structlog
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from votifier.domain.errors.key_store import KeyStoreError
from votifier.infrastructure.adapters.crypto.key_pair import (
    DEFAULT_KEY_SIZE,
    RSAKeyPair,
    generate_key_pair,
)

log = structlog.get_logger()

PUBLIC_KEY_FILE = "public.key"
PRIVATE_KEY_FILE = "private.key"


class RSAKeyStore:
    """Loads, saves and first-run generates the receiver key pair.

    Example:
        >>> store = RSAKeyStore("plugins/Votifier/rsa")
        >>> key_pair = store.load_or_generate()
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def public_key_path(self) -> Path:
        return self._directory / PUBLIC_KEY_FILE

    @property
    def private_key_path(self) -> Path:
        return self._directory / PRIVATE_KEY_FILE

    def exists(self) -> bool:
        """Check if both key files are present."""
        return self.public_key_path.is_file() and self.private_key_path.is_file()

    def load(self) -> RSAKeyPair:
        """Load the key pair from disk.

        Raises:
            KeyStoreError: If a file is missing or unreadable, is not
                valid base64 DER, is not an RSA key, or if the public key
                does not belong to the private key.
        """
        try:
            private_der = self._read_der(self.private_key_path)
            public_der = self._read_der(self.public_key_path)
            private_key = serialization.load_der_private_key(private_der, password=None)
            public_key = serialization.load_der_public_key(public_der)
        except OSError as e:
            raise KeyStoreError(f"cannot read RSA keys from {self._directory}: {e}") from e
        except (ValueError, TypeError) as e:
            raise KeyStoreError(f"invalid RSA key data in {self._directory}: {e}") from e

        if not isinstance(private_key, rsa.RSAPrivateKey) or not isinstance(
            public_key, rsa.RSAPublicKey
        ):
            raise KeyStoreError(f"keys in {self._directory} are not RSA keys")
        if private_key.public_key().public_numbers() != public_key.public_numbers():
            raise KeyStoreError(f"public and private key in {self._directory} do not match")

        log.info(
            "rsa_keys_loaded",
            directory=str(self._directory),
            key_size=private_key.key_size,
        )
        return RSAKeyPair(private_key=private_key)

    def save(self, key_pair: RSAKeyPair) -> None:
        """Write the key pair to disk, creating the directory if needed.

        Raises:
            KeyStoreError: If the files cannot be written.
        """
        private_der = key_pair.private_key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            self.public_key_path.write_text(key_pair.public_key_base64())
            self.private_key_path.write_text(base64.b64encode(private_der).decode("ascii"))
            self.private_key_path.chmod(0o600)
        except OSError as e:
            raise KeyStoreError(f"cannot write RSA keys to {self._directory}: {e}") from e

        log.info("rsa_keys_saved", directory=str(self._directory))

    def load_or_generate(self, key_size: int = DEFAULT_KEY_SIZE) -> RSAKeyPair:
        """Load the key pair, generating and saving one on first run.

        A directory holding only one of the two files is treated as
        damaged and is never overwritten.

        Raises:
            KeyStoreError: If loading fails or only one key file exists.
            KeyGenerationError: If a first-run key cannot be generated.
        """
        if self.exists():
            return self.load()
        if self.public_key_path.exists() or self.private_key_path.exists():
            raise KeyStoreError(
                f"incomplete key pair in {self._directory}; "
                f"expected both {PUBLIC_KEY_FILE} and {PRIVATE_KEY_FILE}"
            )

        log.info("rsa_keys_generating", directory=str(self._directory), key_size=key_size)
        key_pair = generate_key_pair(key_size)
        self.save(key_pair)
        log.info(
            "rsa_keys_generated",
            directory=str(self._directory),
            public_key=key_pair.public_key_base64(),
        )
        return key_pair

    @staticmethod
    def _read_der(path: Path) -> bytes:
        try:
            return base64.b64decode("".join(path.read_text().split()), validate=True)
        except binascii.Error as e:
            raise ValueError(f"{path.name} is not valid base64") from e

"""Receiver configuration.

The host supplies host:port, the debug flag and the key directory; the
remaining knobs tune timeouts. Values can be overridden via environment
variables for deployment.

Environment Variables:
- VOTIFIER_HOST: Address to listen on (default: 0.0.0.0)
- VOTIFIER_PORT: Port to listen on, 0 for any free port (default: 8192)
- VOTIFIER_DEBUG: Verbose logging of rejected votes (default: false)
- VOTIFIER_READ_TIMEOUT: Seconds to wait for the ciphertext block (default: 5.0)
- VOTIFIER_SHUTDOWN_GRACE: Seconds in-flight connections get on shutdown (default: 5.0)
- VOTIFIER_KEY_DIR: Directory holding public.key/private.key (default: rsa)
- VOTIFIER_OPENING_TOKEN: First line of every valid payload (default: VOTIFIER)
- VOTIFIER_BACKLOG: Listen backlog (default: 50)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from votifier.domain.services.vote_parser import DEFAULT_OPENING_TOKEN

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable with default.

    Accepts 1/0, true/false, yes/no, on/off (case-insensitive).
    """
    value = os.environ.get(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return default


@dataclass(frozen=True)
class VotifierConfig:
    """Configuration for the vote receiver.

    Attributes:
        host: Address to bind. Default "0.0.0.0" (all interfaces).
        port: TCP port to bind. 0 asks the OS for a free port.
        debug: Log full detail for rejected votes.
        read_timeout_seconds: Time a client has to deliver the block.
        shutdown_grace_seconds: Time in-flight handlers get on shutdown.
        key_directory: Where the host keeps the RSA key files.
        opening_token: Literal expected on the first plaintext line.
        backlog: Pending-connection queue length for listen().
    """

    host: str = "0.0.0.0"
    port: int = 8192
    debug: bool = False
    read_timeout_seconds: float = 5.0
    shutdown_grace_seconds: float = 5.0
    key_directory: str = "rsa"
    opening_token: str = DEFAULT_OPENING_TOKEN
    backlog: int = 50

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.host:
            raise ValueError("host must not be empty")
        if not 0 <= self.port <= 65535:
            raise ValueError(f"port must be between 0 and 65535, got {self.port}")
        if self.read_timeout_seconds <= 0:
            raise ValueError(
                f"read_timeout_seconds must be positive, got {self.read_timeout_seconds}"
            )
        if self.shutdown_grace_seconds < 0:
            raise ValueError(
                "shutdown_grace_seconds must be non-negative, "
                f"got {self.shutdown_grace_seconds}"
            )
        if not self.key_directory:
            raise ValueError("key_directory must not be empty")
        if not self.opening_token or "\n" in self.opening_token:
            raise ValueError("opening_token must be a non-empty single line")
        if self.backlog < 1:
            raise ValueError(f"backlog must be at least 1, got {self.backlog}")

    @classmethod
    def from_environment(cls) -> "VotifierConfig":
        """Create config from environment variables with defaults.

        Unparseable numeric or boolean values fall back to the default;
        out-of-range values are rejected by __post_init__.
        """
        return cls(
            host=os.environ.get("VOTIFIER_HOST", cls.host),
            port=_get_int_env("VOTIFIER_PORT", cls.port),
            debug=_get_bool_env("VOTIFIER_DEBUG", cls.debug),
            read_timeout_seconds=_get_float_env(
                "VOTIFIER_READ_TIMEOUT", cls.read_timeout_seconds
            ),
            shutdown_grace_seconds=_get_float_env(
                "VOTIFIER_SHUTDOWN_GRACE", cls.shutdown_grace_seconds
            ),
            key_directory=os.environ.get("VOTIFIER_KEY_DIR", cls.key_directory),
            opening_token=os.environ.get("VOTIFIER_OPENING_TOKEN", cls.opening_token),
            backlog=_get_int_env("VOTIFIER_BACKLOG", cls.backlog),
        )


# Default configuration instance
DEFAULT_VOTIFIER_CONFIG = VotifierConfig()

# Test configuration: loopback, ephemeral port, short timeouts
TEST_VOTIFIER_CONFIG = VotifierConfig(
    host="127.0.0.1",
    port=0,
    debug=True,
    read_timeout_seconds=1.0,
    shutdown_grace_seconds=1.0,
)

"""Receiver lifecycle errors."""

from __future__ import annotations

from votifier.domain.exceptions import ErrorKind, VotifierError


class BindError(VotifierError):
    """Raised when the listening socket cannot be established.

    Typical causes are an address already in use, a host name that does
    not resolve, or a privileged port. This is the only error that
    leaves the receiver core; it is fatal to enabling the service and is
    never retried automatically.

    Attributes:
        host: The host the receiver tried to bind.
        port: The port the receiver tried to bind.
    """

    kind = ErrorKind.FATAL

    def __init__(self, host: str, port: int, message: str = "") -> None:
        super().__init__(message or f"cannot bind {host}:{port}")
        self.host = host
        self.port = port


class ShutdownTimeoutError(VotifierError):
    """Recorded when a connection handler outlives the shutdown grace period.

    The handler is cancelled and shutdown proceeds; a vote in flight at
    that moment is lost.
    """

    kind = ErrorKind.RECOVERABLE

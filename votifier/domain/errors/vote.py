"""Per-connection vote errors.

These errors are raised while turning one inbound connection into a
VoteRecord and handing it to listeners. They are always contained by
the connection handler: the connection is dropped, the vote discarded,
and the accept loop keeps running. None of them is reported back to the
vote-reporting site.
"""

from __future__ import annotations

from votifier.domain.exceptions import ErrorKind, VotifierError


class DecryptionError(VotifierError):
    """Raised when a ciphertext block cannot be decrypted.

    Covers a block of the wrong length, corrupt ciphertext and a block
    encrypted for a different key. The codec raises it without logging;
    the connection handler converts it into MalformedVoteError.

    Usage:
        raise DecryptionError("expected 256 bytes, got 12")
    """

    kind = ErrorKind.RECOVERABLE


class MalformedVoteError(VotifierError):
    """Raised when a connection does not carry a well-formed vote.

    This includes a ciphertext block that never fully arrived, a block
    that failed to decrypt, and plaintext that fails the opening-token or
    field checks.

    Usage:
        raise MalformedVoteError("opening token mismatch")
    """

    kind = ErrorKind.RECOVERABLE


class ListenerDispatchError(VotifierError):
    """Raised (and recorded) when a single listener fails on a vote.

    The dispatcher wraps the listener's own exception in this error,
    logs it, and continues with the next listener.

    Attributes:
        listener_name: Name of the listener that failed.
    """

    kind = ErrorKind.RECOVERABLE

    def __init__(self, listener_name: str, message: str = "") -> None:
        super().__init__(message or f"listener {listener_name!r} failed")
        self.listener_name = listener_name

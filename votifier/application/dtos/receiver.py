"""Result values returned across the receiver's boundaries.

Per-connection and per-listener failures are reported as values rather
than raised, so callers have to look at the outcome to learn what
happened. Only a fatal error (see ErrorKind) ever stops the service.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from votifier.domain.errors.vote import ListenerDispatchError, MalformedVoteError
from votifier.domain.exceptions import ErrorKind, VotifierError
from votifier.domain.models.vote import VoteRecord


class RejectionReason(Enum):
    """Why a connection did not yield a vote."""

    NO_PAYLOAD = "no_payload"  # Peer closed before sending anything (health check)
    INCOMPLETE_BLOCK = "incomplete_block"  # Peer closed mid-block
    READ_TIMEOUT = "read_timeout"  # Block not received within the read timeout
    DECRYPTION_FAILED = "decryption_failed"  # Block did not decrypt with our key
    INVALID_PAYLOAD = "invalid_payload"  # Plaintext failed token/field checks


@dataclass(frozen=True)
class ListenerFailure:
    """One listener that raised while being notified.

    Attributes:
        listener_name: Name of the failing listener.
        error: The wrapping ListenerDispatchError (original is its __cause__).
    """

    listener_name: str
    error: ListenerDispatchError


@dataclass(frozen=True)
class DispatchReport:
    """Result of notifying every registered listener about one vote.

    Attributes:
        vote: The vote that was dispatched.
        delivered: Names of listeners that handled the vote, in order.
        failures: Listeners that raised, in order.
    """

    vote: VoteRecord
    delivered: tuple[str, ...] = ()
    failures: tuple[ListenerFailure, ...] = ()

    @property
    def listener_count(self) -> int:
        """Total listeners that were notified (successfully or not)."""
        return len(self.delivered) + len(self.failures)

    @property
    def all_delivered(self) -> bool:
        """Check if no listener failed."""
        return not self.failures


@dataclass(frozen=True)
class ConnectionOutcome:
    """Result of handling one inbound connection.

    Attributes:
        peer: "host:port" of the TCP peer.
        vote: The decoded vote, if the connection carried a valid one.
        dispatch: Listener delivery report, if a vote was dispatched.
        reason: Why the connection was rejected, if it was.
        error: The MalformedVoteError describing the rejection. A
            decryption failure is chained as its ``__cause__``.
    """

    peer: str
    vote: VoteRecord | None = None
    dispatch: DispatchReport | None = None
    reason: RejectionReason | None = None
    error: MalformedVoteError | None = None

    @property
    def accepted(self) -> bool:
        """Check if a vote was decoded and dispatched."""
        return self.vote is not None

    @classmethod
    def delivered(cls, peer: str, report: DispatchReport) -> "ConnectionOutcome":
        return cls(peer=peer, vote=report.vote, dispatch=report)

    @classmethod
    def rejected(
        cls, peer: str, reason: RejectionReason, error: MalformedVoteError
    ) -> "ConnectionOutcome":
        return cls(peer=peer, reason=reason, error=error)


@dataclass(frozen=True)
class EnableResult:
    """Result of enabling the owning service.

    Attributes:
        host: Host the receiver was asked to listen on.
        port: Port actually bound (or requested, on failure).
        error: The fatal error that prevented startup, if any.
    """

    host: str
    port: int
    error: VotifierError | None = None

    @property
    def success(self) -> bool:
        """Check if the receiver is running."""
        return self.error is None

    @property
    def error_kind(self) -> ErrorKind | None:
        """Kind of the startup error, or None on success."""
        return self.error.kind if self.error is not None else None


@dataclass(frozen=True)
class ShutdownReport:
    """Result of shutting the receiver down.

    Attributes:
        completed: Handlers that finished within the grace period.
        interrupted: Handlers cancelled after the grace period.
        was_running: False if shutdown was a no-op on a stopped receiver.
    """

    completed: int = 0
    interrupted: int = 0
    was_running: bool = True


@dataclass
class ReceiverStats:
    """Running counters kept by the receiver.

    Attributes:
        connections_accepted: Connections handed to a handler.
        votes_delivered: Connections that produced a dispatched vote.
        votes_rejected: Connections rejected, keyed by reason.
        accept_errors: Non-shutdown accept failures.
    """

    connections_accepted: int = 0
    votes_delivered: int = 0
    votes_rejected: dict[RejectionReason, int] = field(default_factory=dict)
    accept_errors: int = 0

    def record(self, outcome: ConnectionOutcome) -> None:
        """Count a finished connection."""
        if outcome.accepted:
            self.votes_delivered += 1
        elif outcome.reason is not None:
            self.votes_rejected[outcome.reason] = (
                self.votes_rejected.get(outcome.reason, 0) + 1
            )

    @property
    def total_rejected(self) -> int:
        return sum(self.votes_rejected.values())

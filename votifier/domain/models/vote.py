"""VoteRecord domain model.

A VoteRecord is one decoded vote notification. It is built by the vote
parser from validated plaintext, handed synchronously to listeners and
never persisted by the receiver itself.

Note:
    ``address`` is the network address reported by the voting site
    inside the encrypted payload. It is not the TCP peer address and the
    receiver does not verify it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class VoteRecord:
    """One vote reported by a vote-reporting service.

    Attributes:
        service_name: Identifier of the voting site (e.g. "ExampleService").
        username: The voter's name as reported by the site.
        address: Originating address as reported by the site.
        timestamp: Vote time as reported by the site, kept verbatim.

    Example:
        >>> vote = VoteRecord("ExampleService", "alice", "203.0.113.5", "1700000000")
        >>> vote.username
        'alice'
    """

    service_name: str
    username: str
    address: str
    timestamp: str

    def __post_init__(self) -> None:
        """Validate that no field is empty."""
        for name in ("service_name", "username", "address", "timestamp"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise TypeError(f"{name} must be str, got {type(value).__name__}")
            if not value.strip():
                raise ValueError(f"{name} must not be empty")

    def to_dict(self) -> dict[str, str]:
        """Convert to a plain dictionary for serialisation by listeners."""
        return asdict(self)

    def __str__(self) -> str:
        return (
            f"Vote(service={self.service_name}, user={self.username}, "
            f"addr={self.address}, time={self.timestamp})"
        )

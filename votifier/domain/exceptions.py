"""Base exception classes for the Votifier domain layer."""

from enum import Enum


class ErrorKind(Enum):
    """Whether an error ends the owning service or only one connection."""

    FATAL = "fatal"  # Surfaced to the host, service cannot run
    RECOVERABLE = "recoverable"  # Contained, logged, processing continues


class VotifierError(Exception):
    """Base exception for all Votifier errors.

    All receiver-specific exceptions MUST inherit from this class so the
    host can catch the whole family in one place. Each subclass declares
    its ``kind`` so callers can tell a fatal startup failure apart from a
    dropped connection without inspecting the concrete type.
    """

    kind: ErrorKind = ErrorKind.RECOVERABLE

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)

    @property
    def is_fatal(self) -> bool:
        """Check if this error must stop the owning service."""
        return self.kind is ErrorKind.FATAL

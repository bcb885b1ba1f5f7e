"""Data transfer objects for Votifier application services."""

from votifier.application.dtos.receiver import (
    ConnectionOutcome,
    DispatchReport,
    EnableResult,
    ListenerFailure,
    ReceiverStats,
    RejectionReason,
    ShutdownReport,
)

__all__ = [
    "ConnectionOutcome",
    "DispatchReport",
    "EnableResult",
    "ListenerFailure",
    "ReceiverStats",
    "RejectionReason",
    "ShutdownReport",
]

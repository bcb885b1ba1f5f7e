"""Application services for Votifier."""

from votifier.application.services.connection_handler import (
    GREETING_PREFIX,
    ConnectionHandler,
)
from votifier.application.services.vote_dispatcher import VoteDispatcher
from votifier.application.services.vote_receiver import ReceiverState, VoteReceiver
from votifier.application.services.votifier_service import VotifierService

__all__ = [
    "GREETING_PREFIX",
    "ConnectionHandler",
    "ReceiverState",
    "VoteDispatcher",
    "VoteReceiver",
    "VotifierService",
]

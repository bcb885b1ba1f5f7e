"""Pure domain services for Votifier."""

from votifier.domain.services.vote_parser import DEFAULT_OPENING_TOKEN, VoteParser

__all__ = ["DEFAULT_OPENING_TOKEN", "VoteParser"]

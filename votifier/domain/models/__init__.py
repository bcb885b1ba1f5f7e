"""Domain models for Votifier."""

from votifier.domain.models.vote import VoteRecord

__all__ = ["VoteRecord"]

"""Configuration module for Votifier.

Available Configurations:
- VotifierConfig: Receiver address, timeouts, key location and debug flag
"""

from votifier.config.votifier_config import (
    DEFAULT_VOTIFIER_CONFIG,
    TEST_VOTIFIER_CONFIG,
    VotifierConfig,
)

__all__ = [
    "VotifierConfig",
    "DEFAULT_VOTIFIER_CONFIG",
    "TEST_VOTIFIER_CONFIG",
]

"""
Pytest configuration and shared fixtures for Votifier tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async function mocking
- Unit tests go in tests/unit/
- Integration tests (real sockets on 127.0.0.1) go in tests/integration/
"""

import pytest

from votifier.domain.models.vote import VoteRecord
from votifier.infrastructure.adapters.crypto import (
    RSAKeyPair,
    RSAVoteCodec,
    generate_key_pair,
)


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from votifier import __version__

    return __version__


@pytest.fixture(scope="session")
def key_pair() -> RSAKeyPair:
    """A 2048-bit key pair shared by the whole session (generation is slow)."""
    return generate_key_pair(2048)


@pytest.fixture(scope="session")
def other_key_pair() -> RSAKeyPair:
    """A second key pair, for wrong-key scenarios."""
    return generate_key_pair(2048)


@pytest.fixture(scope="session")
def codec(key_pair: RSAKeyPair) -> RSAVoteCodec:
    return RSAVoteCodec(key_pair)


@pytest.fixture
def example_vote() -> VoteRecord:
    return VoteRecord(
        service_name="ExampleService",
        username="alice",
        address="203.0.113.5",
        timestamp="1700000000",
    )

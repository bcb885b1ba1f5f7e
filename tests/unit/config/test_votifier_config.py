"""Unit tests for VotifierConfig."""

import dataclasses

import pytest

from votifier.config import DEFAULT_VOTIFIER_CONFIG, TEST_VOTIFIER_CONFIG, VotifierConfig

_ENV_VARS = (
    "VOTIFIER_HOST",
    "VOTIFIER_PORT",
    "VOTIFIER_DEBUG",
    "VOTIFIER_READ_TIMEOUT",
    "VOTIFIER_SHUTDOWN_GRACE",
    "VOTIFIER_KEY_DIR",
    "VOTIFIER_OPENING_TOKEN",
    "VOTIFIER_BACKLOG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_defaults(self) -> None:
        config = DEFAULT_VOTIFIER_CONFIG

        assert config.host == "0.0.0.0"
        assert config.port == 8192
        assert config.debug is False
        assert config.read_timeout_seconds == 5.0
        assert config.shutdown_grace_seconds == 5.0
        assert config.key_directory == "rsa"
        assert config.opening_token == "VOTIFIER"
        assert config.backlog == 50

    def test_test_config_uses_loopback_and_ephemeral_port(self) -> None:
        assert TEST_VOTIFIER_CONFIG.host == "127.0.0.1"
        assert TEST_VOTIFIER_CONFIG.port == 0

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_VOTIFIER_CONFIG.port = 1  # type: ignore[misc]


class TestValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"host": ""},
            {"port": -1},
            {"port": 65536},
            {"read_timeout_seconds": 0},
            {"shutdown_grace_seconds": -0.1},
            {"key_directory": ""},
            {"opening_token": ""},
            {"opening_token": "VOTE\nX"},
            {"backlog": 0},
        ],
    )
    def test_invalid_values_rejected(self, overrides: dict) -> None:
        with pytest.raises(ValueError):
            VotifierConfig(**overrides)

    def test_zero_grace_allowed(self) -> None:
        assert VotifierConfig(shutdown_grace_seconds=0).shutdown_grace_seconds == 0


class TestFromEnvironment:
    def test_no_env_matches_defaults(self) -> None:
        assert VotifierConfig.from_environment() == VotifierConfig()

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VOTIFIER_HOST", "127.0.0.1")
        monkeypatch.setenv("VOTIFIER_PORT", "9000")
        monkeypatch.setenv("VOTIFIER_DEBUG", "yes")
        monkeypatch.setenv("VOTIFIER_READ_TIMEOUT", "2.5")
        monkeypatch.setenv("VOTIFIER_SHUTDOWN_GRACE", "0")
        monkeypatch.setenv("VOTIFIER_KEY_DIR", "/etc/votifier")
        monkeypatch.setenv("VOTIFIER_OPENING_TOKEN", "VOTE")
        monkeypatch.setenv("VOTIFIER_BACKLOG", "10")

        config = VotifierConfig.from_environment()

        assert config == VotifierConfig(
            host="127.0.0.1",
            port=9000,
            debug=True,
            read_timeout_seconds=2.5,
            shutdown_grace_seconds=0.0,
            key_directory="/etc/votifier",
            opening_token="VOTE",
            backlog=10,
        )

    @pytest.mark.parametrize("value", ["abc", "", "8.5"])
    def test_unparseable_port_falls_back(
        self, monkeypatch: pytest.MonkeyPatch, value: str
    ) -> None:
        monkeypatch.setenv("VOTIFIER_PORT", value)

        assert VotifierConfig.from_environment().port == 8192

    def test_unknown_bool_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VOTIFIER_DEBUG", "maybe")

        assert VotifierConfig.from_environment().debug is False

    def test_out_of_range_port_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VOTIFIER_PORT", "70000")

        with pytest.raises(ValueError, match="port"):
            VotifierConfig.from_environment()

"""Unit tests for the VoteRecord domain model."""

from dataclasses import FrozenInstanceError

import pytest

from votifier.domain.models.vote import VoteRecord


class TestVoteRecordCreation:
    """Tests for VoteRecord construction."""

    def test_create_with_all_fields(self) -> None:
        vote = VoteRecord("ExampleService", "alice", "203.0.113.5", "1700000000")

        assert vote.service_name == "ExampleService"
        assert vote.username == "alice"
        assert vote.address == "203.0.113.5"
        assert vote.timestamp == "1700000000"

    @pytest.mark.parametrize("field", ["service_name", "username", "address", "timestamp"])
    def test_empty_field_rejected(self, field: str) -> None:
        values = {
            "service_name": "ExampleService",
            "username": "alice",
            "address": "203.0.113.5",
            "timestamp": "1700000000",
        }
        values[field] = ""

        with pytest.raises(ValueError, match=field):
            VoteRecord(**values)

    def test_whitespace_only_field_rejected(self) -> None:
        with pytest.raises(ValueError, match="username"):
            VoteRecord("ExampleService", "   ", "203.0.113.5", "1700000000")

    def test_non_string_field_rejected(self) -> None:
        with pytest.raises(TypeError, match="timestamp"):
            VoteRecord("ExampleService", "alice", "203.0.113.5", 1700000000)  # type: ignore[arg-type]


class TestVoteRecordImmutability:
    """VoteRecord is shared by every listener and must not change."""

    def test_fields_cannot_be_reassigned(self, example_vote: VoteRecord) -> None:
        with pytest.raises(FrozenInstanceError):
            example_vote.username = "mallory"  # type: ignore[misc]

    def test_equal_records_hash_equal(self) -> None:
        a = VoteRecord("S", "u", "a", "t")
        b = VoteRecord("S", "u", "a", "t")

        assert a == b
        assert hash(a) == hash(b)


class TestVoteRecordSerialisation:
    def test_to_dict(self, example_vote: VoteRecord) -> None:
        assert example_vote.to_dict() == {
            "service_name": "ExampleService",
            "username": "alice",
            "address": "203.0.113.5",
            "timestamp": "1700000000",
        }

    def test_str_is_readable(self, example_vote: VoteRecord) -> None:
        text = str(example_vote)

        assert "ExampleService" in text
        assert "alice" in text

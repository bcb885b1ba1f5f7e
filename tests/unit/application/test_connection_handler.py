"""Unit tests for ConnectionHandler, using in-memory streams."""

import asyncio
import threading
from unittest.mock import AsyncMock, MagicMock

import pytest
from structlog.testing import capture_logs

from tests.helpers.vote_client import build_payload
from votifier.application.dtos.receiver import RejectionReason
from votifier.application.ports.vote_decryptor import VoteDecryptorPort
from votifier.application.ports.vote_listener import CallbackVoteListener
from votifier.application.services.connection_handler import (
    ConnectionHandler,
    format_peer,
)
from votifier.application.services.vote_dispatcher import VoteDispatcher
from votifier.domain.errors.vote import DecryptionError, MalformedVoteError
from votifier.domain.models.vote import VoteRecord
from votifier.domain.services.vote_parser import VoteParser
from votifier.infrastructure.adapters.crypto import RSAVoteCodec
from votifier.infrastructure.adapters.listeners import InMemoryListenerRegistry


def make_reader(data: bytes = b"", eof: bool = True) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    if data:
        reader.feed_data(data)
    if eof:
        reader.feed_eof()
    return reader


def make_writer(peer: object = ("198.51.100.7", 50123)) -> MagicMock:
    writer = MagicMock()
    writer.get_extra_info.return_value = peer
    writer.drain = AsyncMock()
    writer.wait_closed = AsyncMock()
    return writer


def written(writer: MagicMock) -> bytes:
    return b"".join(call.args[0] for call in writer.write.call_args_list)


@pytest.fixture
def received() -> list[VoteRecord]:
    return []


@pytest.fixture
def handler_factory(codec: RSAVoteCodec, received: list[VoteRecord]):
    def factory(
        decryptor: VoteDecryptorPort | None = None,
        read_timeout_seconds: float = 1.0,
        debug: bool = False,
    ) -> ConnectionHandler:
        registry = InMemoryListenerRegistry([CallbackVoteListener(received.append)])
        return ConnectionHandler(
            decryptor=decryptor or codec,
            parser=VoteParser(),
            dispatcher=VoteDispatcher(registry),
            read_timeout_seconds=read_timeout_seconds,
            debug=debug,
            version="2.0.0",
        )

    return factory


class TestGreeting:
    def test_greeting_format(self, handler_factory) -> None:
        assert handler_factory().greeting == b"VOTIFIER 2.0.0\n"

    @pytest.mark.asyncio
    async def test_greeting_sent_first_and_nothing_after(
        self, handler_factory, codec: RSAVoteCodec, example_vote: VoteRecord
    ) -> None:
        writer = make_writer()
        block = codec.encrypt(build_payload(example_vote))

        await handler_factory().handle(make_reader(block), writer)

        assert written(writer) == b"VOTIFIER 2.0.0\n"


class TestValidVote:
    @pytest.mark.asyncio
    async def test_vote_dispatched(
        self,
        handler_factory,
        codec: RSAVoteCodec,
        example_vote: VoteRecord,
        received: list[VoteRecord],
    ) -> None:
        block = codec.encrypt(build_payload(example_vote))

        outcome = await handler_factory().handle(make_reader(block), make_writer())

        assert outcome.accepted
        assert outcome.vote == example_vote
        assert outcome.peer == "198.51.100.7:50123"
        assert outcome.dispatch is not None
        assert outcome.dispatch.listener_count == 1
        assert received == [example_vote]

    @pytest.mark.asyncio
    async def test_bytes_after_block_ignored(
        self,
        handler_factory,
        codec: RSAVoteCodec,
        example_vote: VoteRecord,
        received: list[VoteRecord],
    ) -> None:
        block = codec.encrypt(build_payload(example_vote))

        outcome = await handler_factory().handle(make_reader(block + b"trailing"), make_writer())

        assert outcome.accepted
        assert len(received) == 1


    @pytest.mark.asyncio
    async def test_decrypt_runs_off_event_loop_thread(
        self,
        codec: RSAVoteCodec,
        example_vote: VoteRecord,
        received: list[VoteRecord],
    ) -> None:
        decrypt_threads: list[int] = []

        def decrypt(block: bytes) -> bytes:
            decrypt_threads.append(threading.get_ident())
            return codec.decrypt(block)

        decryptor = MagicMock(spec=VoteDecryptorPort)
        decryptor.block_size = codec.block_size
        decryptor.decrypt.side_effect = decrypt
        handler = ConnectionHandler(
            decryptor=decryptor,
            parser=VoteParser(),
            dispatcher=VoteDispatcher(
                InMemoryListenerRegistry([CallbackVoteListener(received.append)])
            ),
        )
        block = codec.encrypt(build_payload(example_vote))

        outcome = await handler.handle(make_reader(block), make_writer())

        assert outcome.accepted
        assert len(decrypt_threads) == 1
        assert decrypt_threads[0] != threading.get_ident()

class TestRejections:
    @pytest.mark.asyncio
    async def test_health_check_without_payload(
        self, handler_factory, received: list[VoteRecord]
    ) -> None:
        outcome = await handler_factory().handle(make_reader(), make_writer())

        assert not outcome.accepted
        assert outcome.reason is RejectionReason.NO_PAYLOAD
        assert received == []

    @pytest.mark.asyncio
    async def test_short_block_never_decrypted(self, received: list[VoteRecord]) -> None:
        decryptor = MagicMock(spec=VoteDecryptorPort)
        decryptor.block_size = 256
        handler = ConnectionHandler(
            decryptor=decryptor,
            parser=VoteParser(),
            dispatcher=VoteDispatcher(InMemoryListenerRegistry()),
        )

        outcome = await handler.handle(make_reader(b"x" * 100), make_writer())

        assert outcome.reason is RejectionReason.INCOMPLETE_BLOCK
        assert "100 of 256" in str(outcome.error)
        decryptor.decrypt.assert_not_called()

    @pytest.mark.asyncio
    async def test_read_timeout(self, handler_factory, received: list[VoteRecord]) -> None:
        handler = handler_factory(read_timeout_seconds=0.05)

        outcome = await handler.handle(make_reader(b"partial", eof=False), make_writer())

        assert outcome.reason is RejectionReason.READ_TIMEOUT
        assert isinstance(outcome.error, MalformedVoteError)
        assert received == []

    @pytest.mark.asyncio
    async def test_undecryptable_block(self, handler_factory, received: list[VoteRecord]) -> None:
        outcome = await handler_factory().handle(make_reader(b"\xff" * 256), make_writer())

        assert outcome.reason is RejectionReason.DECRYPTION_FAILED
        assert isinstance(outcome.error, MalformedVoteError)
        assert isinstance(outcome.error.__cause__, DecryptionError)
        assert received == []

    @pytest.mark.asyncio
    async def test_wrong_opening_token(
        self,
        handler_factory,
        codec: RSAVoteCodec,
        example_vote: VoteRecord,
        received: list[VoteRecord],
    ) -> None:
        block = codec.encrypt(build_payload(example_vote, opening_token="VOTE"))

        outcome = await handler_factory().handle(make_reader(block), make_writer())

        assert outcome.reason is RejectionReason.INVALID_PAYLOAD
        assert "opening token" in str(outcome.error)
        assert received == []

    @pytest.mark.asyncio
    async def test_too_few_lines(
        self, handler_factory, codec: RSAVoteCodec, received: list[VoteRecord]
    ) -> None:
        block = codec.encrypt(b"VOTIFIER\nExampleService\nalice")

        outcome = await handler_factory().handle(make_reader(block), make_writer())

        assert outcome.reason is RejectionReason.INVALID_PAYLOAD
        assert received == []

    @pytest.mark.asyncio
    async def test_greeting_write_failure(self, handler_factory) -> None:
        writer = make_writer()
        writer.drain.side_effect = ConnectionResetError("reset by peer")

        outcome = await handler_factory().handle(make_reader(), writer)

        assert outcome.reason is RejectionReason.NO_PAYLOAD
        writer.close.assert_called_once()


class TestClose:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "data",
        [b"", b"x" * 10, b"\xff" * 256],
        ids=["empty", "short", "undecryptable"],
    )
    async def test_closed_exactly_once(self, handler_factory, data: bytes) -> None:
        writer = make_writer()

        await handler_factory().handle(make_reader(data), writer)

        writer.close.assert_called_once()
        writer.wait_closed.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_error_not_raised(self, handler_factory) -> None:
        writer = make_writer()
        writer.wait_closed.side_effect = BrokenPipeError()

        outcome = await handler_factory().handle(make_reader(), writer)

        assert outcome.reason is RejectionReason.NO_PAYLOAD


class TestRejectionLogging:
    @pytest.mark.asyncio
    async def test_minimal_log_without_debug(self, handler_factory) -> None:
        handler = handler_factory(debug=False)
        with capture_logs() as logs:
            await handler.handle(make_reader(b"\xff" * 256), make_writer())

        rejected = [e for e in logs if e["event"] == "vote_rejected"]
        assert len(rejected) == 1
        assert rejected[0]["log_level"] == "info"
        assert rejected[0]["reason"] == "decryption_failed"
        assert "exc_info" not in rejected[0]

    @pytest.mark.asyncio
    async def test_detailed_log_with_debug(self, handler_factory) -> None:
        handler = handler_factory(debug=True)
        with capture_logs() as logs:
            await handler.handle(make_reader(b"\xff" * 256), make_writer())

        rejected = [e for e in logs if e["event"] == "vote_rejected"]
        assert len(rejected) == 1
        assert rejected[0]["log_level"] == "warning"
        assert rejected[0]["cause"]
        assert isinstance(rejected[0]["exc_info"], MalformedVoteError)

    @pytest.mark.asyncio
    async def test_health_check_logged_at_debug(self, handler_factory) -> None:
        handler = handler_factory()
        with capture_logs() as logs:
            await handler.handle(make_reader(), make_writer())

        assert [(e["event"], e["log_level"]) for e in logs] == [
            ("connection_closed_without_payload", "debug")
        ]


class TestFormatPeer:
    @pytest.mark.parametrize(
        ("peername", "expected"),
        [
            (("127.0.0.1", 8192), "127.0.0.1:8192"),
            (("::1", 8192, 0, 0), "[::1]:8192"),
            (None, "unknown"),
        ],
    )
    def test_format(self, peername: object, expected: str) -> None:
        assert format_peer(peername) == expected

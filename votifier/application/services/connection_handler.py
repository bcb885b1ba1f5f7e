"""Connection handler: the lifecycle of one inbound vote connection.

Sequence:
  1. Send the greeting ``VOTIFIER <version>\\n``
  2. Read exactly one ciphertext block (bounded by the read timeout)
  3. Decrypt the block
  4. Parse the plaintext into a VoteRecord
  5. Dispatch the vote to every registered listener
  6. Close the connection (always, exactly once)

Nothing is written to the client after the greeting, whether the vote
was accepted or not. A connection that opens and closes without sending
anything (a health check) is harmless.

Every problem on this path is returned as a ConnectionOutcome instead of
being raised, so a misbehaving client can never reach the accept loop.

Logging:
  debug=False  one minimal ``vote_rejected`` line per rejected vote
  debug=True   rejection detail, the chained cause and a traceback,
               plus per-step debug events
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from votifier import __version__
from votifier.application.dtos.receiver import ConnectionOutcome, RejectionReason
from votifier.application.ports.vote_decryptor import VoteDecryptorPort
from votifier.application.services.vote_dispatcher import VoteDispatcher
from votifier.domain.errors.vote import DecryptionError, MalformedVoteError
from votifier.domain.services.vote_parser import VoteParser
from votifier.infrastructure.observability import (
    generate_connection_id,
    set_connection_id,
)

GREETING_PREFIX = "VOTIFIER"
DEFAULT_READ_TIMEOUT_SECONDS = 5.0


def format_peer(peername: Any) -> str:
    """Render a socket peername as ``host:port``."""
    if isinstance(peername, tuple) and len(peername) >= 2:
        host, port = peername[0], peername[1]
        if ":" in str(host):
            return f"[{host}]:{port}"
        return f"{host}:{port}"
    return str(peername) if peername else "unknown"


class ConnectionHandler:
    """Runs the vote protocol on one accepted connection.

    A single instance is shared by all connections; per-connection state
    lives on the stack of ``handle``.
    """

    def __init__(
        self,
        decryptor: VoteDecryptorPort,
        parser: VoteParser,
        dispatcher: VoteDispatcher,
        read_timeout_seconds: float = DEFAULT_READ_TIMEOUT_SECONDS,
        debug: bool = False,
        version: str = __version__,
    ) -> None:
        """Initialize the handler.

        Args:
            decryptor: Decrypts the ciphertext block.
            parser: Turns plaintext into a VoteRecord.
            dispatcher: Notifies listeners.
            read_timeout_seconds: Time a client has to send the whole block.
            debug: Log rejected votes in detail.
            version: Version token sent in the greeting.
        """
        self._decryptor = decryptor
        self._parser = parser
        self._dispatcher = dispatcher
        self._read_timeout = read_timeout_seconds
        self._debug = debug
        self._greeting = f"{GREETING_PREFIX} {version}\n".encode("ascii")
        self._log = structlog.get_logger().bind(service="connection_handler")

    @property
    def greeting(self) -> bytes:
        return self._greeting

    @property
    def read_timeout_seconds(self) -> float:
        return self._read_timeout

    async def handle(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> ConnectionOutcome:
        """Run the protocol on one connection and close it.

        Args:
            reader: Stream for data sent by the client.
            writer: Stream for the greeting; closed before returning.

        Returns:
            The outcome of the connection. Per-connection failures are
            reported here, never raised.
        """
        set_connection_id(generate_connection_id())
        peer = format_peer(writer.get_extra_info("peername"))
        log = self._log.bind(peer=peer)

        try:
            return await self._process(reader, writer, peer, log)
        finally:
            await self._close(writer, log)

    async def _process(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        peer: str,
        log: Any,
    ) -> ConnectionOutcome:
        try:
            writer.write(self._greeting)
            await writer.drain()
        except OSError as e:
            error = MalformedVoteError(f"peer went away before greeting: {e}")
            return self._reject(log, peer, RejectionReason.NO_PAYLOAD, error)
        if self._debug:
            log.debug("greeting_sent")

        block_size = self._decryptor.block_size
        try:
            block = await asyncio.wait_for(
                reader.readexactly(block_size), timeout=self._read_timeout
            )
        except asyncio.IncompleteReadError as e:
            received = len(e.partial)
            reason = (
                RejectionReason.INCOMPLETE_BLOCK if received else RejectionReason.NO_PAYLOAD
            )
            error = MalformedVoteError(
                f"connection closed after {received} of {block_size} bytes"
            )
            return self._reject(log, peer, reason, error)
        except asyncio.TimeoutError:
            error = MalformedVoteError(
                f"no complete {block_size}-byte block within {self._read_timeout}s"
            )
            return self._reject(log, peer, RejectionReason.READ_TIMEOUT, error)
        except OSError as e:
            error = MalformedVoteError(f"connection failed while reading block: {e}")
            return self._reject(log, peer, RejectionReason.INCOMPLETE_BLOCK, error)
        if self._debug:
            log.debug("vote_block_received", size=len(block))

        try:
            plaintext = await asyncio.to_thread(self._decryptor.decrypt, block)
        except DecryptionError as e:
            error = MalformedVoteError("vote block could not be decrypted")
            error.__cause__ = e
            return self._reject(log, peer, RejectionReason.DECRYPTION_FAILED, error)

        try:
            vote = self._parser.parse(plaintext)
        except MalformedVoteError as e:
            return self._reject(log, peer, RejectionReason.INVALID_PAYLOAD, e)

        report = await self._dispatcher.dispatch(vote)
        log.info(
            "vote_dispatched",
            service_name=vote.service_name,
            username=vote.username,
            listeners=report.listener_count,
            failed_listeners=len(report.failures),
        )
        return ConnectionOutcome.delivered(peer, report)

    def _reject(
        self,
        log: Any,
        peer: str,
        reason: RejectionReason,
        error: MalformedVoteError,
    ) -> ConnectionOutcome:
        if reason is RejectionReason.NO_PAYLOAD:
            # Health checks open and close without data
            log.debug("connection_closed_without_payload")
        elif self._debug:
            cause = error.__cause__
            log.warning(
                "vote_rejected",
                reason=reason.value,
                error=str(error),
                cause=str(cause) if cause is not None else None,
                exc_info=error,
            )
        else:
            log.info("vote_rejected", reason=reason.value)
        return ConnectionOutcome.rejected(peer, reason, error)

    async def _close(self, writer: asyncio.StreamWriter, log: Any) -> None:
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            if self._debug:
                log.debug("connection_close_failed", error=str(e))

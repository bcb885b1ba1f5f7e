"""Vote receiver: listening socket, accept loop and handler supervision.

The receiver owns the bound socket and one accept-loop task. Each
accepted connection runs in its own task so a slow or stalled client
never delays the next accept. Handler tasks are tracked in a set, which
lets shutdown wait for them (bounded by a grace period) and cancel the
stragglers deterministically.

State machine:
    STOPPED -> STARTING -> RUNNING -> SHUTTING_DOWN -> STOPPED

Note:
    ``start()`` and ``shutdown()`` are expected to be called from the
    same event loop, by the owning service.
"""

from __future__ import annotations

import asyncio
import os
import socket
from enum import Enum
from types import TracebackType
from typing import Optional

import structlog

from votifier.application.dtos.receiver import ReceiverStats, ShutdownReport
from votifier.application.services.connection_handler import (
    ConnectionHandler,
    format_peer,
)
from votifier.domain.errors.receiver import BindError, ShutdownTimeoutError

DEFAULT_BACKLOG = 50
DEFAULT_SHUTDOWN_GRACE_SECONDS = 5.0
# Pause after a failed accept (e.g. EMFILE) before trying again
ACCEPT_RETRY_DELAY_SECONDS = 0.1


class ReceiverState(Enum):
    """Lifecycle state of the vote receiver."""

    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"


class VoteReceiver:
    """Accepts vote connections and hands each one to a ConnectionHandler.

    Attributes:
        state: Current lifecycle state.
        bound_port: Port actually bound (useful when configured with 0).
        active_connections: Handler tasks still running.
        stats: Running counters.

    Example:
        >>> receiver = VoteReceiver(handler, host="127.0.0.1", port=8192)
        >>> await receiver.start()
        >>> # ... votes arrive ...
        >>> await receiver.shutdown()
    """

    def __init__(
        self,
        handler: ConnectionHandler,
        host: str = "0.0.0.0",
        port: int = 8192,
        backlog: int = DEFAULT_BACKLOG,
        shutdown_grace_seconds: float = DEFAULT_SHUTDOWN_GRACE_SECONDS,
        accept_retry_delay: float = ACCEPT_RETRY_DELAY_SECONDS,
    ) -> None:
        """Initialize the receiver.

        Args:
            handler: Runs the protocol on each accepted connection.
            host: Address to bind.
            port: Port to bind; 0 picks a free port.
            backlog: Listen backlog.
            shutdown_grace_seconds: Default time in-flight handlers get
                to finish on shutdown before being cancelled.
            accept_retry_delay: Pause after a non-shutdown accept error.
        """
        self._handler = handler
        self._host = host
        self._port = port
        self._backlog = backlog
        self._shutdown_grace = shutdown_grace_seconds
        self._accept_retry_delay = accept_retry_delay

        self._state = ReceiverState.STOPPED
        self._socket: Optional[socket.socket] = None
        self._start_attempt = 0
        self._bound_port: Optional[int] = None
        self._accept_task: Optional[asyncio.Task[None]] = None
        self._handlers: set[asyncio.Task[None]] = set()
        self._stats = ReceiverStats()
        self._stopped = asyncio.Event()
        self._stopped.set()
        self._last_report = ShutdownReport(was_running=False)
        self._log = structlog.get_logger().bind(service="vote_receiver")

    @property
    def state(self) -> ReceiverState:
        return self._state

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        """Configured port (may be 0)."""
        return self._port

    @property
    def bound_port(self) -> Optional[int]:
        """Port the socket is bound to, or None when not running."""
        return self._bound_port

    @property
    def active_connections(self) -> int:
        return len(self._handlers)

    @property
    def stats(self) -> ReceiverStats:
        return self._stats

    async def start(self) -> None:
        """Bind the listening socket and start accepting connections.

        Calling start on a running receiver is a no-op. If shutdown is
        called before the bind completes, the socket is closed and the
        receiver stays STOPPED.

        Raises:
            BindError: If the address cannot be resolved or bound. The
                receiver is left STOPPED.
            RuntimeError: If called while starting or shutting down.
        """
        if self._state is ReceiverState.RUNNING:
            return
        if self._state is not ReceiverState.STOPPED:
            raise RuntimeError(f"cannot start receiver while {self._state.value}")

        self._state = ReceiverState.STARTING
        self._start_attempt += 1
        attempt = self._start_attempt
        try:
            sock = await self._bind()
        except OSError as e:
            if attempt == self._start_attempt:
                self._state = ReceiverState.STOPPED
            self._log.error(
                "receiver_bind_failed",
                host=self._host,
                port=self._port,
                error=str(e),
            )
            raise BindError(
                self._host, self._port, f"cannot bind {self._host}:{self._port}: {e}"
            ) from e

        if self._state is not ReceiverState.STARTING or attempt != self._start_attempt:
            # shutdown() ran while the bind was in progress
            sock.close()
            self._log.info("receiver_start_abandoned", host=self._host, port=self._port)
            return

        self._socket = sock
        self._bound_port = sock.getsockname()[1]
        self._stopped.clear()
        self._state = ReceiverState.RUNNING
        self._accept_task = asyncio.create_task(
            self._accept_loop(), name="votifier-accept-loop"
        )
        self._log.info("receiver_started", host=self._host, port=self._bound_port)

    async def shutdown(self, grace_period: Optional[float] = None) -> ShutdownReport:
        """Stop accepting and wind down in-flight connections.

        The listening socket is closed first, then running handlers get
        up to ``grace_period`` seconds to finish. Handlers still running
        after that are cancelled; a vote in flight at that point is lost.

        Calling shutdown on a stopped receiver is a no-op. Concurrent
        callers wait for the same shutdown and get the same report.

        Args:
            grace_period: Override for the configured grace period.

        Returns:
            ShutdownReport with completed and interrupted handler counts.
        """
        if self._state is ReceiverState.STOPPED:
            return ShutdownReport(was_running=False)
        if self._state is ReceiverState.SHUTTING_DOWN:
            await self._stopped.wait()
            return self._last_report

        grace = self._shutdown_grace if grace_period is None else grace_period
        self._state = ReceiverState.SHUTTING_DOWN
        self._log.info(
            "receiver_shutting_down",
            active_connections=len(self._handlers),
            grace_seconds=grace,
        )

        await self._stop_accepting()

        completed = 0
        interrupted = 0
        pending = set(self._handlers)
        if pending:
            done, stragglers = await asyncio.wait(pending, timeout=grace)
            completed = len(done)
            for task in stragglers:
                error = ShutdownTimeoutError(
                    f"connection handler did not finish within {grace}s"
                )
                self._log.warning(
                    "connection_handler_interrupted",
                    task=task.get_name(),
                    error=str(error),
                )
                task.cancel()
            if stragglers:
                await asyncio.gather(*stragglers, return_exceptions=True)
            interrupted = len(stragglers)

        self._last_report = ShutdownReport(completed=completed, interrupted=interrupted)
        self._bound_port = None
        self._state = ReceiverState.STOPPED
        self._stopped.set()
        self._log.info(
            "receiver_stopped",
            completed=completed,
            interrupted=interrupted,
            votes_delivered=self._stats.votes_delivered,
            votes_rejected=self._stats.total_rejected,
        )
        return self._last_report

    async def wait_stopped(self) -> None:
        """Wait until the receiver is STOPPED."""
        await self._stopped.wait()

    async def __aenter__(self) -> "VoteReceiver":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.shutdown()

    async def _bind(self) -> socket.socket:
        loop = asyncio.get_running_loop()
        infos = await loop.getaddrinfo(
            self._host,
            self._port,
            type=socket.SOCK_STREAM,
            flags=socket.AI_PASSIVE,
        )
        if not infos:
            raise OSError(f"no address found for {self._host}")
        family, sock_type, proto, _, address = infos[0]

        sock = socket.socket(family, sock_type, proto)
        try:
            if os.name == "posix":
                # Allow quick restarts while old connections sit in TIME_WAIT
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(address)
            sock.listen(self._backlog)
            sock.setblocking(False)
        except OSError:
            sock.close()
            raise
        return sock

    async def _stop_accepting(self) -> None:
        if self._accept_task is not None:
            self._accept_task.cancel()
            try:
                await self._accept_task
            except asyncio.CancelledError:
                pass
            self._accept_task = None
        if self._socket is not None:
            self._socket.close()
            self._socket = None

    async def _accept_loop(self) -> None:
        """Accept connections until the receiver leaves RUNNING.

        An accept error while RUNNING (e.g. running out of file
        descriptors) is logged and accepting resumes after a short pause.
        An error after shutdown has begun ends the loop normally.
        """
        loop = asyncio.get_running_loop()
        assert self._socket is not None
        listening = self._socket

        while self._state is ReceiverState.RUNNING:
            try:
                conn, _ = await loop.sock_accept(listening)
            except OSError as e:
                if self._state is not ReceiverState.RUNNING:
                    break
                self._stats.accept_errors += 1
                self._log.error("accept_failed", error=str(e), errno=e.errno)
                await asyncio.sleep(self._accept_retry_delay)
                continue
            self._spawn_handler(conn)

    def _spawn_handler(self, conn: socket.socket) -> None:
        self._stats.connections_accepted += 1
        try:
            peer = format_peer(conn.getpeername())
        except OSError:
            peer = "unknown"
        task = asyncio.create_task(self._run_handler(conn), name=f"votifier-conn-{peer}")
        self._handlers.add(task)
        task.add_done_callback(self._handlers.discard)

    async def _run_handler(self, conn: socket.socket) -> None:
        """Run one connection; nothing raised here reaches the accept loop."""
        try:
            reader, writer = await asyncio.open_connection(sock=conn)
        except OSError as e:
            conn.close()
            self._log.warning("connection_setup_failed", error=str(e))
            return

        try:
            outcome = await self._handler.handle(reader, writer)
        except Exception:
            self._log.exception("connection_handler_crashed")
            return
        self._stats.record(outcome)

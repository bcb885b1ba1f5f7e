"""Votifier service: the object a host application owns.

The service is constructed once with everything it needs (config,
decryptor built from the loaded key pair, listener registry) and passes
those explicitly to the components it builds. There is no global
"current instance"; anything that needs the receiver gets the service.

Enable/disable mirror the host's plugin lifecycle:

    service = VotifierService(config, decryptor, registry)
    result = await service.enable()
    if not result.success:
        ...  # report; the host keeps running
    ...
    await service.disable()
"""

from __future__ import annotations

import structlog

from votifier import __version__
from votifier.application.dtos.receiver import EnableResult, ShutdownReport
from votifier.application.ports.listener_registry import ListenerRegistryPort
from votifier.application.ports.vote_decryptor import VoteDecryptorPort
from votifier.application.ports.vote_listener import VoteListener
from votifier.application.services.connection_handler import ConnectionHandler
from votifier.application.services.vote_dispatcher import VoteDispatcher
from votifier.application.services.vote_receiver import ReceiverState, VoteReceiver
from votifier.config.votifier_config import VotifierConfig
from votifier.domain.errors.receiver import BindError
from votifier.domain.services.vote_parser import VoteParser


class VotifierService:
    """Owns the vote receiver and its collaborators for one host."""

    def __init__(
        self,
        config: VotifierConfig,
        decryptor: VoteDecryptorPort,
        registry: ListenerRegistryPort,
        version: str = __version__,
    ) -> None:
        """Build the receiver stack.

        Args:
            config: Receiver configuration supplied by the host.
            decryptor: Decryptor holding the loaded key pair.
            registry: Listeners to notify about each vote.
            version: Version token sent in the greeting.
        """
        self._config = config
        self._decryptor = decryptor
        self._registry = registry
        self._version = version

        self._parser = VoteParser(opening_token=config.opening_token)
        self._dispatcher = VoteDispatcher(registry)
        self._handler = ConnectionHandler(
            decryptor=decryptor,
            parser=self._parser,
            dispatcher=self._dispatcher,
            read_timeout_seconds=config.read_timeout_seconds,
            debug=config.debug,
            version=version,
        )
        self._receiver = VoteReceiver(
            handler=self._handler,
            host=config.host,
            port=config.port,
            backlog=config.backlog,
            shutdown_grace_seconds=config.shutdown_grace_seconds,
        )
        self._log = structlog.get_logger().bind(service="votifier")

    @property
    def config(self) -> VotifierConfig:
        return self._config

    @property
    def receiver(self) -> VoteReceiver:
        return self._receiver

    @property
    def registry(self) -> ListenerRegistryPort:
        return self._registry

    @property
    def version(self) -> str:
        return self._version

    @property
    def enabled(self) -> bool:
        return self._receiver.state is ReceiverState.RUNNING

    def register_listener(self, listener: VoteListener) -> None:
        """Register a listener; it receives votes from the next one on."""
        self._registry.register(listener)

    def unregister_listener(self, listener: VoteListener) -> bool:
        return self._registry.unregister(listener)

    async def enable(self) -> EnableResult:
        """Start the receiver.

        Returns:
            EnableResult. A BindError is returned as a fatal result
            rather than raised, so the host can report it and carry on.
        """
        if self._config.debug:
            self._log.info("debug_mode_enabled")

        try:
            await self._receiver.start()
        except BindError as e:
            self._log.error(
                "votifier_did_not_initialize_properly",
                host=e.host,
                port=e.port,
                error=str(e),
                error_kind=e.kind.value,
            )
            return EnableResult(host=self._config.host, port=self._config.port, error=e)

        port = self._receiver.bound_port or self._config.port
        self._log.info(
            "votifier_enabled",
            host=self._config.host,
            port=port,
            version=self._version,
            listeners=len(self._registry),
        )
        return EnableResult(host=self._config.host, port=port)

    async def disable(self) -> ShutdownReport:
        """Stop the receiver. Safe to call when already disabled."""
        report = await self._receiver.shutdown()
        if report.was_running:
            self._log.info("votifier_disabled")
        return report

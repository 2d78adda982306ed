"""ServiceClient — executes commands through the event pipeline and a transport."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .command import Command
from .config import PATH_DELIMITER, ConfigCollection
from .events.pipeline import EventPipeline, ListenerRegistration
from .events.types import CommandErrorEvent, Phase, Priority
from .iterator import CommandToRequestIterator
from .primitives.exceptions import CommandException
from .results import BatchResults
from .transaction import CommandTransaction, TransactionState

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .ports.transport import ITransport

logger = logging.getLogger(__name__)


class ServiceClient:
    """Runs commands through prepare → send → process/error.

    Parameters
    ----------
    transport:
        :class:`~command_client_core.ports.transport.ITransport` used to
        send requests.
    config:
        Client configuration. ``defaults`` holds parameters merged into
        every command created by :meth:`make_command`.
    pipeline:
        Optional :class:`~command_client_core.events.pipeline.EventPipeline`
        to share listeners between clients. A new one is created otherwise.
    """

    def __init__(
        self,
        transport: ITransport,
        config: dict[str, Any] | None = None,
        *,
        pipeline: EventPipeline | None = None,
    ) -> None:
        self._transport = transport
        config = dict(config or {})
        config.setdefault("defaults", {})
        self._config = ConfigCollection(config)
        self._pipeline = pipeline or EventPipeline()

    @property
    def transport(self) -> ITransport:
        return self._transport

    @property
    def pipeline(self) -> EventPipeline:
        return self._pipeline

    # ── Commands ─────────────────────────────────────────────────

    def make_command(
        self, name: str, parameters: dict[str, Any] | None = None
    ) -> Command:
        """Create a command, applying the configured default parameters."""
        defaults = self._config.get("defaults") or {}
        return Command(name=name, parameters={**defaults, **(parameters or {})})

    async def execute(self, command: Command) -> Any:
        """Execute a single *command* and return its result.

        Returns ``None`` when no listener produced a result. Every failure
        is raised as a :class:`CommandException`.
        """
        transaction = CommandTransaction(self, command, pipeline=self._pipeline)
        logger.debug("Executing command %s (id=%s)", command.name, command.command_id)
        try:
            return await self._run(transaction)
        except CommandException:
            # Let command exceptions pass through untouched
            raise
        except Exception as exc:
            raise CommandException.wrap(transaction, exc) from exc

    async def execute_all(
        self,
        commands: Iterable[Command],
        *,
        parallel: int | None = None,
        listeners: Iterable[ListenerRegistration] = (),
    ) -> None:
        """Send many commands through the transport's bulk send.

        Outcomes are only observable through ``process`` / ``error``
        listeners (pass call-scoped ones in *listeners*). A failing command
        never raises here; only a failure of the bulk send itself does.
        """
        transfers = self._transfers(commands, listeners)
        await self._transport.send_all(transfers, parallel=parallel)

    async def batch(
        self,
        commands: Iterable[Command],
        *,
        parallel: int | None = None,
        listeners: Iterable[ListenerRegistration] = (),
    ) -> BatchResults:
        """Execute *commands* concurrently and collect every outcome.

        The returned mapping holds one entry per command: the command's
        result, or the :class:`CommandException` it failed with.
        """
        commands = list(commands)
        results = BatchResults(commands)
        capturing = ListenerRegistration(
            phase=Phase.ERROR,
            listener=_capture_command_error,
            priority=Priority.EARLY,
            once=True,
        )
        transfers = self._transfers(commands, [capturing, *listeners])
        await self._transport.send_all(transfers, parallel=parallel)

        # Outcomes come from the transactions, so listeners that stop
        # propagation ahead of the capture cannot hide a failure.
        for transfer in transfers.transfers:
            transaction = transfer.transaction
            if transaction.error is not None:
                results.set(transfer.command, transaction.error)
            else:
                results.set(transfer.command, transaction.result)

        failed = len(results.failures())
        logger.info(
            "Batch of %d commands finished (%d failed)", len(results), failed
        )
        return results

    # ── Configuration ────────────────────────────────────────────

    def get_config(self, key_or_path: str | None = None) -> Any:
        """Return the whole config, a top-level key, or a ``"a/b"`` path."""
        if key_or_path is None:
            return self._config.to_dict()
        if PATH_DELIMITER not in key_or_path:
            return self._config.get(key_or_path)
        return self._config.get_path(key_or_path)

    def set_config(self, key_or_path: str, value: Any) -> None:
        self._config.set_path(key_or_path, value)

    # ── Internals ────────────────────────────────────────────────

    async def _run(self, transaction: CommandTransaction) -> Any:
        pipeline = transaction.pipeline
        await pipeline.prepare(transaction)
        # A prepare listener injected a result: nothing to send.
        if transaction.result is not None:
            transaction.state = TransactionState.RESOLVED
            return transaction.result
        transaction.state = TransactionState.PREPARED

        try:
            response = await self._transport.send(transaction.request)
        except CommandException:
            raise
        except Exception as exc:
            transaction.state = TransactionState.FAILED
            event = await pipeline.error(transaction, exc)
            if not event.handled:
                raise event.exception from exc
            return transaction.result

        transaction.response = response
        transaction.state = TransactionState.SENT
        await pipeline.process(transaction)
        transaction.state = TransactionState.PROCESSED
        return transaction.result

    def _transfers(
        self,
        commands: Iterable[Command],
        listeners: Iterable[ListenerRegistration],
    ) -> CommandToRequestIterator:
        registrations = [
            *listeners,
            ListenerRegistration(
                phase=Phase.ERROR,
                listener=_suppress_command_error,
                priority=Priority.LATE,
            ),
        ]
        return CommandToRequestIterator(commands, self, listeners=registrations)


def _capture_command_error(event: CommandErrorEvent) -> None:
    """Keep a batch failure from raising; its outcome is read afterwards."""
    event.mark_handled()


def _suppress_command_error(event: CommandErrorEvent) -> None:
    """Keep one failing command from aborting a bulk send."""
    if event.handled:
        return
    logger.warning(
        "Command %s failed during bulk send: %s", event.command.name, event.exception
    )
    event.mark_handled()

"""CommandToRequestIterator — lazily turns commands into transport requests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .primitives.exceptions import CommandException, IteratorConsumedError
from .transaction import CommandTransaction, TransactionState

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .command import Command
    from .events.pipeline import ListenerRegistration
    from .events.types import CommandErrorEvent, CommandEvent
    from .ports.service_client import IServiceClient

logger = logging.getLogger(__name__)


class RequestTransfer:
    """One command's request, as handed to ``ITransport.send_all``.

    The transport reports the outcome through :meth:`complete` or
    :meth:`fail`, which run the command's process or error phase. Transfers
    that are already ``resolved`` carry no request and must not be sent.
    """

    def __init__(self, transaction: CommandTransaction) -> None:
        self.transaction = transaction

    @property
    def command(self) -> Command:
        return self.transaction.command

    @property
    def request(self) -> Any:
        if self.resolved:
            return None
        return self.transaction.request

    @property
    def resolved(self) -> bool:
        return self.transaction.state in (
            TransactionState.RESOLVED,
            TransactionState.FAILED,
        )

    async def complete(self, response: Any) -> CommandEvent | None:
        """Attach *response* and run the process phase."""
        transaction = self.transaction
        transaction.response = response
        transaction.state = TransactionState.SENT
        try:
            event = await transaction.pipeline.process(transaction)
        except Exception as exc:
            logger.debug(
                "Process listener failed for %s: %s", transaction.command.name, exc
            )
            return await self.fail(exc, response)
        transaction.state = TransactionState.PROCESSED
        return event

    async def fail(
        self, exc: BaseException, response: Any = None
    ) -> CommandErrorEvent | None:
        """Run the error phase for a failed transfer.

        A listener raising during the error phase becomes the command's
        recorded error instead of aborting the bulk send; ``None`` is
        returned in that case.
        """
        transaction = self.transaction
        if response is not None:
            transaction.response = response
        transaction.state = TransactionState.FAILED
        try:
            return await transaction.pipeline.error(transaction, exc, response)
        except Exception as listener_exc:
            logger.warning(
                "Error listener failed for %s: %s",
                transaction.command.name,
                listener_exc,
            )
            transaction.error = CommandException.wrap(transaction, listener_exc)
            return None

    def __repr__(self) -> str:
        return f"RequestTransfer({self.transaction!r})"


class CommandToRequestIterator:
    """Single-pass async iterator of :class:`RequestTransfer` objects.

    Commands are pulled one at a time; each is wrapped in a transaction
    and run through the prepare phase only when the transport asks for
    the next request. Exactly one transfer is yielded per command, in
    input order, even when prepare resolved the command on the spot.
    Yielded transfers are kept in :attr:`transfers` so their outcomes can
    be read once the bulk send has finished.
    """

    def __init__(
        self,
        commands: Iterable[Command],
        client: IServiceClient,
        *,
        listeners: Iterable[ListenerRegistration] = (),
    ) -> None:
        self._commands = iter(commands)
        self._client = client
        self._listeners = list(listeners)
        self._started = False
        self.transfers: list[RequestTransfer] = []

    def __aiter__(self) -> CommandToRequestIterator:
        if self._started:
            raise IteratorConsumedError("Command iterator can only be consumed once")
        self._started = True
        return self

    async def __anext__(self) -> RequestTransfer:
        try:
            command = next(self._commands)
        except StopIteration:
            raise StopAsyncIteration from None

        pipeline = self._client.pipeline.extend(self._listeners)
        transaction = CommandTransaction(self._client, command, pipeline=pipeline)
        transfer = RequestTransfer(transaction)
        self.transfers.append(transfer)

        try:
            await pipeline.prepare(transaction)
        except Exception as exc:
            await transfer.fail(exc)
            return transfer

        if transaction.result is not None:
            transaction.state = TransactionState.RESOLVED
            logger.debug("Command %s resolved during prepare", command.name)
        else:
            transaction.state = TransactionState.PREPARED
        return transfer

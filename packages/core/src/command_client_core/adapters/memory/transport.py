"""InMemoryTransport — callable-backed fake of ITransport for tests and demos."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from ...ports.transport import ITransport
from ...primitives.exceptions import CommandException, TransportError
from ...utils import maybe_await

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from ...iterator import RequestTransfer

logger = logging.getLogger("command_client.transport")

DEFAULT_PARALLEL = 25


class InMemoryTransport(ITransport):
    """In-memory implementation of :class:`ITransport`.

    Every request is answered by *handler*, which may be a plain function
    or a coroutine function. Anything the handler raises (other than a
    :class:`CommandException`) surfaces as a :class:`TransportError` chained
    to the original exception. All sent requests are recorded in
    :attr:`sent`.
    """

    def __init__(
        self,
        handler: Callable[[Any], Awaitable[Any] | Any],
        *,
        parallel: int = DEFAULT_PARALLEL,
    ) -> None:
        self._handler = handler
        self._parallel = parallel
        self.sent: list[Any] = []

    async def send(self, request: Any) -> Any:
        self.sent.append(request)
        try:
            return await maybe_await(self._handler(request))
        except (CommandException, TransportError):
            raise
        except Exception as exc:
            raise TransportError(f"Request failed: {exc}", request) from exc

    async def send_all(
        self,
        transfers: AsyncIterator[RequestTransfer],
        *,
        parallel: int | None = None,
    ) -> None:
        semaphore = asyncio.Semaphore(parallel or self._parallel)
        tasks: list[asyncio.Task[None]] = []

        async def _transfer(transfer: RequestTransfer) -> None:
            try:
                response = await self.send(transfer.request)
            except Exception as exc:
                await transfer.fail(exc)
            else:
                await transfer.complete(response)
            finally:
                semaphore.release()

        try:
            async for transfer in transfers:
                if transfer.resolved:
                    continue
                # Pull the next command only once a slot is free.
                await semaphore.acquire()
                tasks.append(asyncio.ensure_future(_transfer(transfer)))
        finally:
            # In-flight transfers always finish, even if pulling failed.
            outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        errors = [outcome for outcome in outcomes if isinstance(outcome, Exception)]
        for error in errors:
            logger.error("Bulk send transfer failed: %s", error, exc_info=error)
        logger.debug("Bulk send finished: %d requests", len(tasks))
        if errors:
            raise errors[0]

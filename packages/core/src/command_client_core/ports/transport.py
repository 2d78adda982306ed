"""ITransport — the network client that commands are dispatched through."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from ..iterator import RequestTransfer


@runtime_checkable
class ITransport(Protocol):
    """Protocol for the transport client used by :class:`ServiceClient`.

    The command core never looks inside requests or responses; it only
    hands them to the transport and back to listeners.
    """

    async def send(self, request: Any) -> Any:
        """Send a single request and return its response.

        Raises whatever transport error occurred; the caller normalizes it.
        """
        ...

    async def send_all(
        self,
        transfers: AsyncIterator[RequestTransfer],
        *,
        parallel: int | None = None,
    ) -> None:
        """Drive a lazy stream of transfers to completion.

        Parameters
        ----------
        transfers:
            Pulled on demand. Transfers flagged ``resolved`` must not be
            sent. Every other transfer is finished with exactly one call to
            ``transfer.complete(response)`` or ``transfer.fail(exc)``.
        parallel:
            Maximum number of requests in flight at once.
        """
        ...

"""CommandTransaction — ties one command to its request, response and result."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .command import Command
    from .events.pipeline import EventPipeline
    from .ports.service_client import IServiceClient
    from .primitives.exceptions import CommandException


class TransactionState(str, Enum):
    """Lifecycle markers recorded on a transaction."""

    CREATED = "created"
    PREPARED = "prepared"
    RESOLVED = "resolved"
    SENT = "sent"
    PROCESSED = "processed"
    FAILED = "failed"


class CommandTransaction:
    """Mutable record for a single command execution.

    Created per ``execute`` call (or per command in a bulk send) and
    discarded once the outcome has been read. Setting :attr:`result`
    during the prepare phase short-circuits the transport send. :attr:`error`
    holds the normalized failure of the last error phase, cleared when a
    listener recovers with a result.
    """

    def __init__(
        self,
        client: IServiceClient,
        command: Command,
        *,
        pipeline: EventPipeline,
    ) -> None:
        self._client = client
        self._command = command
        self._pipeline = pipeline
        self.request: Any = None
        self.response: Any = None
        self.result: Any = None
        self.error: CommandException | None = None
        self.state = TransactionState.CREATED

    @property
    def client(self) -> IServiceClient:
        return self._client

    @property
    def command(self) -> Command:
        return self._command

    @property
    def pipeline(self) -> EventPipeline:
        """Pipeline whose listeners apply to this transaction."""
        return self._pipeline

    def __repr__(self) -> str:
        return (
            f"CommandTransaction(command={self._command.name!r}, "
            f"state={self.state.value})"
        )

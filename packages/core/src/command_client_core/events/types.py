"""Event records emitted by the command pipeline."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import CommandException

if TYPE_CHECKING:
    from ..command import Command
    from ..ports.service_client import IServiceClient
    from ..transaction import CommandTransaction


class Phase(str, Enum):
    """Named points in a command's lifecycle."""

    PREPARE = "prepare"
    PROCESS = "process"
    ERROR = "error"


class Priority(IntEnum):
    """Listener tiers. Lower values run first."""

    EARLY = -100
    NORMAL = 0
    LATE = 100


class CommandEvent:
    """Base class for events carrying a command transaction."""

    phase: Phase

    def __init__(self, transaction: CommandTransaction) -> None:
        self._transaction = transaction
        self._propagation_stopped = False

    @property
    def transaction(self) -> CommandTransaction:
        return self._transaction

    @property
    def command(self) -> Command:
        return self._transaction.command

    @property
    def client(self) -> IServiceClient:
        return self._transaction.client

    @property
    def is_propagation_stopped(self) -> bool:
        return self._propagation_stopped

    def stop_propagation(self) -> None:
        """Prevent listeners further down the phase from running."""
        self._propagation_stopped = True


class PrepareEvent(CommandEvent):
    """Emitted before a command is sent.

    Listeners serialize the command into :attr:`request`, or resolve the
    command outright with :meth:`intercept`.
    """

    phase = Phase.PREPARE

    @property
    def request(self) -> Any:
        return self._transaction.request

    @request.setter
    def request(self, request: Any) -> None:
        self._transaction.request = request

    def intercept(self, result: Any) -> None:
        """Resolve the command with *result*; the transport is skipped."""
        self._transaction.result = result
        self.stop_propagation()


class ProcessEvent(CommandEvent):
    """Emitted after a response is received, to turn it into a result."""

    phase = Phase.PROCESS

    @property
    def response(self) -> Any:
        return self._transaction.response

    @property
    def result(self) -> Any:
        return self._transaction.result

    @result.setter
    def result(self, result: Any) -> None:
        self._transaction.result = result


class RequestErrorEvent:
    """Transport-level failure of a single request."""

    def __init__(
        self, request: Any, exception: BaseException, response: Any = None
    ) -> None:
        self.request = request
        self.exception = exception
        self.response = response
        self.handled = False

    def mark_handled(self) -> None:
        self.handled = True


class CommandErrorEvent(CommandEvent):
    """Emitted when sending or processing a command fails.

    Unless a listener marks it handled or stops its propagation, the
    normalized :class:`CommandException` is raised to the caller.
    """

    phase = Phase.ERROR

    def __init__(
        self, transaction: CommandTransaction, request_error: RequestErrorEvent
    ) -> None:
        super().__init__(transaction)
        self._request_error = request_error
        self._exception = CommandException.wrap(transaction, request_error.exception)
        self._intercepted = False
        transaction.error = self._exception

    @property
    def request_error(self) -> RequestErrorEvent:
        return self._request_error

    @property
    def exception(self) -> CommandException:
        """The failure, normalized to a CommandException."""
        return self._exception

    @property
    def response(self) -> Any:
        return self._request_error.response

    @property
    def handled(self) -> bool:
        return self._request_error.handled

    @property
    def intercepted(self) -> bool:
        return self._intercepted

    def mark_handled(self) -> None:
        """Suppress raising the error; the command result stays as-is."""
        self._request_error.mark_handled()

    def stop_propagation(self) -> None:
        """Stop later listeners; a stopped error is also treated as handled."""
        super().stop_propagation()
        self.mark_handled()

    def intercept(self, result: Any) -> None:
        """Recover from the error by injecting *result*."""
        self._transaction.result = result
        self._transaction.error = None
        self._intercepted = True
        self.stop_propagation()

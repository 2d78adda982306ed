"""Exceptions raised by the command client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..command import Command
    from ..transaction import CommandTransaction


class CommandClientError(Exception):
    """Root exception for the command client."""


class CommandException(CommandClientError):
    """Raised when a command fails to execute.

    This is the only exception type that crosses :meth:`ServiceClient.execute`.
    It keeps a reference to the failing transaction so callers can inspect
    which command failed and how far the request/response cycle got.
    """

    def __init__(
        self,
        message: str,
        transaction: CommandTransaction,
        cause: BaseException | None = None,
    ) -> None:
        self.transaction = transaction
        self.cause = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    @classmethod
    def wrap(
        cls, transaction: CommandTransaction, exc: BaseException
    ) -> CommandException:
        """Normalize *exc* into a CommandException (never double-wraps)."""
        if isinstance(exc, CommandException):
            return exc
        return cls(f"Error executing command: {exc}", transaction, exc)

    @property
    def command(self) -> Command:
        return self.transaction.command

    @property
    def request(self) -> Any:
        return self.transaction.request

    @property
    def response(self) -> Any:
        return self.transaction.response


class TransportError(CommandClientError):
    """Raised by transport adapters when a request cannot be sent."""

    def __init__(self, message: str, request: Any = None) -> None:
        self.request = request
        super().__init__(message)


class IteratorConsumedError(CommandClientError):
    """Raised when a single-pass command iterator is iterated twice."""

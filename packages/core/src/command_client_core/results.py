"""BatchResults — outcomes of a batch, keyed by command identity."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from .primitives.exceptions import CommandException

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .command import Command

_PENDING = object()


class BatchResults(Mapping["Command", Any]):
    """Read-only mapping of ``Command -> result | CommandException``.

    Each command gets a slot when the batch starts, in input order.
    Lookups go through ``id(command)``, so commands with equal parameters
    never collide and completion order does not matter.
    """

    def __init__(self, commands: Iterable[Command] = ()) -> None:
        self._commands: list[Command] = []
        self._outcomes: list[Any] = []
        self._slots: dict[int, int] = {}
        for command in commands:
            self.allocate(command)

    def allocate(self, command: Command) -> int:
        """Reserve a slot for *command* and return its index."""
        slot = self._slots.get(id(command))
        if slot is None:
            slot = len(self._commands)
            self._slots[id(command)] = slot
            self._commands.append(command)
            self._outcomes.append(_PENDING)
        return slot

    def set(self, command: Command, outcome: Any) -> None:
        self._outcomes[self.allocate(command)] = outcome

    def __getitem__(self, command: Command) -> Any:
        slot = self._slots.get(id(command))
        if slot is None:
            raise KeyError(command)
        outcome = self._outcomes[slot]
        return None if outcome is _PENDING else outcome

    def __contains__(self, command: object) -> bool:
        return id(command) in self._slots

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def successes(self) -> dict[str, Any]:
        """Results of commands that did not fail, keyed by ``command_id``."""
        return {
            command.command_id: self[command]
            for command in self._commands
            if not isinstance(self[command], CommandException)
        }

    def failures(self) -> dict[str, CommandException]:
        """Errors of commands that failed, keyed by ``command_id``."""
        return {
            command.command_id: self[command]
            for command in self._commands
            if isinstance(self[command], CommandException)
        }

    def __repr__(self) -> str:
        return (
            f"BatchResults(total={len(self)}, "
            f"failures={len(self.failures())})"
        )

"""EventPipeline — ordered, cancellable listener chains per phase."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from itertools import count
from typing import TYPE_CHECKING, Any

from ..utils import maybe_await
from .types import (
    CommandErrorEvent,
    CommandEvent,
    Phase,
    PrepareEvent,
    Priority,
    ProcessEvent,
    RequestErrorEvent,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from ..transaction import CommandTransaction

logger = logging.getLogger(__name__)

_sequence = count()


@dataclass(eq=False)
class ListenerRegistration:
    """A listener attached to one phase.

    Registrations sort by ``priority`` and then by the order in which
    they were created.
    """

    phase: Phase
    listener: Callable[[Any], Awaitable[None] | None]
    priority: Priority = Priority.NORMAL
    once: bool = False
    spent: bool = False
    sequence: int = field(default_factory=lambda: next(_sequence))

    def sort_key(self) -> tuple[int, int]:
        return (int(self.priority), self.sequence)

    def fresh(self) -> ListenerRegistration:
        """Copy with its own ``once`` state."""
        return replace(self, spent=False)


class EventPipeline:
    """Holds listeners for the prepare, process and error phases.

    Each phase runs its listeners in priority order; any listener may stop
    propagation. A listener that raises aborts the phase and the exception
    propagates to the caller.

    ``once`` listeners registered on a pipeline are shared with the child
    pipelines created through :meth:`extend`, so they fire a single time
    across parent and children. Extras passed to :meth:`extend` are copied
    per child and fire once per child.
    """

    def __init__(self) -> None:
        self._listeners: dict[Phase, list[ListenerRegistration]] = {
            phase: [] for phase in Phase
        }

    # ── Registration ─────────────────────────────────────────────

    def on(
        self,
        phase: Phase | str,
        listener: Callable[[Any], Awaitable[None] | None],
        *,
        priority: Priority = Priority.NORMAL,
        once: bool = False,
    ) -> ListenerRegistration:
        """Attach *listener* to *phase* and return its registration."""
        registration = ListenerRegistration(
            phase=Phase(phase), listener=listener, priority=priority, once=once
        )
        self.add(registration)
        return registration

    def add(self, registration: ListenerRegistration) -> None:
        chain = self._listeners[registration.phase]
        chain.append(registration)
        chain.sort(key=ListenerRegistration.sort_key)
        logger.debug(
            "Registered %s listener %r (priority=%s, once=%s)",
            registration.phase.value,
            registration.listener,
            registration.priority.name,
            registration.once,
        )

    def remove(self, registration: ListenerRegistration) -> None:
        chain = self._listeners[registration.phase]
        if registration in chain:
            chain.remove(registration)

    def listeners(self, phase: Phase | str) -> list[ListenerRegistration]:
        """Return the live registrations for *phase*, in call order."""
        return [r for r in self._listeners[Phase(phase)] if not r.spent]

    def extend(self, registrations: Iterable[ListenerRegistration]) -> EventPipeline:
        """Return a child pipeline with this pipeline's listeners plus extras.

        Extras are copied, so a ``once`` extra fires once per child.
        """
        child = EventPipeline()
        for phase, chain in self._listeners.items():
            child._listeners[phase] = list(chain)
        for registration in registrations:
            child.add(registration.fresh())
        return child

    # ── Phases ───────────────────────────────────────────────────

    async def prepare(self, transaction: CommandTransaction) -> PrepareEvent:
        """Emit the prepare phase for *transaction*."""
        event = PrepareEvent(transaction)
        await self._emit(event)
        return event

    async def process(self, transaction: CommandTransaction) -> ProcessEvent:
        """Emit the process phase once a response is attached."""
        event = ProcessEvent(transaction)
        await self._emit(event)
        return event

    async def error(
        self,
        transaction: CommandTransaction,
        exc: BaseException,
        response: Any = None,
    ) -> CommandErrorEvent:
        """Emit the error phase for a failed send."""
        request_error = RequestErrorEvent(transaction.request, exc, response)
        event = CommandErrorEvent(transaction, request_error)
        await self._emit(event)
        return event

    async def _emit(self, event: CommandEvent) -> None:
        for registration in list(self._listeners[event.phase]):
            if registration.spent:
                self.remove(registration)
                continue
            if registration.once:
                registration.spent = True
                self.remove(registration)
            await maybe_await(registration.listener(event))
            if event.is_propagation_stopped:
                logger.debug(
                    "Propagation of %s stopped by %r",
                    event.phase.value,
                    registration.listener,
                )
                break

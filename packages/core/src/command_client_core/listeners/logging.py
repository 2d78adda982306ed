"""LoggingListener — logs command execution details."""

from __future__ import annotations

import logging
import time
import weakref
from typing import TYPE_CHECKING

from ..events.types import Phase, Priority

if TYPE_CHECKING:
    from ..events.pipeline import EventPipeline, ListenerRegistration
    from ..events.types import CommandErrorEvent, PrepareEvent, ProcessEvent
    from ..transaction import CommandTransaction

logger = logging.getLogger("command_client.listeners")


class LoggingListener:
    """Logs command execution — name, duration, failure."""

    def __init__(self) -> None:
        self._started: weakref.WeakKeyDictionary[CommandTransaction, float] = (
            weakref.WeakKeyDictionary()
        )
        self._registrations: list[ListenerRegistration] = []

    def attach(self, pipeline: EventPipeline) -> list[ListenerRegistration]:
        """Register on all three phases of *pipeline*."""
        self._registrations = [
            pipeline.on(Phase.PREPARE, self.on_prepare, priority=Priority.EARLY),
            pipeline.on(Phase.PROCESS, self.on_process, priority=Priority.LATE),
            pipeline.on(Phase.ERROR, self.on_error, priority=Priority.EARLY),
        ]
        return list(self._registrations)

    def detach(self, pipeline: EventPipeline) -> None:
        for registration in self._registrations:
            pipeline.remove(registration)
        self._registrations = []

    def on_prepare(self, event: PrepareEvent) -> None:
        self._started[event.transaction] = time.perf_counter()
        logger.info(
            "Handling %s (command_id=%s)", event.command.name, event.command.command_id
        )

    def on_process(self, event: ProcessEvent) -> None:
        logger.info(
            "%s completed in %.2fms",
            event.command.name,
            self._elapsed(event.transaction),
        )

    def on_error(self, event: CommandErrorEvent) -> None:
        logger.error(
            "%s failed after %.2fms: %s",
            event.command.name,
            self._elapsed(event.transaction),
            event.request_error.exception,
        )

    def _elapsed(self, transaction: CommandTransaction) -> float:
        start = self._started.pop(transaction, None)
        if start is None:
            return 0.0
        return (time.perf_counter() - start) * 1000

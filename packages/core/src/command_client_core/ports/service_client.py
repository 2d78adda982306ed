"""IServiceClient — public surface of a command-based service client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..command import Command
    from ..events.pipeline import EventPipeline, ListenerRegistration
    from ..results import BatchResults
    from .transport import ITransport


class IServiceClient(Protocol):
    """
    Interface for creating and executing commands against a transport.
    """

    @property
    def pipeline(self) -> EventPipeline: ...

    @property
    def transport(self) -> ITransport: ...

    def make_command(
        self, name: str, parameters: dict[str, Any] | None = None
    ) -> Command: ...

    async def execute(self, command: Command) -> Any: ...

    async def execute_all(
        self,
        commands: Iterable[Command],
        *,
        parallel: int | None = None,
        listeners: Iterable[ListenerRegistration] = (),
    ) -> None: ...

    async def batch(
        self,
        commands: Iterable[Command],
        *,
        parallel: int | None = None,
        listeners: Iterable[ListenerRegistration] = (),
    ) -> BatchResults: ...

    def get_config(self, key_or_path: str | None = None) -> Any: ...

    def set_config(self, key_or_path: str, value: Any) -> None: ...

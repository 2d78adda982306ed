"""command-client-core — command dispatch layer for service clients.

Turns named commands into transport requests through a prepare / process /
error listener pipeline, and runs many commands concurrently with
per-command outcome capture.
"""

from __future__ import annotations

# ── Adapters ────────────────────────────────────────────────────
from .adapters.memory import InMemoryTransport

# ── Client ───────────────────────────────────────────────────────
from .client import ServiceClient
from .command import Command
from .config import ConfigCollection

# ── Events ───────────────────────────────────────────────────────
from .events import (
    CommandErrorEvent,
    CommandEvent,
    EventPipeline,
    ListenerRegistration,
    Phase,
    PrepareEvent,
    Priority,
    ProcessEvent,
    RequestErrorEvent,
)
from .iterator import CommandToRequestIterator, RequestTransfer
from .listeners import LoggingListener

# ── Ports ────────────────────────────────────────────────────────
from .ports import IServiceClient, ITransport

# ── Primitives ───────────────────────────────────────────────────
from .primitives import (
    CommandClientError,
    CommandException,
    IteratorConsumedError,
    TransportError,
)
from .results import BatchResults
from .transaction import CommandTransaction, TransactionState

__all__ = [
    "BatchResults",
    "Command",
    "CommandClientError",
    "CommandErrorEvent",
    "CommandEvent",
    "CommandException",
    "CommandToRequestIterator",
    "CommandTransaction",
    "ConfigCollection",
    "EventPipeline",
    "IServiceClient",
    "ITransport",
    "InMemoryTransport",
    "IteratorConsumedError",
    "ListenerRegistration",
    "LoggingListener",
    "Phase",
    "PrepareEvent",
    "Priority",
    "ProcessEvent",
    "RequestErrorEvent",
    "RequestTransfer",
    "ServiceClient",
    "TransactionState",
    "TransportError",
]

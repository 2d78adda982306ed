"""Command events and the listener pipeline."""

from .pipeline import EventPipeline, ListenerRegistration
from .types import (
    CommandErrorEvent,
    CommandEvent,
    Phase,
    PrepareEvent,
    Priority,
    ProcessEvent,
    RequestErrorEvent,
)

__all__ = [
    "CommandErrorEvent",
    "CommandEvent",
    "EventPipeline",
    "ListenerRegistration",
    "Phase",
    "PrepareEvent",
    "Priority",
    "ProcessEvent",
    "RequestErrorEvent",
]

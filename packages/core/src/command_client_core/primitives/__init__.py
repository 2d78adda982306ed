"""Primitives: exceptions."""

from __future__ import annotations

from .exceptions import (
    CommandClientError,
    CommandException,
    IteratorConsumedError,
    TransportError,
)

__all__ = [
    "CommandClientError",
    "CommandException",
    "IteratorConsumedError",
    "TransportError",
]

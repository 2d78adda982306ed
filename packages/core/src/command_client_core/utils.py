"""Common utility functions and helpers."""

from __future__ import annotations

from inspect import isawaitable
from typing import Any


def default_dict_factory() -> dict[str, Any]:
    """Factory for mutable default dict in model fields."""
    return {}


async def maybe_await(value: Any) -> Any:
    """Await *value* if it is awaitable, otherwise return it unchanged."""
    if isawaitable(value):
        return await value
    return value

"""Command — a named, parameterized operation sent through a service client."""

from __future__ import annotations

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .utils import default_dict_factory


class Command(BaseModel):
    """
    A named operation plus its parameters.

    Commands are opaque to the client core: listeners decide how a command
    becomes a transport request and how the response becomes a result.

    Two commands are never equal unless they are the same object, so
    structurally identical commands in one batch keep separate outcomes.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    parameters: dict[str, Any] = Field(default_factory=default_dict_factory)
    command_id: str = Field(default_factory=lambda: str(uuid.uuid4()))

    # Identity semantics: pydantic would otherwise compare field values.
    __eq__ = object.__eq__
    __hash__ = object.__hash__

    def get(self, key: str, default: Any = None) -> Any:
        """Return parameter *key* or *default*."""
        return self.parameters.get(key, default)

    def has_param(self, key: str) -> bool:
        return key in self.parameters

    def __getitem__(self, key: str) -> Any:
        return self.parameters[key]

    def __contains__(self, key: object) -> bool:
        return key in self.parameters

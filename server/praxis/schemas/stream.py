"""Canonical stream events.

Every upstream protocol is normalized into this closed set. ``Error`` and
``Done`` are terminal: a well-formed stream ends with exactly one of them.
"""
from __future__ import annotations
import json
from typing import Annotated, Literal, Union
from pydantic import BaseModel, ConfigDict, Field

from praxis.core.errors import ErrorKind


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    @property
    def is_terminal(self) -> bool:
        return False

    def to_sse(self) -> str:
        return "data: " + json.dumps(self.model_dump(mode="json")) + "\n\n"


class TextDelta(_Event):
    type: Literal["text-delta"] = "text-delta"
    text: str


class ReasoningDelta(_Event):
    type: Literal["reasoning-delta"] = "reasoning-delta"
    text: str


class Error(_Event):
    type: Literal["error"] = "error"
    kind: ErrorKind
    message: str

    @property
    def is_terminal(self) -> bool:
        return True


class Done(_Event):
    type: Literal["done"] = "done"

    @property
    def is_terminal(self) -> bool:
        return True


StreamEvent = Annotated[
    Union[TextDelta, ReasoningDelta, Error, Done],
    Field(discriminator="type"),
]

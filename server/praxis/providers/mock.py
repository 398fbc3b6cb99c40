from __future__ import annotations
import asyncio
from typing import AsyncIterator, Optional

from praxis.providers.base import RawFrame
from praxis.routing.credentials import ResolvedCredential
from praxis.routing.identifiers import ResolvedModel
from praxis.schemas.chat import ChatRequest


class EchoProvider:
    """Echoes the last message word by word. Installed as a registry override."""

    id = "echo"

    def __init__(self, delay: float = 0.05) -> None:
        self.delay = delay

    async def stream(
        self,
        target: ResolvedModel,
        credential: Optional[ResolvedCredential],
        request: ChatRequest,
    ) -> AsyncIterator[RawFrame]:
        last = request.messages[-1].content if request.messages else ""
        text = f"[{target.provider.value}-mock] You said: '{last}'"
        if target.extracts_reasoning:
            text = f"<thinking>Echoing {target.upstream_model}.</thinking>{text}"
        words = text.split(" ")
        for i, word in enumerate(words):
            yield RawFrame(word + (" " if i < len(words) - 1 else ""))
            if self.delay:
                await asyncio.sleep(self.delay)

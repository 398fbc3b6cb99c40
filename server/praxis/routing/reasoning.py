"""Split ``<thinking>...</thinking>`` spans out of the text channel."""
from __future__ import annotations
from contextlib import aclosing
from typing import AsyncIterator, List, Union

from praxis.schemas.stream import ReasoningDelta, StreamEvent, TextDelta

Delta = Union[TextDelta, ReasoningDelta]


def _partial_tag_suffix(text: str, tag: str) -> int:
    """Length of the longest suffix of ``text`` that is a proper prefix of ``tag``."""
    for size in range(min(len(text), len(tag) - 1), 0, -1):
        if tag.startswith(text[-size:]):
            return size
    return 0


class ReasoningExtractor:
    """Incremental tag scanner.

    Only a possible partial tag (at most ``len(tag) - 1`` characters) is held
    back between feeds; everything else is emitted immediately.
    """

    def __init__(self, tag_name: str = "thinking") -> None:
        self.open_tag = f"<{tag_name}>"
        self.close_tag = f"</{tag_name}>"
        self.in_reasoning = False
        self._buffer = ""

    def _emit(self, text: str, out: List[Delta]) -> None:
        if text:
            out.append(ReasoningDelta(text=text) if self.in_reasoning else TextDelta(text=text))

    def feed(self, text: str) -> List[Delta]:
        out: List[Delta] = []
        self._buffer += text
        while True:
            tag = self.close_tag if self.in_reasoning else self.open_tag
            idx = self._buffer.find(tag)
            if idx == -1:
                keep = _partial_tag_suffix(self._buffer, tag)
                self._emit(self._buffer[: len(self._buffer) - keep], out)
                self._buffer = self._buffer[len(self._buffer) - keep:]
                return out
            self._emit(self._buffer[:idx], out)
            self._buffer = self._buffer[idx + len(tag):]
            self.in_reasoning = not self.in_reasoning

    def flush(self) -> List[Delta]:
        out: List[Delta] = []
        self._emit(self._buffer, out)
        self._buffer = ""
        return out


async def extract_reasoning(
    events: AsyncIterator[StreamEvent], tag_name: str = "thinking"
) -> AsyncIterator[StreamEvent]:
    extractor = ReasoningExtractor(tag_name)
    async with aclosing(events) as source:
        async for event in source:
            if isinstance(event, TextDelta):
                for out in extractor.feed(event.text):
                    yield out
                continue
            if event.is_terminal:
                for out in extractor.flush():
                    yield out
            yield event

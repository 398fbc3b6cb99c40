"""Line-oriented ``data: <payload>`` decoding.

The decoder is fed raw bytes as they arrive and hands back complete payloads,
so it works with any reader. Partial lines and split UTF-8 sequences are held
until the rest arrives.

httpx's ``aiter_lines()`` is not used: it decodes with the response charset
and replaces bad bytes silently, whereas invalid UTF-8 and unbounded lines
must fail the stream here.
"""
from __future__ import annotations
import codecs
from typing import AsyncIterator, List

from praxis.core.errors import UpstreamProtocolError

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"
MAX_LINE_CHARS = 1024 * 1024


class SSEDecoder:
    def __init__(self, provider: str, max_line_chars: int = MAX_LINE_CHARS) -> None:
        self.provider = provider
        self.max_line_chars = max_line_chars
        self.done = False
        self._utf8 = codecs.getincrementaldecoder("utf-8")()
        self._pending = ""

    def feed(self, chunk: bytes) -> List[str]:
        """Consume ``chunk``; return payloads of every line it completed."""
        if self.done:
            return []
        try:
            self._pending += self._utf8.decode(chunk)
        except UnicodeDecodeError as exc:
            raise UpstreamProtocolError(self.provider, f"invalid UTF-8 in stream: {exc}") from exc
        *lines, self._pending = self._pending.split("\n")
        if len(self._pending) > self.max_line_chars:
            raise UpstreamProtocolError(self.provider, "stream line exceeds maximum length")
        return self._payloads(lines)

    def close(self) -> List[str]:
        """Flush a trailing line that had no newline."""
        if self.done:
            return []
        try:
            tail = self._pending + self._utf8.decode(b"", final=True)
        except UnicodeDecodeError as exc:
            raise UpstreamProtocolError(self.provider, f"truncated UTF-8 at end of stream: {exc}") from exc
        self._pending = ""
        return self._payloads([tail])

    def _payloads(self, lines: List[str]) -> List[str]:
        out: List[str] = []
        for raw in lines:
            line = raw.rstrip("\r")
            # blank separators, ": keep-alive" comments, event:/id: fields
            if not line.strip() or not line.startswith(DATA_PREFIX):
                continue
            data = line[len(DATA_PREFIX):]
            if data.startswith(" "):
                data = data[1:]
            if data.strip() == DONE_SENTINEL:
                self.done = True
                break
            out.append(data)
        return out


async def aiter_sse_data(chunks: AsyncIterator[bytes], provider: str) -> AsyncIterator[str]:
    """Yield ``data:`` payloads from a byte stream until ``[DONE]`` or exhaustion."""
    decoder = SSEDecoder(provider)
    async for chunk in chunks:
        for payload in decoder.feed(chunk):
            yield payload
        if decoder.done:
            return
    for payload in decoder.close():
        yield payload

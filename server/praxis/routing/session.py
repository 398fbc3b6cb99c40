from __future__ import annotations
import asyncio
import logging
from contextlib import aclosing
from enum import Enum
from typing import AsyncIterator, Optional

import httpx

from praxis.core.errors import Cancelled, ErrorKind, RoutingError
from praxis.providers.base import RawFrame
from praxis.routing.identifiers import ResolvedModel
from praxis.routing.reasoning import extract_reasoning
from praxis.schemas.stream import Done, Error, ReasoningDelta, StreamEvent, TextDelta

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    OPEN = "open"
    STREAMING = "streaming"
    TERMINAL = "terminal"
    CANCELLED = "cancelled"


class StreamNormalizer:
    """Maps raw adapter frames to canonical events.

    Exactly one terminal event (``Done`` or ``Error``) ends a normal run; a
    cancelled run ends with neither.
    """

    def __init__(self, target: ResolvedModel) -> None:
        self.target = target
        self.state = SessionState.OPEN

    def _classify(self, exc: Exception) -> Error:
        if isinstance(exc, RoutingError):
            return Error(kind=exc.kind, message=str(exc))
        if isinstance(exc, httpx.TransportError):
            return Error(
                kind=ErrorKind.UPSTREAM_CONNECTION,
                message=f"[{self.target.provider.value}] connection failed: {exc}",
            )
        logger.exception("Unexpected failure while streaming model=%s", self.target.identifier)
        return Error(kind=ErrorKind.INTERNAL, message="Internal error while streaming")

    async def run(self, frames: AsyncIterator[RawFrame]) -> AsyncIterator[StreamEvent]:
        if self.state is not SessionState.OPEN:
            return
        self.state = SessionState.STREAMING
        terminal: StreamEvent
        try:
            async with aclosing(frames) as source:
                async for frame in source:
                    if not frame.text:
                        continue
                    yield ReasoningDelta(text=frame.text) if frame.reasoning else TextDelta(text=frame.text)
        except Cancelled:
            self.state = SessionState.CANCELLED
            return
        except Exception as exc:
            terminal = self._classify(exc)
            logger.warning(
                "Stream failed model=%s kind=%s", self.target.identifier, terminal.kind.value
            )
        else:
            terminal = Done()
        self.state = SessionState.TERMINAL
        yield terminal


class UpstreamSession:
    """One caller request's stream. Iterate it, or ``cancel()`` to stop early.

    Each pull runs as its own task so ``cancel()`` may be called from another
    task while a pull is waiting on the upstream. Closing releases the
    adapter's connection and any partial decode state.
    """

    def __init__(
        self,
        target: ResolvedModel,
        frames: AsyncIterator[RawFrame],
        reasoning_tag: Optional[str] = None,
    ) -> None:
        self.target = target
        self.normalizer = StreamNormalizer(target)
        events = self.normalizer.run(frames)
        if reasoning_tag:
            events = extract_reasoning(events, reasoning_tag)
        self._events = events
        self._pull: Optional[asyncio.Task] = None
        self._cancelled = False

    @property
    def state(self) -> SessionState:
        if self._cancelled:
            return SessionState.CANCELLED
        return self.normalizer.state

    def __aiter__(self) -> "UpstreamSession":
        return self

    async def _next_event(self) -> StreamEvent:
        return await self._events.__anext__()

    async def __anext__(self) -> StreamEvent:
        if self._cancelled:
            raise StopAsyncIteration
        pull = self._pull = asyncio.create_task(self._next_event())
        try:
            await asyncio.wait({pull})
        except asyncio.CancelledError:
            pull.cancel()
            raise
        # an event that lands after cancel() is dropped
        if self._cancelled:
            raise StopAsyncIteration
        self._pull = None
        return pull.result()

    async def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        pull, self._pull = self._pull, None
        if pull is not None:
            pull.cancel()
            await asyncio.wait({pull})
            if not pull.cancelled():
                # mark retrieved; the outcome is discarded
                pull.exception()
        await self._events.aclose()
        logger.info("Stream cancelled model=%s", self.target.identifier)

    async def aclose(self) -> None:
        """Release upstream resources; cancels if no terminal event was seen."""
        if self.normalizer.state is SessionState.TERMINAL and self._pull is None:
            await self._events.aclose()
            return
        await self.cancel()

    async def __aenter__(self) -> "UpstreamSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

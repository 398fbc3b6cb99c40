"""Shared fixtures for routing and streaming tests."""
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Dict, Iterable, List, Optional, Tuple

import httpx
import pytest

from praxis.config import Settings
from praxis.providers.base import RawFrame
from praxis.schemas.chat import ChatRequest, Message


def make_settings(**overrides) -> Settings:
    """Settings isolated from the host environment and any .env file."""
    values = dict(
        google_api_key=None,
        gemini_api_key=None,
        openrouter_api_key=None,
        ai_gateway_api_key=None,
        nextauth_secret=None,
        database_url="sqlite+aiosqlite://",
        mock_providers=False,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def chat_request() -> ChatRequest:
    return ChatRequest(model="openrouter/openai/gpt-4o", messages=[Message(role="user", content="Hello")])


@dataclass
class FakeCredentialRow:
    api_key: str
    is_enabled: bool = True
    base_url: Optional[str] = None


class FakeKeyStore:
    """In-memory credential store that records every lookup."""

    def __init__(self, rows: Optional[Dict[Tuple[str, str], FakeCredentialRow]] = None) -> None:
        self.rows = rows or {}
        self.lookups: List[Tuple[str, str]] = []

    async def get_provider_api_key(self, user_id: str, provider: str):
        self.lookups.append((user_id, provider))
        return self.rows.get((user_id, provider))


class RecordingTransport:
    """httpx.MockTransport wrapper that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: List[httpx.Request] = []
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    def client_factory(self) -> Callable[[], httpx.AsyncClient]:
        return lambda: httpx.AsyncClient(transport=httpx.MockTransport(self))


async def byte_chunks(chunks: Iterable[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


def sse_response(chunks: Iterable[bytes], status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        headers={"content-type": "text/event-stream"},
        content=byte_chunks(list(chunks)),
    )


class ScriptedAdapter:
    """Adapter yielding fixed frames, then optionally raising; tracks closure."""

    id = "scripted"

    def __init__(self, frames: Iterable[RawFrame] = (), error: Optional[BaseException] = None) -> None:
        self.frames = list(frames)
        self.error = error
        self.calls = 0
        self.started = False
        self.closed = False
        self.pulled = 0

    async def stream(self, target, credential, request) -> AsyncIterator[RawFrame]:
        self.calls += 1
        self.started = True
        try:
            for frame in self.frames:
                self.pulled += 1
                yield frame
            if self.error is not None:
                raise self.error
        finally:
            self.closed = True


async def collect(events) -> list:
    return [event async for event in events]

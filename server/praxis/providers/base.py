from __future__ import annotations
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional, Protocol

import httpx

from praxis.config import Settings
from praxis.routing.credentials import ResolvedCredential
from praxis.routing.identifiers import ResolvedModel
from praxis.schemas.chat import ChatRequest


@dataclass(frozen=True)
class RawFrame:
    """One provider-native increment of output."""

    text: str
    reasoning: bool = False


ClientFactory = Callable[[], httpx.AsyncClient]


class ProviderAdapter(Protocol):
    id: str

    def stream(
        self,
        target: ResolvedModel,
        credential: Optional[ResolvedCredential],
        request: ChatRequest,
    ) -> AsyncIterator[RawFrame]:
        """Lazily open the upstream call and yield raw frames.

        No I/O happens until the first frame is pulled.
        """
        ...


def default_client_factory(settings: Settings) -> ClientFactory:
    def factory() -> httpx.AsyncClient:
        timeout = httpx.Timeout(
            connect=settings.connect_timeout, read=settings.read_timeout, write=30.0, pool=10.0
        )
        return httpx.AsyncClient(timeout=timeout, trust_env=True)

    return factory

from __future__ import annotations
import logging
from typing import AsyncIterator, Dict, Optional

from praxis.config import Settings
from praxis.core.errors import MissingCredential
from praxis.providers.base import ClientFactory, RawFrame, default_client_factory
from praxis.providers.chat_completions import build_payload, stream_chat_completions
from praxis.routing.credentials import ResolvedCredential
from praxis.routing.identifiers import ResolvedModel
from praxis.schemas.chat import ChatRequest

logger = logging.getLogger(__name__)


class OpenRouterProvider:
    """Streams chat completions from OpenRouter with a bearer key."""

    id = "openrouter"

    def __init__(self, settings: Settings, client_factory: Optional[ClientFactory] = None) -> None:
        self.settings = settings
        self.client_factory = client_factory or default_client_factory(settings)

    def _headers(self, api_key: str) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }
        # Optional attribution headers (if configured)
        if self.settings.openrouter_http_referer:
            headers["HTTP-Referer"] = self.settings.openrouter_http_referer
        if self.settings.openrouter_app_title:
            headers["X-Title"] = self.settings.openrouter_app_title
        return headers

    async def stream(
        self,
        target: ResolvedModel,
        credential: Optional[ResolvedCredential],
        request: ChatRequest,
    ) -> AsyncIterator[RawFrame]:
        if credential is None:
            raise MissingCredential(self.id)
        base = (credential.base_url or self.settings.openrouter_base_url).rstrip("/")
        url = f"{base}/chat/completions"
        logger.info("OpenRouter stream model=%s source=%s", target.upstream_model, credential.source)
        async for frame in stream_chat_completions(
            self.client_factory,
            self.id,
            url,
            self._headers(credential.api_key),
            build_payload(target.upstream_model, request),
        ):
            yield frame

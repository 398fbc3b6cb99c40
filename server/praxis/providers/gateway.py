from __future__ import annotations
import logging
from typing import AsyncIterator, Dict, Optional

from praxis.config import Settings
from praxis.providers.base import ClientFactory, RawFrame, default_client_factory
from praxis.providers.chat_completions import build_payload, stream_chat_completions
from praxis.routing.credentials import ResolvedCredential
from praxis.routing.identifiers import ResolvedModel
from praxis.schemas.chat import ChatRequest

logger = logging.getLogger(__name__)


class GatewayProvider:
    """Default multi-model passthrough backend.

    Also serves model hub entries, whose names the resolver has already
    rewritten into the gateway's namespace. Reasoning extraction is applied
    downstream on the canonical stream, not here.
    """

    id = "gateway"

    def __init__(self, settings: Settings, client_factory: Optional[ClientFactory] = None) -> None:
        self.settings = settings
        self.client_factory = client_factory or default_client_factory(settings)

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }
        if self.settings.ai_gateway_api_key:
            headers["Authorization"] = f"Bearer {self.settings.ai_gateway_api_key}"
        return headers

    async def stream(
        self,
        target: ResolvedModel,
        credential: Optional[ResolvedCredential],
        request: ChatRequest,
    ) -> AsyncIterator[RawFrame]:
        url = f"{self.settings.gateway_base_url.rstrip('/')}/chat/completions"
        logger.info("Gateway stream model=%s reasoning=%s", target.upstream_model, target.is_reasoning)
        async for frame in stream_chat_completions(
            self.client_factory,
            self.id,
            url,
            self._headers(),
            build_payload(target.upstream_model, request),
        ):
            yield frame

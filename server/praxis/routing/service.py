from __future__ import annotations
import logging
from typing import Dict, List, Optional

from praxis.config import Settings
from praxis.core.errors import RoutingError
from praxis.providers.catalog import models_by_provider
from praxis.providers.registry import ProviderRegistry
from praxis.routing.credentials import CredentialResolver
from praxis.routing.identifiers import resolve_model
from praxis.routing.session import UpstreamSession
from praxis.schemas.chat import ChatRequest, Message, ModelInfo
from praxis.schemas.stream import Error, TextDelta

logger = logging.getLogger(__name__)

TITLE_PROMPT = (
    "You will generate a short title based on the first message a user begins a conversation with. "
    "Ensure it is not more than 80 characters long. The title should be a summary of the user's message. "
    "Do not use quotes or colons."
)
TITLE_FALLBACK_CHARS = 50


class ModelRouter:
    """Entry point: model identifier + user -> canonical event stream."""

    def __init__(self, settings: Settings, registry: ProviderRegistry, credentials: CredentialResolver) -> None:
        self.settings = settings
        self.registry = registry
        self.credentials = credentials

    async def open_stream(self, request: ChatRequest, user_id: Optional[str] = None) -> UpstreamSession:
        """Resolve and authenticate, then return a lazily-started session.

        UnsupportedProvider and MissingCredential are raised here, before any
        upstream call. Everything after this point is delivered in-band.
        """
        target = resolve_model(request.model)
        adapter = self.registry.get(target.provider)
        credential = await self.credentials.resolve(user_id, target.provider)
        logger.info(
            "Resolved model=%s provider=%s upstream=%s reasoning=%s",
            request.model,
            target.provider.value,
            target.upstream_model,
            target.is_reasoning,
        )
        frames = adapter.stream(target, credential, request)
        reasoning_tag = self.settings.reasoning_tag_name if target.extracts_reasoning else None
        return UpstreamSession(target, frames, reasoning_tag=reasoning_tag)

    async def list_models(self) -> Dict[str, List[ModelInfo]]:
        return models_by_provider()

    async def generate_title(self, message: str, user_id: Optional[str] = None) -> str:
        fallback = message[:TITLE_FALLBACK_CHARS].strip() or "New chat"
        request = ChatRequest(
            model=self.settings.title_model,
            messages=[Message(role="system", content=TITLE_PROMPT), Message(role="user", content=message)],
        )
        try:
            session = await self.open_stream(request, user_id)
        except RoutingError as exc:
            logger.warning("Title generation unavailable: %s", exc)
            return fallback
        parts: List[str] = []
        async with session:
            async for event in session:
                if isinstance(event, TextDelta):
                    parts.append(event.text)
                elif isinstance(event, Error):
                    logger.warning("Title generation failed kind=%s", event.kind.value)
                    return fallback
        return "".join(parts).strip() or fallback

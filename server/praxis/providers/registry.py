from __future__ import annotations
import logging
from typing import Dict, Mapping, Optional

from praxis.config import Settings
from praxis.core.errors import UnsupportedProvider
from praxis.providers.base import ClientFactory, ProviderAdapter
from praxis.providers.gateway import GatewayProvider
from praxis.providers.gemini import GeminiProvider
from praxis.providers.openrouter import OpenRouterProvider
from praxis.routing.identifiers import ProviderTag

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Fixed provider tag -> adapter table, built once at startup.

    ``overrides`` replaces entries wholesale (tests, local mock mode).
    """

    def __init__(
        self,
        settings: Settings,
        overrides: Optional[Mapping[ProviderTag, ProviderAdapter]] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        gateway = GatewayProvider(settings, client_factory)
        self.adapters: Dict[ProviderTag, ProviderAdapter] = {
            ProviderTag.GATEWAY: gateway,
            ProviderTag.GOOGLE_API: GeminiProvider(settings, client_factory),
            ProviderTag.OPENROUTER: OpenRouterProvider(settings, client_factory),
            # Model hub entries are catalog metadata served over the gateway
            ProviderTag.MODELHUB: gateway,
        }
        if overrides:
            self.adapters.update(overrides)
            logger.info("Provider overrides installed for %s", sorted(t.value for t in overrides))

    def get(self, provider: ProviderTag) -> ProviderAdapter:
        try:
            return self.adapters[provider]
        except KeyError:
            raise UnsupportedProvider(getattr(provider, "value", str(provider))) from None

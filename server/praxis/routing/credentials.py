from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from praxis.config import Settings
from praxis.core.errors import MissingCredential
from praxis.core.logging import mask_secret
from praxis.routing.identifiers import ProviderTag

logger = logging.getLogger(__name__)

# Providers whose adapters need an explicit key. The gateway manages its own.
KEYED_PROVIDERS = frozenset({ProviderTag.GOOGLE_API, ProviderTag.OPENROUTER})


class StoredCredential(Protocol):
    api_key: str
    is_enabled: bool
    base_url: Optional[str]


class CredentialStore(Protocol):
    async def get_provider_api_key(self, user_id: str, provider: str) -> Optional[StoredCredential]:
        ...


@dataclass(frozen=True)
class ResolvedCredential:
    provider: str
    api_key: str
    base_url: Optional[str] = None
    source: str = "default"  # "user" or "default"

    def __repr__(self) -> str:
        return (
            f"ResolvedCredential(provider={self.provider!r}, api_key={mask_secret(self.api_key)!r}, "
            f"base_url={self.base_url!r}, source={self.source!r})"
        )


class CredentialResolver:
    """Applies user-enabled-key > deployment-default precedence."""

    def __init__(self, settings: Settings, store: Optional[CredentialStore] = None) -> None:
        self.settings = settings
        self.store = store

    def requires_credential(self, provider: ProviderTag) -> bool:
        return provider in KEYED_PROVIDERS

    async def resolve(self, user_id: Optional[str], provider: ProviderTag) -> Optional[ResolvedCredential]:
        """Return the effective credential, ``None`` for exempt providers.

        Raises MissingCredential when a keyed provider has no usable secret.
        """
        if not self.requires_credential(provider):
            return None

        tag = provider.value
        if user_id and self.store is not None:
            stored = await self.store.get_provider_api_key(user_id, tag)
            if stored is not None and stored.is_enabled and stored.api_key:
                logger.info("Using user credential provider=%s", tag)
                return ResolvedCredential(
                    provider=tag,
                    api_key=stored.api_key,
                    base_url=stored.base_url or None,
                    source="user",
                )

        default = self.settings.default_api_key(tag)
        if default:
            logger.info("Using default credential provider=%s", tag)
            return ResolvedCredential(provider=tag, api_key=default)

        logger.warning("No credential available provider=%s", tag)
        raise MissingCredential(tag)

"""Model identifier resolution.

Identifiers look like ``<provider-tag>/<upstream model>``. Unknown or missing
prefixes are not an error: the gateway is the catch-all passthrough, so the
whole identifier is forwarded to it.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class ProviderTag(str, Enum):
    GATEWAY = "gateway"
    GOOGLE_API = "google-api"
    OPENROUTER = "openrouter"
    MODELHUB = "modelhub"


PREFIX_DELIMITER = "/"
THINKING_SUFFIX = "-thinking"
REASONING_SUBSTRING = "reasoning"
# Model hub entries are served by the gateway under this namespace
MODELHUB_GATEWAY_NAMESPACE = "huggingface"

_PREFIXED_TAGS = {
    ProviderTag.GOOGLE_API.value: ProviderTag.GOOGLE_API,
    ProviderTag.OPENROUTER.value: ProviderTag.OPENROUTER,
    ProviderTag.MODELHUB.value: ProviderTag.MODELHUB,
}

_GATEWAY_PATH = (ProviderTag.GATEWAY, ProviderTag.MODELHUB)


@dataclass(frozen=True)
class ResolvedModel:
    identifier: str
    provider: ProviderTag
    upstream_model: str
    is_reasoning: bool = False

    @property
    def extracts_reasoning(self) -> bool:
        """Only gateway-served reasoning models carry tagged thinking in their text."""
        return self.is_reasoning and self.provider in _GATEWAY_PATH


def is_reasoning_model(name: str) -> bool:
    return name.endswith(THINKING_SUFFIX) or REASONING_SUBSTRING in name


def resolve_model(identifier: str) -> ResolvedModel:
    """Decompose ``identifier`` into provider tag, upstream name and reasoning flag.

    Pure and total: every string maps to exactly one provider tag.
    """
    prefix, sep, remainder = identifier.partition(PREFIX_DELIMITER)
    provider = _PREFIXED_TAGS.get(prefix) if sep else None

    if provider is None:
        provider, upstream = ProviderTag.GATEWAY, identifier
    elif provider is ProviderTag.MODELHUB:
        upstream = f"{MODELHUB_GATEWAY_NAMESPACE}/{remainder}"
    else:
        upstream = remainder

    reasoning = is_reasoning_model(upstream)
    if reasoning and provider in _GATEWAY_PATH and upstream.endswith(THINKING_SUFFIX):
        upstream = upstream[: -len(THINKING_SUFFIX)]

    return ResolvedModel(
        identifier=identifier,
        provider=provider,
        upstream_model=upstream,
        is_reasoning=reasoning,
    )

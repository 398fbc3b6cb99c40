from __future__ import annotations
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    UNSUPPORTED_PROVIDER = "unsupported_provider"
    MISSING_CREDENTIAL = "missing_credential"
    UPSTREAM_HTTP = "upstream_http"
    UPSTREAM_PROTOCOL = "upstream_protocol"
    UPSTREAM_CONNECTION = "upstream_connection"
    CANCELLED = "cancelled"
    INTERNAL = "internal"


class RoutingError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL


class UnsupportedProvider(RoutingError):
    """No adapter is registered for the resolved provider tag."""

    kind = ErrorKind.UNSUPPORTED_PROVIDER

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"Unsupported provider: {provider}")


class MissingCredential(RoutingError):
    """Neither an enabled user key nor a deployment default exists."""

    kind = ErrorKind.MISSING_CREDENTIAL

    _HINTS = {
        "google-api": "GOOGLE_API_KEY",
        "openrouter": "OPENROUTER_API_KEY",
    }

    def __init__(self, provider: str) -> None:
        self.provider = provider
        env_name = self._HINTS.get(provider, f"{provider.upper().replace('-', '_')}_API_KEY")
        super().__init__(
            f"{provider} API key not configured. Please configure it in Settings "
            f"or set {env_name} in your environment."
        )


class UpstreamHTTPError(RoutingError):
    """Upstream answered with a non-success status before streaming began."""

    kind = ErrorKind.UPSTREAM_HTTP

    def __init__(self, provider: str, status: int, detail: Optional[str] = None) -> None:
        self.provider = provider
        self.status = status
        self.detail = detail
        super().__init__(friendly_http_message(provider, status, detail))


class UpstreamProtocolError(RoutingError):
    """Framing or payload problem severe enough to abort the stream."""

    kind = ErrorKind.UPSTREAM_PROTOCOL

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(f"[{provider}] {message}")


class Cancelled(RoutingError):
    """Caller-initiated stop. Never surfaced to the user as an error event."""

    kind = ErrorKind.CANCELLED


def friendly_http_message(provider: str, status: int, detail: Optional[str] = None) -> str:
    if status == 402:
        return f"[{provider}] Payment required. Add credits or choose a free model."
    if status == 429:
        return f"[{provider}] Too many requests. Please slow down and try again shortly."
    if status in (401, 403):
        return f"[{provider}] Authentication/permission issue. Check your API key and model access."
    if status == 400:
        return f"[{provider}] Bad request. Verify model id and parameters."
    msg = f"[{provider}] request failed with status {status}"
    if detail:
        msg += f"\nProvider response: {detail}"
    return msg

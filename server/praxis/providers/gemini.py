from __future__ import annotations
import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

from praxis.config import Settings
from praxis.core.errors import MissingCredential, UpstreamHTTPError, UpstreamProtocolError
from praxis.providers.base import ClientFactory, RawFrame, default_client_factory
from praxis.providers.sse import aiter_sse_data
from praxis.routing.credentials import ResolvedCredential
from praxis.routing.identifiers import ResolvedModel
from praxis.schemas.chat import ChatRequest

logger = logging.getLogger(__name__)


class GeminiProvider:
    """Direct Google generative language API (``streamGenerateContent``)."""

    id = "google-api"

    def __init__(self, settings: Settings, client_factory: Optional[ClientFactory] = None) -> None:
        self.settings = settings
        self.client_factory = client_factory or default_client_factory(settings)

    def _to_gemini_payload(self, request: ChatRequest) -> Dict[str, Any]:
        # Skip any messages with empty content (client may include a placeholder assistant message)
        contents: List[Dict[str, Any]] = []
        system_parts: List[Dict[str, str]] = []
        for m in request.messages:
            text = (m.content or "").strip()
            if not text:
                continue
            if m.role == "system":
                system_parts.append({"text": text})
                continue
            # Gemini roles: "user" and "model"
            role = "model" if m.role == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": text}]})
        payload: Dict[str, Any] = {
            "contents": contents,
            "generationConfig": {
                "temperature": request.temperature if request.temperature is not None else 0.7,
                # Gemini uses maxOutputTokens rather than max_tokens
                "maxOutputTokens": request.maxTokens or 512,
            },
        }
        if system_parts:
            payload["systemInstruction"] = {"parts": system_parts}
        return payload

    def _decode(self, data: str) -> List[RawFrame]:
        try:
            obj = json.loads(data)
        except ValueError:
            return []
        if not isinstance(obj, dict):
            return []
        if obj.get("error"):
            err = obj["error"]
            message = err.get("message") if isinstance(err, dict) else str(err)
            raise UpstreamProtocolError(self.id, f"error in stream: {message}")
        candidates = obj.get("candidates") or []
        first = candidates[0] if isinstance(candidates, list) and candidates else None
        if not isinstance(first, dict):
            return []
        content = first.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        frames: List[RawFrame] = []
        for part in parts if isinstance(parts, list) else []:
            if not isinstance(part, dict):
                continue
            text = part.get("text")
            if isinstance(text, str) and text:
                frames.append(RawFrame(text, reasoning=bool(part.get("thought"))))
        return frames

    async def stream(
        self,
        target: ResolvedModel,
        credential: Optional[ResolvedCredential],
        request: ChatRequest,
    ) -> AsyncIterator[RawFrame]:
        if credential is None:
            raise MissingCredential(self.id)
        base = (credential.base_url or self.settings.google_base_url).rstrip("/")
        url = f"{base}/models/{target.upstream_model}:streamGenerateContent"
        # Key goes in a header so it never appears in logged URLs
        headers = {
            "x-goog-api-key": credential.api_key,
            "Content-Type": "application/json",
        }
        logger.info("Gemini stream model=%s source=%s", target.upstream_model, credential.source)
        async with self.client_factory() as client:
            async with client.stream(
                "POST",
                url,
                params={"alt": "sse"},
                headers=headers,
                json=self._to_gemini_payload(request),
            ) as resp:
                if not resp.is_success:
                    body = await resp.aread()
                    logger.warning("gemini upstream status=%d", resp.status_code)
                    raise UpstreamHTTPError(
                        self.id, resp.status_code, body.decode("utf-8", errors="ignore") or None
                    )
                async for data in aiter_sse_data(resp.aiter_bytes(), self.id):
                    for frame in self._decode(data):
                        yield frame

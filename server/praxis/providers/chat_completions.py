"""Shared streaming for OpenAI-compatible ``/chat/completions`` endpoints."""
from __future__ import annotations
import json
import logging
from typing import Any, AsyncIterator, Dict, List

import httpx

from praxis.core.errors import UpstreamHTTPError, UpstreamProtocolError
from praxis.providers.base import ClientFactory, RawFrame
from praxis.providers.sse import aiter_sse_data
from praxis.schemas.chat import ChatRequest

logger = logging.getLogger(__name__)


def build_payload(model: str, request: ChatRequest) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "model": model,
        "messages": [m.model_dump() for m in request.messages],
        "stream": True,
    }
    if request.temperature is not None:
        payload["temperature"] = request.temperature
    if request.maxTokens:
        payload["max_tokens"] = request.maxTokens
    return payload


def decode_chunk(payload: str, provider: str) -> List[RawFrame]:
    """Map one ``data:`` payload to raw frames.

    Unparseable payloads are upstream keep-alive noise and yield nothing.
    """
    try:
        obj = json.loads(payload)
    except ValueError:
        logger.debug("Skipping non-JSON line from %s", provider)
        return []
    if not isinstance(obj, dict):
        return []
    if obj.get("error"):
        err = obj["error"]
        message = err.get("message") if isinstance(err, dict) else str(err)
        raise UpstreamProtocolError(provider, f"error in stream: {message}")

    choices = obj.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return []
    delta = choices[0].get("delta") or {}
    frames: List[RawFrame] = []
    reasoning = delta.get("reasoning")
    if isinstance(reasoning, str) and reasoning:
        frames.append(RawFrame(reasoning, reasoning=True))
    content = delta.get("content")
    if isinstance(content, str) and content:
        frames.append(RawFrame(content))
    return frames


async def stream_chat_completions(
    client_factory: ClientFactory,
    provider: str,
    url: str,
    headers: Dict[str, str],
    payload: Dict[str, Any],
) -> AsyncIterator[RawFrame]:
    async with client_factory() as client:
        async with client.stream("POST", url, headers=headers, json=payload) as resp:
            if not resp.is_success:
                body = await resp.aread()
                detail = body.decode("utf-8", errors="ignore")
                logger.warning("%s upstream status=%d", provider, resp.status_code)
                raise UpstreamHTTPError(provider, resp.status_code, detail or None)
            async for data in aiter_sse_data(resp.aiter_bytes(), provider):
                for frame in decode_chunk(data, provider):
                    yield frame

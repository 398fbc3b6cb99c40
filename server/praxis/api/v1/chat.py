from fastapi import APIRouter, Depends, HTTPException
import logging
from typing import Dict, Optional
from fastapi.responses import StreamingResponse

from praxis.api.deps import get_model_router, get_owner
from praxis.core.errors import MissingCredential, UnsupportedProvider
from praxis.routing.service import ModelRouter
from praxis.schemas.chat import ChatRequest, TitleRequest

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/chat/stream")
async def stream_chat(
    request: ChatRequest,
    owner: Optional[str] = Depends(get_owner),
    model_router: ModelRouter = Depends(get_model_router),
):
    """Stream canonical events for the requested model as SSE."""
    logger.info("/chat/stream start model=%s messages=%d", request.model, len(request.messages))
    try:
        session = await model_router.open_stream(request, owner)
    except (MissingCredential, UnsupportedProvider) as e:
        # Fail-fast: nothing has been sent upstream yet
        raise HTTPException(status_code=400, detail={"kind": e.kind.value, "message": str(e)})
    except Exception as e:
        logger.exception("/chat/stream error model=%s: %s", request.model, e)
        raise HTTPException(status_code=500, detail="Failed to start stream")

    async def generator():
        try:
            async for event in session:
                yield event.to_sse()
        finally:
            # Also runs when the client disconnects mid-stream
            await session.aclose()

    return StreamingResponse(
        generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )


@router.post("/chat/title")
async def generate_title(
    body: TitleRequest,
    owner: Optional[str] = Depends(get_owner),
    model_router: ModelRouter = Depends(get_model_router),
) -> Dict[str, str]:
    """One-shot title for a conversation's first message."""
    title = await model_router.generate_title(body.message, owner)
    return {"title": title}

from fastapi import APIRouter, Depends
from typing import Dict, Any

from praxis.api.deps import get_model_router
from praxis.providers.catalog import DEFAULT_CHAT_MODEL
from praxis.routing.service import ModelRouter

router = APIRouter()

_PROVIDER_NAMES = {
    "google-api": "Google API",
    "openrouter": "OpenRouter",
}


@router.get("/models")
async def get_models(model_router: ModelRouter = Depends(get_model_router)) -> Dict[str, Any]:
    """Get the model catalog grouped by provider tag."""
    models_by_provider = await model_router.list_models()
    providers: Dict[str, Any] = {}
    for pid, models in models_by_provider.items():
        providers[pid] = {
            "name": _PROVIDER_NAMES.get(pid, pid.capitalize()),
            "models": [m.model_dump() for m in models],
        }
    return {"default": DEFAULT_CHAT_MODEL, "providers": providers}

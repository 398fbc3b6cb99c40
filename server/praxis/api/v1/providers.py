from fastapi import APIRouter, Depends, HTTPException, Query
import logging
from typing import Dict, Any

from praxis.api.deps import get_key_store, require_user
from praxis.db.provider_keys import ProviderKeyStore
from praxis.schemas.providers import ProviderKeyIn, ProviderKeyOut, ProviderToggle

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/providers")
async def list_providers(
    owner: str = Depends(require_user),
    store: ProviderKeyStore = Depends(get_key_store),
) -> Dict[str, Any]:
    """List the caller's provider keys (masked)."""
    rows = await store.get_all_provider_api_keys(owner)
    return {"providers": [ProviderKeyOut.from_row(r).model_dump(mode="json") for r in rows]}


@router.post("/providers")
async def save_provider(
    body: ProviderKeyIn,
    owner: str = Depends(require_user),
    store: ProviderKeyStore = Depends(get_key_store),
) -> Dict[str, Any]:
    """Create or replace the caller's key for a provider."""
    try:
        row = await store.save_provider_api_key(owner, body.provider, body.apiKey, body.isEnabled, body.baseUrl)
    except Exception as e:
        logger.exception("Error saving provider=%s: %s", body.provider, e)
        raise HTTPException(status_code=500, detail="Failed to save provider")
    return {"provider": ProviderKeyOut.from_row(row).model_dump(mode="json")}


@router.patch("/providers")
async def toggle_provider(
    body: ProviderToggle,
    owner: str = Depends(require_user),
    store: ProviderKeyStore = Depends(get_key_store),
) -> Dict[str, bool]:
    """Enable or disable a stored key without replacing it."""
    try:
        await store.toggle_provider_enabled(owner, body.provider, body.isEnabled)
    except Exception as e:
        logger.exception("Error toggling provider=%s: %s", body.provider, e)
        raise HTTPException(status_code=500, detail="Failed to toggle provider")
    return {"success": True}


@router.delete("/providers")
async def delete_provider(
    provider: str = Query(..., min_length=1),
    owner: str = Depends(require_user),
    store: ProviderKeyStore = Depends(get_key_store),
) -> Dict[str, bool]:
    """Remove the caller's key for a provider."""
    try:
        await store.delete_provider_api_key(owner, provider)
    except Exception as e:
        logger.exception("Error deleting provider=%s: %s", provider, e)
        raise HTTPException(status_code=500, detail="Failed to delete provider")
    return {"success": True}

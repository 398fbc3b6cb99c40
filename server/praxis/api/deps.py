from __future__ import annotations
from typing import Optional
from fastapi import HTTPException, Request

from praxis.core.auth import get_authenticated_user_id, get_effective_owner
from praxis.db.provider_keys import ProviderKeyStore
from praxis.routing.service import ModelRouter


def get_model_router(request: Request) -> ModelRouter:
    return request.app.state.model_router


def get_key_store(request: Request) -> ProviderKeyStore:
    return request.app.state.key_store


def get_owner(request: Request) -> Optional[str]:
    return get_effective_owner(request, request.app.state.settings.nextauth_secret)


def require_user(request: Request) -> str:
    """Authenticated user id; guests are rejected."""
    user_id = get_authenticated_user_id(request, request.app.state.settings.nextauth_secret)
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id

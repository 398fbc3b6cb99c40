from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from praxis.core.logging import mask_secret
from praxis.db.models import ProviderApiKey


class ProviderKeyIn(BaseModel):
    provider: str = Field(..., min_length=1)
    apiKey: str = Field(..., min_length=1)
    isEnabled: bool = True
    baseUrl: Optional[str] = None


class ProviderToggle(BaseModel):
    provider: str = Field(..., min_length=1)
    isEnabled: bool


class ProviderKeyOut(BaseModel):
    """What the settings UI sees; the key itself is masked."""

    id: int
    userId: str
    provider: str
    apiKey: Optional[str]
    isEnabled: bool
    baseUrl: Optional[str] = None
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_row(cls, row: ProviderApiKey) -> "ProviderKeyOut":
        return cls(
            id=row.id,
            userId=row.user_id,
            provider=row.provider,
            apiKey=mask_secret(row.api_key),
            isEnabled=row.is_enabled,
            baseUrl=row.base_url,
            createdAt=row.created_at,
            updatedAt=row.updated_at,
        )

from __future__ import annotations
import logging
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from praxis.db.models import ProviderApiKey, utcnow
from praxis.db.session import SessionFactory

logger = logging.getLogger(__name__)


class ProviderKeyStore:
    """Per-user provider keys; at most one row per (user, provider)."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self.session_factory = session_factory

    async def _find(self, session, user_id: str, provider: str) -> Optional[ProviderApiKey]:
        stmt = select(ProviderApiKey).where(
            ProviderApiKey.user_id == user_id, ProviderApiKey.provider == provider
        )
        result = await session.exec(stmt)
        return result.first()

    async def get_provider_api_key(self, user_id: str, provider: str) -> Optional[ProviderApiKey]:
        # A failed read is treated as "no user key" so callers fall back to defaults
        try:
            async with self.session_factory() as session:
                return await self._find(session, user_id, provider)
        except SQLAlchemyError:
            logger.exception("Error getting provider API key provider=%s", provider)
            return None

    async def get_all_provider_api_keys(self, user_id: str) -> List[ProviderApiKey]:
        try:
            async with self.session_factory() as session:
                stmt = (
                    select(ProviderApiKey)
                    .where(ProviderApiKey.user_id == user_id)
                    .order_by(ProviderApiKey.provider)
                )
                result = await session.exec(stmt)
                return list(result.all())
        except SQLAlchemyError:
            logger.exception("Error getting all provider API keys")
            return []

    async def save_provider_api_key(
        self,
        user_id: str,
        provider: str,
        api_key: str,
        is_enabled: bool = True,
        base_url: Optional[str] = None,
    ) -> ProviderApiKey:
        async with self.session_factory() as session:
            existing = await self._find(session, user_id, provider)
            if existing:
                existing.api_key = api_key
                existing.is_enabled = is_enabled
                existing.base_url = base_url or None
                existing.updated_at = utcnow()
                row = existing
            else:
                row = ProviderApiKey(
                    user_id=user_id,
                    provider=provider,
                    api_key=api_key,
                    is_enabled=is_enabled,
                    base_url=base_url or None,
                )
            session.add(row)
            await session.flush()
            await session.refresh(row)
            logger.info("Saved provider API key provider=%s enabled=%s", provider, is_enabled)
            return row

    async def toggle_provider_enabled(self, user_id: str, provider: str, is_enabled: bool) -> bool:
        async with self.session_factory() as session:
            existing = await self._find(session, user_id, provider)
            if not existing:
                return False
            existing.is_enabled = is_enabled
            existing.updated_at = utcnow()
            session.add(existing)
            return True

    async def delete_provider_api_key(self, user_id: str, provider: str) -> bool:
        async with self.session_factory() as session:
            existing = await self._find(session, user_id, provider)
            if not existing:
                return False
            await session.delete(existing)
            return True

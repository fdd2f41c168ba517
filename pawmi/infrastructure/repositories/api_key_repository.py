"""Repository de API keys de integração."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from pawmi.domain.sqlmodels import ApiKey


class ApiKeyRepository:
    """Operações de banco de dados para api_keys."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_active(self, key_prefix: str, key_hash: str) -> Optional[ApiKey]:
        stmt = (
            select(ApiKey)
            .where(ApiKey.key_prefix == key_prefix)
            .where(ApiKey.key_hash == key_hash)
            .where(ApiKey.status == "active")
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def touch(self, key_id: str) -> None:
        """Atualiza last_used_at sem carregar a linha."""
        await self.session.execute(
            update(ApiKey)
            .where(ApiKey.id == key_id)
            .values(last_used_at=datetime.now(timezone.utc))
        )

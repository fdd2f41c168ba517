"""
Repository de Domínios Customizados (camada de acesso a dados).

Segue o padrão Repository do projeto: isolamento da lógica SQL
para facilitar testes e troca de banco de dados.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from pawmi.domain.sqlmodels import CustomDomain

logger = logging.getLogger("pawmi.repository.custom_domains")


class CustomDomainRepository:
    """Operações de banco de dados para custom_domains."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_active(self, hostname: str) -> Optional[CustomDomain]:
        """Retorna o domínio ativo com esse hostname (no máximo um, domain é único)."""
        stmt = (
            select(CustomDomain)
            .where(CustomDomain.domain == hostname.lower())
            .where(CustomDomain.status == "active")
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_id(self, domain_id: str) -> Optional[CustomDomain]:
        return await self.session.get(CustomDomain, domain_id)

    async def update_status(
        self, domain_id: str, status: str
    ) -> Optional[CustomDomain]:
        domain = await self.get_by_id(domain_id)
        if domain is None:
            return None

        now = datetime.now(timezone.utc)
        domain.status = status
        domain.updated_at = now
        if status == "active" and domain.verified_at is None:
            domain.verified_at = now

        self.session.add(domain)
        await self.session.flush()
        logger.info("Domínio %s agora está '%s'", domain.domain, status)
        return domain

"""
Mudança de status de domínios customizados.

Ponto único usado pela gestão de domínios (verificação DNS, desativação)
para alterar custom_domains.status: a decisão de CORS em cache daquele
hostname é descartada na mesma chamada, sem esperar o TTL.
"""

from __future__ import annotations

import logging
from typing import Optional

from pawmi.config.exceptions import ConfigurationError, NotFoundError, ValidationError
from pawmi.domain.sqlmodels import DOMAIN_STATUSES, CustomDomain
from pawmi.infrastructure.tenant_store import TenantStore
from pawmi.services.domain_cache import DomainCache

logger = logging.getLogger("pawmi.domains")


class CustomDomainService:
    def __init__(self, store: Optional[TenantStore], cache: DomainCache):
        self.store = store
        self.cache = cache

    async def set_status(self, domain_id: str, status: str) -> CustomDomain:
        if status not in DOMAIN_STATUSES:
            raise ValidationError(f"Status inválido: {status}", field="status")
        if self.store is None:
            raise ConfigurationError("database.url não configurado")

        domain = await self.store.update_custom_domain_status(domain_id, status)
        if domain is None:
            raise NotFoundError("Domínio", domain_id)

        if self.cache.invalidate(domain.domain):
            logger.info("CORS cache invalidated for %s", domain.domain)
        return domain

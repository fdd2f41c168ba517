"""
Fachada de dados consumida pelo gate de tenant/origem.

Cada método abre a própria sessão curta (uma query por chamada) e
delega aos repositórios. Erros de banco sobem como DatabaseError;
quem decide o valor seguro é o gate.
"""

import logging
from contextlib import AbstractAsyncContextManager
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pawmi.config.exceptions import DatabaseError, DomainLookupError
from pawmi.config.settings import settings
from pawmi.domain.sqlmodels import AccountMember, ApiKey, CustomDomain
from pawmi.infrastructure.repositories import (
    ApiKeyRepository,
    CustomDomainRepository,
    MembershipRepository,
)

logger = logging.getLogger("pawmi.tenant_store")

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class TenantStore:
    """Acesso às tabelas custom_domains, account_members e api_keys."""

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    async def find_active_custom_domain(self, hostname: str) -> Optional[CustomDomain]:
        try:
            async with self._session_factory() as session:
                return await CustomDomainRepository(session).find_active(hostname)
        except SQLAlchemyError as e:
            raise DomainLookupError(hostname, str(e)) from e

    async def first_accepted_membership(self, user_id: str) -> Optional[AccountMember]:
        try:
            async with self._session_factory() as session:
                return await MembershipRepository(session).first_accepted(user_id)
        except SQLAlchemyError as e:
            raise DatabaseError(f"account_members lookup failed: {e}") from e

    async def find_active_api_key(
        self, key_prefix: str, key_hash: str
    ) -> Optional[ApiKey]:
        try:
            async with self._session_factory() as session:
                return await ApiKeyRepository(session).find_active(key_prefix, key_hash)
        except SQLAlchemyError as e:
            raise DatabaseError(f"api_keys lookup failed: {e}") from e

    async def touch_api_key(self, key_id: str) -> None:
        try:
            async with self._session_factory() as session:
                await ApiKeyRepository(session).touch(key_id)
        except SQLAlchemyError as e:
            raise DatabaseError(f"api_keys update failed: {e}") from e

    async def update_custom_domain_status(
        self, domain_id: str, status: str
    ) -> Optional[CustomDomain]:
        try:
            async with self._session_factory() as session:
                return await CustomDomainRepository(session).update_status(
                    domain_id, status
                )
        except SQLAlchemyError as e:
            raise DatabaseError(f"custom_domains update failed: {e}") from e


def build_tenant_store() -> Optional[TenantStore]:
    """
    Retorna o store configurado ou None quando não há credenciais de banco.

    Sem store, o CORS fica restrito à allow-list e nenhum tenant é
    resolvido a partir do token.
    """
    if not settings.database.is_configured:
        logger.info("database.url ausente: gate em modo allow-list apenas")
        return None

    from pawmi.infrastructure.db_engine import get_session

    return TenantStore(get_session)

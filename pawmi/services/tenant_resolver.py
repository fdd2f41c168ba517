"""
Resolução do tenant (accountId) a partir do token bearer.

Roda depois da autenticação por API key e só quando ela não vinculou
nenhuma conta. Best effort: token ausente/inválido, usuário sem
membership ou erro de banco resultam em "nenhum tenant", nunca em
erro HTTP. Rotas que exigem tenant rejeitam por conta própria.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pawmi.infrastructure.identity import TokenVerifier
from pawmi.infrastructure.tenant_store import TenantStore
from pawmi.utils.auth import extract_bearer_token

logger = logging.getLogger("pawmi.tenant")


class ResolutionOutcome(str, Enum):
    RESOLVED = "resolved"
    NO_STORE = "no_store"
    NO_TOKEN = "no_token"
    INVALID_TOKEN = "invalid_token"
    NO_MEMBERSHIP = "no_membership"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class TenantResolution:
    outcome: ResolutionOutcome
    account_id: Optional[str] = None
    user_id: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.outcome is ResolutionOutcome.RESOLVED


class TenantResolver:
    def __init__(self, store: Optional[TenantStore], verifier: Optional[TokenVerifier]):
        self.store = store
        self.verifier = verifier

    @property
    def enabled(self) -> bool:
        return self.store is not None and self.verifier is not None

    async def resolve(self, authorization: Optional[str]) -> TenantResolution:
        if not self.enabled:
            return TenantResolution(ResolutionOutcome.NO_STORE)

        token = extract_bearer_token(authorization)
        if not token:
            return TenantResolution(ResolutionOutcome.NO_TOKEN)

        try:
            user_id = await self.verifier.verify(token)
            if not user_id:
                return TenantResolution(ResolutionOutcome.INVALID_TOKEN)

            membership = await self.store.first_accepted_membership(user_id)
        except Exception:
            logger.exception("Tenant resolution failed")
            return TenantResolution(ResolutionOutcome.ERROR)

        if membership is None or not membership.account_id:
            logger.debug("No accepted membership for user %s", user_id)
            return TenantResolution(ResolutionOutcome.NO_MEMBERSHIP, user_id=user_id)

        logger.debug(
            "Resolved account %s from membership of user %s",
            membership.account_id,
            user_id,
        )
        return TenantResolution(
            ResolutionOutcome.RESOLVED,
            account_id=str(membership.account_id),
            user_id=user_id,
        )

"""
Autorização de origens via domínios customizados ativos.

Consultado apenas quando a allow-list estática nega a origem:

1. Extrai o hostname da origem (mesma regra da allow-list)
2. Cache hit → devolve a decisão sem tocar no banco
3. Cache miss → custom_domains com domain == hostname AND status == 'active'
4. Erro ou timeout na query → nega e guarda False (fail closed, fail fast)

Sem banco configurado a resposta é sempre False, sem query.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from pawmi.infrastructure.tenant_store import TenantStore
from pawmi.services.domain_cache import DomainCache
from pawmi.services.origin_policy import StaticOriginPolicy, extract_hostname

logger = logging.getLogger("pawmi.cors")


@dataclass(frozen=True, slots=True)
class LookupResult:
    """Resultado tipado da consulta: ok(bool) ou err(motivo)."""

    allowed: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls, allowed: bool) -> "LookupResult":
        return cls(allowed=bool(allowed))

    @classmethod
    def err(cls, reason: str) -> "LookupResult":
        return cls(allowed=False, error=reason)

    @property
    def is_ok(self) -> bool:
        return self.error is None


class CustomDomainAuthorizer:
    def __init__(
        self,
        store: Optional[TenantStore],
        cache: DomainCache,
        timeout_seconds: Optional[float] = 2.0,
    ):
        self.store = store
        self.cache = cache
        self.timeout_seconds = timeout_seconds if timeout_seconds else None

    async def lookup(self, hostname: str) -> LookupResult:
        """Uma ida ao banco, convertida em LookupResult (nunca levanta)."""
        if self.store is None:
            return LookupResult.err("database not configured")
        try:
            row = await asyncio.wait_for(
                self.store.find_active_custom_domain(hostname),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            return LookupResult.err(f"timeout after {self.timeout_seconds}s")
        except Exception as e:
            return LookupResult.err(str(e) or type(e).__name__)
        return LookupResult.ok(row is not None)

    async def authorize(self, origin: Optional[str]) -> bool:
        if self.store is None or not origin:
            return False

        hostname = extract_hostname(origin)
        if not hostname:
            return False

        cached = self.cache.read(hostname)
        if cached is not None:
            return cached

        result = await self.lookup(hostname)
        if not result.is_ok:
            logger.warning(
                "Custom domain lookup failed for %s (%s); denying", hostname, result.error
            )
        elif result.allowed:
            logger.debug("Custom domain %s is active", hostname)

        self.cache.write(hostname, result.allowed)
        return result.allowed


class OriginGate:
    """allowed = allow-list estática OR domínio customizado ativo."""

    def __init__(self, policy: StaticOriginPolicy, authorizer: CustomDomainAuthorizer):
        self.policy = policy
        self.authorizer = authorizer

    async def is_origin_allowed(self, origin: Optional[str]) -> bool:
        if self.policy.is_allowed(origin):
            return True
        try:
            allowed = await self.authorizer.authorize(origin)
        except Exception:
            logger.exception("Origin check crashed for %r; denying", origin)
            return False
        if not allowed:
            logger.warning("Origin not allowed by CORS: %s", origin)
        return allowed

"""
Montagem do gate de tenant/origem.

O cache de domínios é um componente explícito (não um singleton de
módulo): quem monta o gate decide TTL, limite e relógio, e o mesmo
cache é entregue ao CORS e ao serviço que invalida entradas.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from pawmi.config.settings import AppSettings, settings
from pawmi.infrastructure.identity import TokenVerifier, build_token_verifier
from pawmi.infrastructure.tenant_store import TenantStore, build_tenant_store
from pawmi.services.api_keys import ApiKeyAuthenticator
from pawmi.services.domain_cache import DomainCache
from pawmi.services.domains import CustomDomainService
from pawmi.services.origin_authorizer import CustomDomainAuthorizer, OriginGate
from pawmi.services.origin_policy import StaticOriginPolicy
from pawmi.services.tenant_resolver import TenantResolver

logger = logging.getLogger("pawmi.gate")


@dataclass
class TenantOriginGate:
    store: Optional[TenantStore]
    cache: DomainCache
    origin_gate: OriginGate
    resolver: TenantResolver
    api_keys: ApiKeyAuthenticator
    domains: CustomDomainService


def build_gate(
    app_settings: AppSettings,
    store: Optional[TenantStore],
    verifier: Optional[TokenVerifier],
    clock: Callable[[], float] = time.monotonic,
) -> TenantOriginGate:
    cors = app_settings.cors
    cache = DomainCache(
        ttl_seconds=cors.domain_cache_seconds,
        max_entries=cors.domain_cache_max_entries,
        clock=clock,
    )
    policy = StaticOriginPolicy.from_setting(cors.allowed_origins)
    authorizer = CustomDomainAuthorizer(
        store, cache, timeout_seconds=cors.domain_lookup_timeout_seconds
    )

    logger.info(
        "CORS allow-list: %s | custom domains: %s (cache %ss)",
        list(policy.entries),
        "on" if store is not None else "off",
        cache.ttl_seconds,
    )
    return TenantOriginGate(
        store=store,
        cache=cache,
        origin_gate=OriginGate(policy, authorizer),
        resolver=TenantResolver(store, verifier),
        api_keys=ApiKeyAuthenticator(store),
        domains=CustomDomainService(store, cache),
    )


def build_default_gate() -> TenantOriginGate:
    return build_gate(settings, build_tenant_store(), build_token_verifier())

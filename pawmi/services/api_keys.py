"""
API keys de integração.

Formato: "pk_" + token aleatório url-safe. Os primeiros 12 caracteres
ficam em api_keys.key_prefix (busca indexada) e o SHA-256 da chave
completa em key_hash; a chave crua nunca é persistida.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
from typing import Optional

from pawmi.config.constants import ApiKeyFormat
from pawmi.config.exceptions import InvalidApiKeyError
from pawmi.domain.sqlmodels import ApiKey
from pawmi.infrastructure.tenant_store import TenantStore

logger = logging.getLogger("pawmi.api_keys")


def hash_api_key(raw_key: str) -> str:
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


def api_key_prefix(raw_key: str) -> str:
    return raw_key[: ApiKeyFormat.PREFIX_LENGTH]


def generate_api_key() -> tuple[str, str, str]:
    """Retorna (chave_crua, prefixo, hash) para a tela de gestão de chaves."""
    raw_key = ApiKeyFormat.PREFIX + secrets.token_urlsafe(ApiKeyFormat.RANDOM_BYTES)
    return raw_key, api_key_prefix(raw_key), hash_api_key(raw_key)


class ApiKeyAuthenticator:
    def __init__(self, store: Optional[TenantStore]):
        self.store = store

    @property
    def enabled(self) -> bool:
        return self.store is not None

    async def authenticate(self, raw_key: str) -> ApiKey:
        """
        Busca a chave ativa correspondente.

        Raises:
            InvalidApiKeyError: chave malformada, inexistente ou revogada
            DatabaseError: falha de banco (tratada pelo middleware)
        """
        raw_key = (raw_key or "").strip()
        if len(raw_key) <= ApiKeyFormat.PREFIX_LENGTH:
            raise InvalidApiKeyError()

        api_key = await self.store.find_active_api_key(
            api_key_prefix(raw_key), hash_api_key(raw_key)
        )
        if api_key is None:
            raise InvalidApiKeyError()
        return api_key

    async def mark_used(self, key_id: str) -> None:
        await self.store.touch_api_key(key_id)

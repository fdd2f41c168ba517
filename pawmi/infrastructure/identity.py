"""
Verificação dos access tokens do provedor de identidade.

Os tokens de sessão são JWT HS256 assinados com o segredo do projeto
(auth.jwt_secret). O user id é o claim "sub".

Performance: o payload decodificado fica em cache por hash do token
(TTL curto, nunca além do exp).
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from typing import Any, Optional

import jwt

from pawmi.config.constants import PerformanceConfig
from pawmi.config.exceptions import IdentityVerificationError
from pawmi.config.logging_config import token_fingerprint
from pawmi.config.settings import settings

logger = logging.getLogger("pawmi.identity")


def _token_cache_key(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _get_payload_exp(payload: dict) -> Optional[float]:
    exp = payload.get("exp")
    if exp is None:
        return None
    try:
        return float(exp)
    except (TypeError, ValueError):
        return None


def _jwt_error_reason(error: jwt.PyJWTError) -> str:
    if isinstance(error, jwt.ExpiredSignatureError):
        return "expired_signature"
    if isinstance(error, jwt.ImmatureSignatureError):
        return "immature_signature"
    if isinstance(error, jwt.InvalidIssuerError):
        return "invalid_issuer"
    if isinstance(error, jwt.InvalidAudienceError):
        return "invalid_audience"
    if isinstance(error, jwt.InvalidSignatureError):
        return "invalid_signature"
    if isinstance(error, jwt.MissingRequiredClaimError):
        return "missing_claim"
    return "invalid_token"


class TokenVerifier:
    """verifyBearerToken(token) -> user id."""

    def __init__(
        self,
        secret: str,
        audience: Optional[str] = "authenticated",
        issuer: Optional[str] = None,
        leeway_seconds: int = 30,
        cache_ttl: float = PerformanceConfig.JWT_CACHE_TTL,
        cache_max_size: int = PerformanceConfig.JWT_CACHE_MAX_SIZE,
    ):
        self._secret = secret
        self.audience = audience or None
        self.issuer = issuer.rstrip("/") if issuer else None
        self.leeway_seconds = max(0, leeway_seconds)
        self.cache_ttl = cache_ttl
        self.cache_max_size = cache_max_size
        # token_hash -> (payload, cached_at_monotonic, exp_epoch)
        self._cache: dict[str, tuple[dict[str, Any], float, Optional[float]]] = {}

    def _get_cached(self, token_hash: str, now_monotonic: float) -> Optional[dict]:
        cached = self._cache.get(token_hash)
        if not cached:
            return None

        payload, cached_at, exp_epoch = cached
        if now_monotonic - cached_at >= self.cache_ttl:
            del self._cache[token_hash]
            return None
        if exp_epoch is not None and time.time() >= exp_epoch + self.leeway_seconds:
            del self._cache[token_hash]
            return None
        return payload

    def _store(self, token_hash: str, payload: dict, now_monotonic: float) -> None:
        if len(self._cache) >= self.cache_max_size:
            oldest_keys = sorted(self._cache, key=lambda k: self._cache[k][1])[:50]
            for key in oldest_keys:
                del self._cache[key]
        self._cache[token_hash] = (payload, now_monotonic, _get_payload_exp(payload))

    def decode(self, token: str) -> dict[str, Any]:
        """Decodifica e valida o token; levanta IdentityVerificationError."""
        token_hash = _token_cache_key(token)
        now_monotonic = time.monotonic()
        cached = self._get_cached(token_hash, now_monotonic)
        if cached is not None:
            return cached.copy()

        decode_kwargs: dict[str, Any] = {
            "algorithms": ["HS256"],
            "leeway": self.leeway_seconds,
            "options": {"require": ["exp", "sub"], "verify_aud": bool(self.audience)},
        }
        if self.audience:
            decode_kwargs["audience"] = self.audience
        if self.issuer:
            decode_kwargs["issuer"] = self.issuer

        try:
            payload = jwt.decode(token, self._secret, **decode_kwargs)
        except jwt.PyJWTError as e:
            raise IdentityVerificationError(_jwt_error_reason(e)) from e

        if not isinstance(payload.get("sub"), str) or not payload["sub"]:
            raise IdentityVerificationError("missing_sub")

        self._store(token_hash, payload, now_monotonic)
        return payload.copy()

    async def verify(self, token: str) -> Optional[str]:
        """
        Retorna o user id do token ou None se inválido/expirado.

        Falhas são logadas com o motivo e o fingerprint do token.
        """
        try:
            payload = self.decode(token)
        except IdentityVerificationError as e:
            logger.debug(
                json.dumps(
                    {
                        "event": "token_verification_failed",
                        "reason": e.reason,
                        "fingerprint": token_fingerprint(token),
                    }
                )
            )
            return None
        return payload["sub"]


def build_token_verifier() -> Optional[TokenVerifier]:
    """Verifier a partir do settings; None sem auth.jwt_secret."""
    if not settings.auth.is_configured:
        logger.info("auth.jwt_secret ausente: tenant não será resolvido por token")
        return None
    return TokenVerifier(
        secret=settings.auth.jwt_secret,
        audience=settings.auth.jwt_audience,
        issuer=settings.auth.jwt_issuer,
        leeway_seconds=settings.auth.clock_skew_seconds,
    )

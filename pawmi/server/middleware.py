"""
Middlewares de contexto da requisição.

Ordem no pipeline (de fora para dentro):
1. ServerTimingMiddleware → Server-Timing / X-Response-Time + log de perf
2. CORS (ver cors.py)
3. ApiKeyMiddleware → x-api-key válida vincula o accountId
4. TenantMiddleware → sem accountId ainda, resolve pelo token bearer

O accountId fica em scope["state"] (request.state.account_id) e no
ContextVar account_context durante a chamada ao app interno. O primeiro
que vincula vence; nenhum middleware sobrescreve.
"""

import asyncio
import json
import logging
import time
from typing import Any, Coroutine, Optional

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from pawmi.config.constants import AccountSource, HttpHeaders
from pawmi.config.exceptions import InvalidApiKeyError
from pawmi.infrastructure.db_engine import account_context
from pawmi.server.error_handlers import error_response
from pawmi.services.api_keys import ApiKeyAuthenticator
from pawmi.services.tenant_resolver import TenantResolution, TenantResolver
from pawmi.utils.auth import header_value

logger = logging.getLogger("pawmi.middleware")
perf_logger = logging.getLogger("pawmi.perf")

# Strong refs para tarefas fire-and-forget. Sem isso, o loop mantém apenas weak refs.
_background_tasks: set[asyncio.Future[Any]] = set()


def _schedule_background_task(task_coro: Coroutine[Any, Any, Any]) -> None:
    task = asyncio.ensure_future(task_coro)
    _background_tasks.add(task)

    def _on_done(done_task: asyncio.Future[Any]) -> None:
        _background_tasks.discard(done_task)
        if done_task.cancelled():
            return
        exc = done_task.exception()
        if exc is not None:
            logger.warning("Background task failed: %s", exc)

    task.add_done_callback(_on_done)


def _request_state(scope: Scope) -> dict[str, Any]:
    return scope.setdefault("state", {})


def get_scope_account(scope: Scope) -> Optional[str]:
    return _request_state(scope).get("account_id") or None


def bind_account(scope: Scope, account_id: str, source: str) -> bool:
    """Vincula o accountId se ainda não houver um. Retorna True se vinculou."""
    state = _request_state(scope)
    if state.get("account_id"):
        return False
    state["account_id"] = account_id
    state["account_source"] = source
    return True


async def _call_with_account_context(
    app: ASGIApp, account_id: str, scope: Scope, receive: Receive, send: Send
) -> None:
    token_var = account_context.set(account_id)
    try:
        await app(scope, receive, send)
    finally:
        account_context.reset(token_var)


class ServerTimingMiddleware:
    """Mede o tempo até os headers e registra uma linha de perf por requisição."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status = {"code": 500}

        async def send_with_timing(message: Message) -> None:
            if message["type"] == "http.response.start":
                status["code"] = message["status"]
                dur_ms = (time.perf_counter() - start) * 1000
                headers = MutableHeaders(scope=message)
                headers[HttpHeaders.SERVER_TIMING] = f"total;dur={dur_ms:.1f}"
                headers[HttpHeaders.RESPONSE_TIME] = f"{dur_ms:.1f}ms"
            await send(message)

        try:
            await self.app(scope, receive, send_with_timing)
        finally:
            dur_ms = (time.perf_counter() - start) * 1000
            perf_logger.info(
                json.dumps(
                    {
                        "path": scope.get("path", ""),
                        "method": scope.get("method", "?"),
                        "status": status["code"],
                        "durMs": round(dur_ms, 1),
                    }
                )
            )


class ApiKeyMiddleware:
    """
    Autenticação por API key (integrações server-to-server).

    Chave válida → accountId vinculado + last_used_at atualizado em background.
    Chave apresentada mas inválida/revogada → 401.
    Erro de banco → loga e segue sem tenant.
    """

    def __init__(
        self,
        app: ASGIApp,
        authenticator: ApiKeyAuthenticator,
        header_name: str = "x-api-key",
    ):
        self.app = app
        self.authenticator = authenticator
        self.header_name = header_name.lower().encode("latin-1")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.authenticator.enabled:
            await self.app(scope, receive, send)
            return

        raw_key = header_value(scope, self.header_name)
        if not raw_key or get_scope_account(scope):
            await self.app(scope, receive, send)
            return

        try:
            api_key = await self.authenticator.authenticate(raw_key)
        except InvalidApiKeyError as exc:
            logger.warning(
                "Rejected API key on %s %s", scope.get("method", "?"), scope.get("path", "")
            )
            await error_response(exc)(scope, receive, send)
            return
        except Exception:
            logger.exception("API key lookup failed; continuing without account")
            await self.app(scope, receive, send)
            return

        bind_account(scope, str(api_key.account_id), AccountSource.API_KEY)
        _schedule_background_task(self.authenticator.mark_used(api_key.id))
        await _call_with_account_context(
            self.app, str(api_key.account_id), scope, receive, send
        )


class TenantMiddleware:
    """
    Resolve o accountId pelo token bearer quando a API key não resolveu.

    Nunca falha a requisição: os estados finais são "resolvido" ou
    "não resolvido", e em ambos a requisição segue.
    """

    def __init__(self, app: ASGIApp, resolver: TenantResolver):
        self.app = app
        self.resolver = resolver

    @staticmethod
    def _log_resolution(scope: Scope, resolution: TenantResolution) -> None:
        logger.debug(
            "Request %s %s - tenant %s (%s)",
            scope.get("method", "?"),
            scope.get("path", ""),
            resolution.account_id or "-",
            resolution.outcome.value,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        existing = get_scope_account(scope)
        if existing:
            logger.debug("Request already has account %s", existing)
            await self.app(scope, receive, send)
            return

        resolution = await self.resolver.resolve(
            header_value(scope, HttpHeaders.AUTHORIZATION.encode("latin-1"))
        )
        self._log_resolution(scope, resolution)
        if not resolution.resolved:
            await self.app(scope, receive, send)
            return

        bind_account(scope, resolution.account_id, AccountSource.BEARER)
        await _call_with_account_context(
            self.app, resolution.account_id, scope, receive, send
        )


def get_current_account() -> Optional[str]:
    """
    Utility function para obter o accountId atual em qualquer lugar do código.

    Uso:
        from pawmi.server.middleware import get_current_account
        account_id = get_current_account()
    """
    return account_context.get() or None

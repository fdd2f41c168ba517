"""
CORS com decisão de origem assíncrona.

O CORSMiddleware do Starlette só aceita listas/regex estáticas. Aqui a
decisão (allow-list OR domínio customizado ativo) é calculada uma vez
por requisição, antes de delegar ao middleware original, e lida de
volta em is_allowed_origin via ContextVar.

Preflight com origem negada → 400 "Disallowed CORS origin".
Requisição simples com origem negada → segue sem headers CORS (o
navegador bloqueia; clientes não-navegador recebem a resposta).
"""

from contextvars import ContextVar

from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send

from pawmi.config.constants import CorsPolicy, HttpHeaders
from pawmi.services.origin_authorizer import OriginGate
from pawmi.utils.auth import header_value

_origin_decision: ContextVar[bool] = ContextVar("origin_decision", default=False)


class OriginGateCORSMiddleware(CORSMiddleware):
    def __init__(self, app: ASGIApp, gate: OriginGate, max_age: int = 600) -> None:
        super().__init__(
            app,
            allow_origins=(),
            allow_methods=CorsPolicy.ALLOW_METHODS,
            allow_headers=CorsPolicy.ALLOW_HEADERS,
            allow_credentials=CorsPolicy.ALLOW_CREDENTIALS,
            max_age=max_age,
        )
        self.gate = gate

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        origin = header_value(scope, HttpHeaders.ORIGIN.encode("latin-1"))
        if not origin:
            await self.app(scope, receive, send)
            return

        allowed = await self.gate.is_origin_allowed(origin)
        token = _origin_decision.set(allowed)
        try:
            await super().__call__(scope, receive, send)
        finally:
            _origin_decision.reset(token)

    def is_allowed_origin(self, origin: str) -> bool:
        return _origin_decision.get()

"""
Módulo do Servidor (API Handler).

Define a aplicação FastAPI, o pipeline de middlewares e o ciclo de vida.
Responsável por:
1. Montar o gate de tenant/origem (cache, autorizador, resolvedor) a partir do settings.
2. Registrar middlewares na ordem do pipeline.
3. Gerenciar tratamento de erros e respostas JSON.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware

from pawmi.config import setup_logging
from pawmi.config.constants import ApiRoutes, PerformanceConfig
from pawmi.config.exceptions import PawmiError
from pawmi.config.settings import settings
from pawmi.presentation.routes import system
from pawmi.server.cors import OriginGateCORSMiddleware
from pawmi.server.error_handlers import generic_exception_handler, pawmi_exception_handler
from pawmi.server.gate import TenantOriginGate, build_default_gate
from pawmi.server.middleware import (
    ApiKeyMiddleware,
    ServerTimingMiddleware,
    TenantMiddleware,
)

logger = logging.getLogger("pawmi.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Pawmi API up (env=%s, tenant store=%s)",
        settings.server.env,
        "on" if app.state.gate.store is not None else "off",
    )

    # SQLite (dev): cria as tabelas. Em Postgres o schema vem do Alembic.
    db = settings.database
    if app.state.gate.store is not None and db.is_configured and not db.is_postgres:
        from pawmi.infrastructure.db_engine import init_db

        await init_db()
        logger.info("SQLite schema ready")

    yield

    # Shutdown
    logger.info("Shutting down...")
    try:
        from pawmi.infrastructure.db_engine import close_db

        await close_db()
    except Exception as e:
        logger.warning(f"Error closing SQLModel engine: {e}")


def create_app(gate: Optional[TenantOriginGate] = None) -> FastAPI:
    setup_logging(logging.DEBUG if settings.features.debug_mode else logging.INFO)

    if gate is None:
        gate = build_default_gate()

    app = FastAPI(title="Pawmi API", version="1.0", lifespan=lifespan)
    app.state.gate = gate

    # --- Global Exception Handlers ---
    app.add_exception_handler(PawmiError, pawmi_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # --- Middleware ---
    # O último adicionado é o mais externo. Pipeline de fora para dentro:
    # timing -> CORS -> GZip -> API key -> tenant -> rotas
    app.add_middleware(TenantMiddleware, resolver=gate.resolver)
    app.add_middleware(
        ApiKeyMiddleware,
        authenticator=gate.api_keys,
        header_name=settings.auth.api_key_header,
    )
    # compresslevel=1 → bem mais rápido que o nível 6 com saída só ~10% maior
    app.add_middleware(
        GZipMiddleware,
        minimum_size=PerformanceConfig.GZIP_MIN_SIZE,
        compresslevel=PerformanceConfig.GZIP_COMPRESSION_LEVEL,
    )
    # CORS envolve inclusive os 401 de API key devolvidos antes das rotas
    app.add_middleware(
        OriginGateCORSMiddleware,
        gate=gate.origin_gate,
        max_age=settings.cors.max_age,
    )
    app.add_middleware(ServerTimingMiddleware)

    # --- Routers ---
    app.include_router(system.router, prefix=ApiRoutes.PREFIX, tags=["System"])

    return app


app = create_app()

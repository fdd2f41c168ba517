"""
Database Engine Factory e Session Management com SQLModel + Async.

Este módulo fornece:
- Engine singleton criado a partir de settings.database.url
- AsyncSession factory usada pelos repositórios
- ContextVar com o accountId da requisição atual (RLS no Postgres)
"""
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

from ..config.exceptions import ConfigurationError
from ..config.settings import settings


# ContextVar para rastrear o accountId na requisição atual
account_context: ContextVar[str] = ContextVar("account_context", default="")


def _create_engine() -> AsyncEngine:
    """
    Cria engine assíncrono baseado na configuração.

    PostgreSQL: asyncpg com pool dimensionado pelo settings
    Outros (SQLite em dev/testes): pool padrão do dialeto
    """
    db = settings.database
    if not db.is_configured:
        raise ConfigurationError("database.url não configurado")

    if db.is_postgres:
        return create_async_engine(
            db.url,
            echo=settings.features.debug_mode,
            pool_pre_ping=False,
            pool_size=db.pool_size,
            max_overflow=db.max_overflow,
            pool_recycle=3600,
            pool_timeout=db.pool_timeout,
        )
    return create_async_engine(db.url, echo=settings.features.debug_mode)


# Engine singleton (lazy init via função para evitar problemas de import)
_engine: Optional[AsyncEngine] = None


def get_engine() -> AsyncEngine:
    """Retorna engine singleton, criando se necessário."""
    global _engine
    if _engine is None:
        _engine = _create_engine()
    return _engine


def get_session_maker() -> async_sessionmaker:
    """Retorna async session maker configurado."""
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,  # Evita lazy loading issues após commit
    )


async def init_db() -> None:
    """
    Cria tabelas se não existirem (útil para dev/SQLite).
    Em produção PostgreSQL, usar Alembic migrations.
    """
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def close_db() -> None:
    """Fecha conexões do pool graciosamente."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager para sessão do banco.

    Uso:
        async with get_session() as session:
            result = await session.execute(...)
    """
    session_maker = get_session_maker()
    async with session_maker() as session:
        # Em Postgres, o accountId vai para a sessão para as policies de RLS
        account_id = account_context.get()
        if settings.database.is_postgres and account_id:
            await session.execute(
                text("SELECT set_config('app.current_account', :aid, true)"),
                {"aid": account_id},
            )

        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

"""Async engine, session factory and table bootstrap."""

from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from app.config.settings import settings

# Importing the package registers every model on Base.metadata.
from app.models import Base

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def resolve_schema(url: str, raw_schema: str | None) -> str | None:
    """Return the PostgreSQL schema to use, or ``None`` for the default one."""

    if url.startswith("sqlite") or not raw_schema or not raw_schema.strip():
        return None

    schema = raw_schema.strip()
    if _IDENTIFIER.fullmatch(schema) is None:
        logger.warning("Ignoring invalid schema name %r", raw_schema)
        return None
    return schema


DATABASE_URL = settings.database.url
SCHEMA = resolve_schema(DATABASE_URL, settings.database.schema_name)


def _engine_options() -> dict[str, Any]:
    options: dict[str, Any] = {"echo": settings.debug}

    if DATABASE_URL.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_pre_ping"] = True
        if SCHEMA:
            # asyncpg applies this on every new connection.
            options["connect_args"] = {
                "server_settings": {"search_path": f"{SCHEMA},public"}
            }

    # Serverless databases pause between requests; pooled connections go stale.
    if settings.database.serverless or settings.debug:
        options["poolclass"] = NullPool
    return options


engine: AsyncEngine = create_async_engine(DATABASE_URL, **_engine_options())

SessionFactory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncIterator[AsyncSession]:
    async with (factory or SessionFactory)() as session:
        yield session


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding one session per request."""

    async with session_scope() as session:
        yield session


async def init_models(target: AsyncEngine | None = None) -> None:
    """Create the schema (when configured) and any missing tables."""

    async with (target or engine).begin() as conn:
        if SCHEMA:
            await conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{SCHEMA}"'))
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables ensured in schema %s", SCHEMA or "default")


async def dispose_engine() -> None:
    await engine.dispose()

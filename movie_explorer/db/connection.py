from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from movie_explorer.db.models import PERSISTED_MODELS, Base
from movie_explorer.settings import get_settings

logger = logging.getLogger(__name__)


def get_database_url() -> str:
    """Return the async database URL resolved from :mod:`movie_explorer.settings`.

    Invalid schemes surface as ``RuntimeError`` here so the lifespan hook fails
    before the first request instead of on first use.
    """

    return get_settings().resolved_database_url


def get_database_type() -> str:
    return get_settings().database_type


def create_engine() -> AsyncEngine:
    """Create the async SQLAlchemy engine for the configured database.

    PostgreSQL receives a warm connection pool. SQLite keeps SQLAlchemy's
    defaults because the file database is only meant for local development.
    """

    url = get_database_url()
    if url.startswith("sqlite"):
        database = make_url(url).database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)
        engine = create_async_engine(url, future=True, echo=False)
    else:
        engine = create_async_engine(
            url,
            future=True,
            echo=False,
            pool_size=10,  # Maintain 10 warm connections
            max_overflow=20,  # Allow up to 30 total connections
            pool_pre_ping=True,  # Validate connections before use
            pool_recycle=1800,  # Recycle connections every 30 min
            pool_timeout=30,  # Timeout for getting connection from pool
        )

    from movie_explorer.monitoring import setup_query_monitoring

    setup_query_monitoring(
        engine,
        slow_query_threshold=get_settings().slow_query_threshold,
    )
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@asynccontextmanager
async def begin_engine_transaction(engine: AsyncEngine) -> AsyncIterator[Any]:
    """Yield a connection from ``engine.begin()`` with mock-friendly support."""

    begin_result = engine.begin()
    if asyncio.iscoroutine(begin_result):
        begin_context = await begin_result
    else:
        begin_context = begin_result

    async with begin_context as connection:
        yield connection


async def create_sqlite_schema(engine: AsyncEngine) -> None:
    """Create the persisted tables on a SQLite development database.

    PostgreSQL deployments are migrated with Alembic instead.
    """

    tables = [model.__table__ for model in PERSISTED_MODELS]
    async with begin_engine_transaction(engine) as connection:
        await connection.run_sync(Base.metadata.create_all, tables=tables)
    logger.info(
        "SQLite schema ready: %s", ", ".join(table.name for table in tables)
    )


# Global engine/session instances for FastAPI dependency injection
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get or create the global engine instance."""
    global _engine
    if _engine is None:
        _engine = create_engine()
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Lazily create a session factory bound to the shared engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
    return _session_factory


async def dispose_engine() -> None:
    """Release pooled connections during application shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    Dependency to provide database session.

    Commits once the request handler returns and rolls back on any error, so a
    request's reads and writes share one transaction.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

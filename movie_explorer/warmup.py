"""Startup warmup for the database pool and the Redis cache.

Warmup failures are logged and never abort startup; the first real request
reports the underlying problem through the normal error handlers.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from movie_explorer.db.connection import begin_engine_transaction

logger = logging.getLogger(__name__)


async def warmup_database(
    resolve_db_type: Callable[[], str] | None = None,
    resolve_engine: Callable[[], AsyncEngine] | None = None,
) -> bool:
    """Open a pooled connection and run ``SELECT 1``.

    Returns ``True`` when the ping succeeded.
    """
    if resolve_db_type is None:
        from movie_explorer.db.connection import get_database_type as resolve_db_type
    if resolve_engine is None:
        from movie_explorer.db.connection import get_engine as resolve_engine

    start = time.perf_counter()
    try:
        logger.debug("Database warmup target detected as %s", resolve_db_type())
        async with begin_engine_transaction(resolve_engine()) as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Database warmup failed: %s", exc)
        return False

    elapsed = (time.perf_counter() - start) * 1000
    logger.info("✓ Database connection warmed up (%.0fms)", elapsed)
    return True


async def warmup_redis() -> bool:
    """Connect to Redis; a missing server only disables caching."""
    from movie_explorer.cache import get_redis

    start = time.perf_counter()
    redis = await get_redis()
    if redis is None:
        logger.info("⚠ Redis warmup skipped (connection unavailable)")
        return False

    elapsed = (time.perf_counter() - start) * 1000
    logger.info("✓ Redis connection warmed up (%.0fms)", elapsed)
    return True


async def warmup_all(
    resolve_db_type: Callable[[], str] | None = None,
    resolve_engine: Callable[[], AsyncEngine] | None = None,
) -> None:
    logger.info("=" * 60)
    logger.info("Warming up backend connections...")
    logger.info("=" * 60)

    start = time.perf_counter()
    await warmup_database(resolve_db_type=resolve_db_type, resolve_engine=resolve_engine)
    await warmup_redis()

    total_elapsed = (time.perf_counter() - start) * 1000
    logger.info("✓ Backend warmup complete (%.0fms)", total_elapsed)

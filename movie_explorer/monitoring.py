"""Slow-query logging for the favorites database.

The favorites table is small per user, so anything slower than the configured
threshold usually means a missing index or a saturated connection pool.
"""

import logging
import time
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

_MAX_LOGGED_STATEMENT = 500


def setup_query_monitoring(
    engine: AsyncEngine,
    slow_query_threshold: float = 0.1,
) -> None:
    """Log a warning for every statement slower than ``slow_query_threshold``.

    Args:
        engine: async engine whose ``sync_engine`` receives the cursor events
        slow_query_threshold: threshold in seconds (default: 0.1s = 100ms)
    """
    if not hasattr(engine, "sync_engine"):
        logger.warning("Engine does not have sync_engine attribute, skipping query monitoring")
        return

    @event.listens_for(engine.sync_engine, "before_cursor_execute")
    def _record_start(
        conn: Any,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(engine.sync_engine, "after_cursor_execute")
    def _log_if_slow(
        conn: Any,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        elapsed = time.perf_counter() - conn.info["query_start_time"].pop()
        if elapsed <= slow_query_threshold:
            return

        shown = statement[:_MAX_LOGGED_STATEMENT]
        if len(statement) > _MAX_LOGGED_STATEMENT:
            shown += "..."

        # Parameters are left out: they carry user identifiers.
        logger.warning(
            "Slow query detected (%.3fs): %s",
            elapsed,
            shown,
            extra={
                "duration_seconds": elapsed,
                "threshold_seconds": slow_query_threshold,
            },
        )

    logger.info(
        "Query performance monitoring enabled (slow query threshold: %ss)",
        slow_query_threshold,
    )

"""Tests for slow-query logging on the async engine."""

from __future__ import annotations

import logging

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from movie_explorer.monitoring import setup_query_monitoring


@pytest.mark.asyncio
async def test_statements_over_threshold_are_logged_without_parameters(
    caplog: pytest.LogCaptureFixture,
) -> None:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    setup_query_monitoring(engine, slow_query_threshold=-1.0)

    with caplog.at_level(logging.WARNING, logger="movie_explorer.monitoring"):
        async with engine.connect() as conn:
            await conn.execute(text("SELECT :user_id"), {"user_id": "auth0|secret"})
    await engine.dispose()

    assert "Slow query detected" in caplog.text
    assert "auth0|secret" not in caplog.text


@pytest.mark.asyncio
async def test_fast_statements_are_not_logged(caplog: pytest.LogCaptureFixture) -> None:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    setup_query_monitoring(engine, slow_query_threshold=60.0)

    with caplog.at_level(logging.WARNING, logger="movie_explorer.monitoring"):
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    await engine.dispose()

    assert "Slow query detected" not in caplog.text

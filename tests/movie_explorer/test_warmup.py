"""Regression tests for startup warmup routines."""

from __future__ import annotations

import logging
from typing import Any
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

import movie_explorer.cache as cache_module
import movie_explorer.warmup as warmup


class _DummyTransaction:
    """Async context manager handing out a mocked connection."""

    def __init__(self) -> None:
        self.connection: AsyncMock = AsyncMock()

    async def __aenter__(self) -> AsyncMock:
        return self.connection

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> bool:
        return False


@pytest.mark.asyncio
async def test_warmup_database_executes_ping(monkeypatch: pytest.MonkeyPatch) -> None:
    dummy_txn = _DummyTransaction()
    sentinel_engine = object()
    captured: list[object] = []

    def _capture_engine(engine: object) -> _DummyTransaction:
        captured.append(engine)
        return dummy_txn

    monkeypatch.setattr(warmup, "begin_engine_transaction", _capture_engine)

    ok = await warmup.warmup_database(
        resolve_db_type=lambda: "postgresql",
        resolve_engine=lambda: sentinel_engine,
    )

    assert ok is True
    assert captured == [sentinel_engine]
    executed = dummy_txn.connection.execute.await_args.args[0]
    assert str(executed).strip().upper() == "SELECT 1"


@pytest.mark.asyncio
async def test_warmup_database_failure_is_logged_not_raised(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    dummy_txn = _DummyTransaction()
    dummy_txn.connection.execute.side_effect = OperationalError(
        "SELECT 1", {}, Exception("connection refused")
    )
    monkeypatch.setattr(warmup, "begin_engine_transaction", lambda engine: dummy_txn)

    with caplog.at_level(logging.WARNING):
        ok = await warmup.warmup_database(
            resolve_db_type=lambda: "postgresql",
            resolve_engine=lambda: object(),
        )

    assert ok is False
    assert "Database warmup failed" in caplog.text


@pytest.mark.asyncio
async def test_warmup_redis_skips_when_unavailable(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    async def _no_redis() -> None:
        return None

    monkeypatch.setattr(cache_module, "get_redis", _no_redis)

    with caplog.at_level(logging.INFO):
        assert await warmup.warmup_redis() is False

    assert "Redis warmup skipped" in caplog.text

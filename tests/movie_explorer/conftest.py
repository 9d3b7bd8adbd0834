"""Shared fixtures for asynchronous database access and favorite seeding."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from movie_explorer.db.models import Base, Favorite

SeedFavorite = Callable[..., Awaitable[Favorite]]

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def session() -> AsyncIterator[AsyncSession]:
    """Provide an in-memory SQLite session with freshly created tables."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as db_session:
        yield db_session
        if db_session.in_transaction():
            await db_session.rollback()
    await engine.dispose()


@pytest.fixture
def seed_favorite(session: AsyncSession) -> SeedFavorite:
    """Insert and commit favorites with strictly increasing ``created_at``.

    ``minutes`` offsets the creation time from a fixed base so listing order is
    deterministic.
    """

    async def _seed(
        user_id: str,
        imdb_id: str,
        title: str,
        *,
        year: str = "2010",
        minutes: int = 0,
        **snapshot: str | None,
    ) -> Favorite:
        created = BASE_TIME + timedelta(minutes=minutes)
        favorite = Favorite(
            user_id=user_id,
            imdb_id=imdb_id,
            title=title,
            year=year,
            created_at=created,
            updated_at=created,
            **snapshot,
        )
        session.add(favorite)
        await session.commit()
        return favorite

    return _seed

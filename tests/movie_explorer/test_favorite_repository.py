"""Tests for the SQLAlchemy favorites repository."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from movie_explorer.db.models import Favorite
from movie_explorer.db.repositories.favorite_repository import FavoriteRepository
from movie_explorer.errors import DuplicateFavoriteError

from .conftest import SeedFavorite


@pytest.mark.asyncio
async def test_insert_rejects_duplicate_user_movie_pair(
    session: AsyncSession, seed_favorite: SeedFavorite
) -> None:
    await seed_favorite("u1", "tt1375666", "Inception")
    repository = FavoriteRepository(session)

    with pytest.raises(DuplicateFavoriteError) as excinfo:
        await repository.insert(
            Favorite(user_id="u1", imdb_id="tt1375666", title="Inception", year="2010")
        )

    assert excinfo.value.imdb_id == "tt1375666"
    count = await session.scalar(select(func.count()).select_from(Favorite))
    assert count == 1


@pytest.mark.asyncio
async def test_same_movie_can_be_saved_by_different_users(
    session: AsyncSession, seed_favorite: SeedFavorite
) -> None:
    await seed_favorite("u1", "tt1375666", "Inception")
    repository = FavoriteRepository(session)

    saved = await repository.insert(
        Favorite(user_id="u2", imdb_id="tt1375666", title="Inception", year="2010")
    )

    assert saved.id
    assert await repository.exists("u2", "tt1375666") is True


@pytest.mark.asyncio
async def test_membership_lookup_returns_only_owned_ids(
    session: AsyncSession, seed_favorite: SeedFavorite
) -> None:
    await seed_favorite("u1", "tt0000001", "Alpha")
    await seed_favorite("u1", "tt0000002", "Bravo")
    await seed_favorite("u2", "tt0000003", "Charlie")
    repository = FavoriteRepository(session)

    found = await repository.find_many_by_user_and_external_ids(
        "u1", ["tt0000001", "tt0000003", "tt9999999"]
    )

    assert found == {"tt0000001"}


@pytest.mark.asyncio
async def test_membership_lookup_skips_query_for_empty_input(
    session: AsyncSession, monkeypatch: pytest.MonkeyPatch
) -> None:
    repository = FavoriteRepository(session)

    async def _fail(*args, **kwargs):
        raise AssertionError("no query expected for an empty id list")

    monkeypatch.setattr(session, "execute", _fail)

    assert await repository.find_many_by_user_and_external_ids("u1", []) == set()


@pytest.mark.asyncio
async def test_page_orders_newest_first_and_counts_total(
    session: AsyncSession, seed_favorite: SeedFavorite
) -> None:
    for index in range(5):
        await seed_favorite("u1", f"tt000000{index}", f"Movie {index}", minutes=index)
    await seed_favorite("u2", "tt1111111", "Someone Else's", minutes=10)
    repository = FavoriteRepository(session)

    rows, total = await repository.page("u1", offset=1, limit=2)

    assert total == 5
    assert [row.title for row in rows] == ["Movie 3", "Movie 2"]


@pytest.mark.asyncio
async def test_page_title_prefix_is_case_insensitive_and_literal(
    session: AsyncSession, seed_favorite: SeedFavorite
) -> None:
    await seed_favorite("u1", "tt0000001", "The Matrix", minutes=1)
    await seed_favorite("u1", "tt0000002", "the thing", minutes=2)
    await seed_favorite("u1", "tt0000003", "Matrix Reloaded", minutes=3)
    await seed_favorite("u1", "tt0000004", "100% Wolf", minutes=4)
    await seed_favorite("u1", "tt0000005", "1000 Days", minutes=5)
    repository = FavoriteRepository(session)

    rows, total = await repository.page("u1", offset=0, limit=10, title_prefix="THE")
    assert total == 2
    assert [row.title for row in rows] == ["the thing", "The Matrix"]

    rows, total = await repository.page("u1", offset=0, limit=10, title_prefix="100%")
    assert total == 1
    assert rows[0].title == "100% Wolf"


@pytest.mark.asyncio
async def test_find_by_id_can_be_scoped_to_owner(
    session: AsyncSession, seed_favorite: SeedFavorite
) -> None:
    favorite = await seed_favorite("u1", "tt1375666", "Inception")
    repository = FavoriteRepository(session)

    assert (await repository.find_by_id(favorite.id)) is not None
    assert (await repository.find_by_id(favorite.id, user_id="u1")) is not None
    assert (await repository.find_by_id(favorite.id, user_id="u2")) is None

"""Database access for the ``favorites`` table.

The repository owns the storage-level invariants:

* ``insert`` relies on the ``uq_favorites_user_imdb`` unique constraint and
  reports a violation as :class:`DuplicateFavoriteError`. Services may check
  for duplicates first, but the constraint is what closes the race between two
  concurrent inserts.
* ``page`` orders by ``created_at`` descending (newest first) and applies the
  optional title prefix case-insensitively on every backend.
* ``find_many_by_user_and_external_ids`` never queries for an empty input.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from movie_explorer.db.models import Favorite
from movie_explorer.errors import DuplicateFavoriteError

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


class FavoriteRepository:
    """Encapsulates SQLAlchemy operations on :class:`Favorite` rows."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def insert(self, favorite: Favorite) -> Favorite:
        """Persist a new favorite.

        Raises:
            DuplicateFavoriteError: the user already saved ``favorite.imdb_id``.
                The session is rolled back because the failed flush leaves the
                transaction unusable.
        """

        self._session.add(favorite)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            logger.info(
                "Unique constraint rejected favorite %s for user %s",
                favorite.imdb_id,
                favorite.user_id,
            )
            raise DuplicateFavoriteError(favorite.imdb_id) from exc
        return favorite

    async def find_by_id(
        self, favorite_id: str, *, user_id: str | None = None
    ) -> Favorite | None:
        """Return a favorite by primary key, optionally scoped to its owner."""

        query = select(Favorite).where(Favorite.id == favorite_id)
        if user_id is not None:
            query = query.where(Favorite.user_id == user_id)
        result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def find_by_user_and_external_id(
        self, user_id: str, imdb_id: str
    ) -> Favorite | None:
        query = select(Favorite).where(
            Favorite.user_id == user_id,
            Favorite.imdb_id == imdb_id,
        )
        result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def exists(self, user_id: str, imdb_id: str) -> bool:
        """Existence check that only selects the primary key."""

        query = (
            select(Favorite.id)
            .where(Favorite.user_id == user_id, Favorite.imdb_id == imdb_id)
            .limit(1)
        )
        result = await self._session.execute(query)
        return result.scalar_one_or_none() is not None

    async def find_many_by_user_and_external_ids(
        self, user_id: str, imdb_ids: Iterable[str]
    ) -> set[str]:
        """Return the subset of ``imdb_ids`` the user has favorited."""

        wanted = set(imdb_ids)
        if not wanted:
            return set()

        query = select(Favorite.imdb_id).where(
            Favorite.user_id == user_id,
            Favorite.imdb_id.in_(wanted),
        )
        result = await self._session.execute(query)
        return set(result.scalars().all())

    async def page(
        self,
        user_id: str,
        *,
        offset: int,
        limit: int,
        title_prefix: str | None = None,
    ) -> tuple[list[Favorite], int]:
        """Return one page of the user's favorites plus the filtered total."""

        conditions = [Favorite.user_id == user_id]
        if title_prefix:
            conditions.append(
                func.lower(Favorite.title).startswith(
                    title_prefix.lower(), autoescape=True
                )
            )

        count_query = select(func.count()).select_from(Favorite).where(*conditions)
        total = (await self._session.execute(count_query)).scalar_one()

        query = (
            select(Favorite)
            .where(*conditions)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(query)
        return list(result.scalars().all()), int(total)

    async def update(self, favorite: Favorite) -> Favorite:
        """Flush pending attribute changes and bump ``updated_at``."""

        favorite.updated_at = _now()
        await self._session.flush()
        return favorite

    async def delete(self, favorite: Favorite) -> None:
        await self._session.delete(favorite)
        await self._session.flush()


__all__ = ["FavoriteRepository"]

"""Business logic powering the favorites API endpoints.

Storage concerns are delegated to :class:`FavoriteRepository`:

* ``page`` backs the paginated listing (clamped here, never rejected).
* ``find_by_id``/``find_by_user_and_external_id`` back single-record reads.
  Reads are always scoped to the caller, so another user's favorite is simply
  "not found".
* ``insert``/``update``/``delete`` back mutations. Update and delete fetch by
  primary key alone so that a missing favorite (404) stays distinguishable
  from someone else's favorite (403).
* ``find_many_by_user_and_external_ids``/``exists`` back the membership
  checks consumed by :mod:`movie_explorer.services.enrichment_service`.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from movie_explorer.db.connection import get_db
from movie_explorer.db.models import Favorite, utcnow
from movie_explorer.db.repositories.favorite_repository import FavoriteRepository
from movie_explorer.errors import (
    DuplicateFavoriteError,
    FavoriteNotFoundError,
    FavoriteOwnershipError,
    FavoriteValidationError,
)
from movie_explorer.schemas.favorites import (
    REQUIRED_SNAPSHOT_FIELDS,
    FavoriteCreate,
    FavoriteMovie,
    FavoriteUpdate,
    PaginatedFavoritesResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
# Largest page whose offset still fits a signed 64-bit OFFSET clause.
MAX_PAGE = (2**63 - 1) // MAX_PAGE_SIZE


def clamp_pagination(page: int | None, limit: int | None) -> tuple[int, int]:
    """Coerce page/limit into ``1 <= page <= MAX_PAGE`` and ``1 <= limit <= 100``."""

    current_page = min(MAX_PAGE, max(1, page or 1))
    if limit is None:
        limit = DEFAULT_PAGE_SIZE
    items_per_page = max(1, min(MAX_PAGE_SIZE, limit))
    return current_page, items_per_page


class FavoritesService:
    """Enforces favorites business rules on top of the repository."""

    def __init__(self, repository: FavoriteRepository) -> None:
        self._repository = repository

    async def list_favorites(
        self,
        user_id: str,
        *,
        page: int | None = 1,
        limit: int | None = DEFAULT_PAGE_SIZE,
        title_filter: str | None = None,
    ) -> PaginatedFavoritesResponse:
        current_page, items_per_page = clamp_pagination(page, limit)
        offset = (current_page - 1) * items_per_page

        favorites, total = await self._repository.page(
            user_id,
            offset=offset,
            limit=items_per_page,
            title_prefix=title_filter or None,
        )
        total_pages = math.ceil(total / items_per_page)

        return PaginatedFavoritesResponse(
            data=[FavoriteMovie.model_validate(item) for item in favorites],
            total=total,
            page=current_page,
            limit=items_per_page,
            total_pages=total_pages,
            has_next_page=current_page < total_pages,
            has_previous_page=current_page > 1,
        )

    async def get_by_external_id(self, imdb_id: str, user_id: str) -> FavoriteMovie:
        favorite = await self._repository.find_by_user_and_external_id(user_id, imdb_id)
        if favorite is None:
            raise FavoriteNotFoundError()
        return FavoriteMovie.model_validate(favorite)

    async def get_by_id(self, favorite_id: str, user_id: str) -> FavoriteMovie:
        favorite = await self._repository.find_by_id(favorite_id, user_id=user_id)
        if favorite is None:
            raise FavoriteNotFoundError()
        return FavoriteMovie.model_validate(favorite)

    async def create(self, user_id: str, payload: FavoriteCreate) -> FavoriteMovie:
        """Save a movie snapshot for ``user_id``.

        The pre-check only short-circuits the common case; a concurrent insert
        that slips past it is still rejected by the repository with the same
        :class:`DuplicateFavoriteError`.
        """

        existing = await self._repository.find_by_user_and_external_id(
            user_id, payload.imdb_id
        )
        if existing is not None:
            raise DuplicateFavoriteError(payload.imdb_id)

        now = utcnow()
        favorite = Favorite(
            user_id=user_id,
            imdb_id=payload.imdb_id,
            title=payload.title,
            year=payload.year,
            poster=payload.poster,
            genre=payload.genre,
            plot=payload.plot,
            imdb_rating=payload.imdb_rating,
            director=payload.director,
            actors=payload.actors,
            runtime=payload.runtime,
            created_at=now,
            updated_at=now,
        )
        saved = await self._repository.insert(favorite)
        logger.info("User %s added favorite %s (%s)", user_id, saved.id, saved.imdb_id)
        return FavoriteMovie.model_validate(saved)

    async def update(
        self, favorite_id: str, user_id: str, payload: FavoriteUpdate
    ) -> FavoriteMovie:
        favorite = await self._require_owned(favorite_id, user_id, action="update")

        changes = payload.changes()
        cleared_required = sorted(
            name
            for name, value in changes.items()
            if value is None and name in REQUIRED_SNAPSHOT_FIELDS
        )
        if cleared_required:
            raise FavoriteValidationError(
                f"Required fields cannot be null: {', '.join(cleared_required)}"
            )

        for name, value in changes.items():
            setattr(favorite, name, value)

        updated = await self._repository.update(favorite)
        return FavoriteMovie.model_validate(updated)

    async def delete(self, favorite_id: str, user_id: str) -> None:
        favorite = await self._require_owned(favorite_id, user_id, action="delete")
        await self._repository.delete(favorite)
        logger.info("User %s removed favorite %s", user_id, favorite_id)

    async def check_membership(
        self, user_id: str, imdb_ids: Sequence[str]
    ) -> set[str]:
        """Return which of ``imdb_ids`` the user has favorited."""

        if not imdb_ids:
            return set()
        return await self._repository.find_many_by_user_and_external_ids(
            user_id, imdb_ids
        )

    async def is_member(self, user_id: str, imdb_id: str) -> bool:
        return await self._repository.exists(user_id, imdb_id)

    async def _require_owned(
        self, favorite_id: str, user_id: str, *, action: str
    ) -> Favorite:
        favorite = await self._repository.find_by_id(favorite_id)
        if favorite is None:
            raise FavoriteNotFoundError()
        if favorite.user_id != user_id:
            logger.warning(
                "User %s attempted to %s favorite %s owned by another user",
                user_id,
                action,
                favorite_id,
            )
            raise FavoriteOwnershipError(f"You can only {action} your own favorites")
        return favorite


def get_favorites_service(
    session: AsyncSession = Depends(get_db),
) -> FavoritesService:
    """FastAPI dependency that wires the service to the request's session."""

    return FavoritesService(FavoriteRepository(session))


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "FavoritesService",
    "MAX_PAGE",
    "MAX_PAGE_SIZE",
    "clamp_pagination",
    "get_favorites_service",
]

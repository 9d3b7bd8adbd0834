"""Attach the caller's favorite status to movie data fetched from the provider.

The enricher only reads favorites. A failing membership check fails the whole
call with :class:`UpstreamError`: reporting ``isFavorite=false`` for a movie
the user did save would misrepresent their data.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from movie_explorer.errors import UpstreamError
from movie_explorer.schemas.movies import (
    EnrichedMovieDetail,
    EnrichedMovieSummary,
    MovieDetail,
    MovieSummary,
)

logger = logging.getLogger(__name__)


class MembershipSource(Protocol):
    """Subset of :class:`FavoritesService` the enricher depends on."""

    async def check_membership(
        self, user_id: str, imdb_ids: Sequence[str]
    ) -> set[str]: ...

    async def is_member(self, user_id: str, imdb_id: str) -> bool: ...


class FavoriteStatusEnricher:
    def __init__(self, favorites: MembershipSource) -> None:
        self._favorites = favorites

    async def enrich_search_results(
        self, user_id: str, results: Sequence[MovieSummary]
    ) -> list[EnrichedMovieSummary]:
        """Return ``results`` in their original order with ``is_favorite`` set.

        An empty input returns immediately without touching the store.
        """

        if not results:
            return []

        imdb_ids = [movie.imdb_id for movie in results]
        try:
            favorited = await self._favorites.check_membership(user_id, imdb_ids)
        except SQLAlchemyError as exc:
            logger.error(
                "Favorite membership check failed for user %s (%d ids): %s",
                user_id,
                len(imdb_ids),
                exc,
            )
            raise UpstreamError(
                "favorites", "Unable to determine favorite status"
            ) from exc

        return [
            EnrichedMovieSummary(
                **movie.model_dump(), is_favorite=movie.imdb_id in favorited
            )
            for movie in results
        ]

    async def enrich_detail(
        self, user_id: str, detail: MovieDetail
    ) -> EnrichedMovieDetail:
        try:
            is_favorite = await self._favorites.is_member(user_id, detail.imdb_id)
        except SQLAlchemyError as exc:
            logger.error(
                "Favorite lookup failed for user %s and movie %s: %s",
                user_id,
                detail.imdb_id,
                exc,
            )
            raise UpstreamError(
                "favorites", "Unable to determine favorite status"
            ) from exc

        return EnrichedMovieDetail(**detail.model_dump(), is_favorite=is_favorite)


__all__ = ["FavoriteStatusEnricher", "MembershipSource"]

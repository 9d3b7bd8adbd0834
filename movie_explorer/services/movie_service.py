"""Movie search, detail and analysis backed by the metadata provider.

Provider data is fetched first and only then decorated with the caller's
favorite status, so a provider outage never touches the favorites store.
"""

from __future__ import annotations

import logging
from typing import Protocol

from fastapi import Depends

from movie_explorer.clients.ai_client import AIClient, get_ai_client
from movie_explorer.clients.omdb_client import get_omdb_client
from movie_explorer.schemas.movies import (
    EnrichedMovieDetail,
    EnrichedMovieSearchPage,
    MovieDetail,
    MovieSearchPage,
)
from movie_explorer.schemas.recommendations import MovieAnalysis
from movie_explorer.services.enrichment_service import FavoriteStatusEnricher
from movie_explorer.services.favorites_service import (
    FavoritesService,
    get_favorites_service,
)

logger = logging.getLogger(__name__)


class MovieProvider(Protocol):
    async def search_by_title(self, title: str, page: int = 1) -> MovieSearchPage: ...

    async def get_by_id(self, imdb_id: str) -> MovieDetail: ...


class MovieService:
    def __init__(
        self,
        provider: MovieProvider,
        enricher: FavoriteStatusEnricher,
        ai: AIClient,
    ) -> None:
        self._provider = provider
        self._enricher = enricher
        self._ai = ai

    async def search(
        self, title: str, user_id: str, page: int = 1
    ) -> EnrichedMovieSearchPage:
        current_page = max(1, page)
        search_page = await self._provider.search_by_title(title, current_page)
        results = await self._enricher.enrich_search_results(
            user_id, search_page.results
        )
        return EnrichedMovieSearchPage(
            results=results,
            total_results=search_page.total_results,
            page=search_page.page,
        )

    async def get_details(self, imdb_id: str, user_id: str) -> EnrichedMovieDetail:
        detail = await self._provider.get_by_id(imdb_id)
        return await self._enricher.enrich_detail(user_id, detail)

    async def get_analysis(self, imdb_id: str) -> MovieAnalysis:
        detail = await self._provider.get_by_id(imdb_id)
        logger.debug("Analysing ratings for %s (%d sources)", imdb_id, len(detail.ratings))
        return await self._ai.analyze_sentiment(
            detail.title,
            detail.ratings,
            imdb_rating=detail.imdb_rating,
            imdb_votes=detail.imdb_votes,
        )


def get_movie_service(
    provider: MovieProvider = Depends(get_omdb_client),
    favorites: FavoritesService = Depends(get_favorites_service),
    ai: AIClient = Depends(get_ai_client),
) -> MovieService:
    return MovieService(provider, FavoriteStatusEnricher(favorites), ai)


__all__ = ["MovieProvider", "MovieService", "get_movie_service"]

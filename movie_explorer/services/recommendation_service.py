"""AI recommendations for movies similar to a given IMDb title."""

from __future__ import annotations

import logging

from fastapi import Depends

from movie_explorer.clients.ai_client import AIClient, get_ai_client
from movie_explorer.clients.omdb_client import get_omdb_client
from movie_explorer.schemas.recommendations import (
    MAX_RECOMMENDATIONS,
    RecommendationResponse,
    RecommendedFor,
)
from movie_explorer.services.movie_service import MovieProvider

logger = logging.getLogger(__name__)


class RecommendationService:
    def __init__(self, provider: MovieProvider, ai: AIClient) -> None:
        self._provider = provider
        self._ai = ai

    async def get_recommendations(self, imdb_id: str) -> RecommendationResponse:
        """Look the movie up, then ask the AI provider for similar titles.

        Raises ``MovieNotFoundError`` when the provider does not know
        ``imdb_id`` and ``UpstreamError`` when either provider fails.
        """

        movie = await self._provider.get_by_id(imdb_id)
        recommendations = await self._ai.recommend(
            movie.title,
            year=movie.year,
            genre=movie.genre,
            plot=movie.plot,
        )
        return RecommendationResponse(
            movie=RecommendedFor(
                title=movie.title, year=movie.year, imdb_id=movie.imdb_id
            ),
            recommendations=recommendations[:MAX_RECOMMENDATIONS],
        )


def get_recommendation_service(
    provider: MovieProvider = Depends(get_omdb_client),
    ai: AIClient = Depends(get_ai_client),
) -> RecommendationService:
    return RecommendationService(provider, ai)


__all__ = ["RecommendationService", "get_recommendation_service"]

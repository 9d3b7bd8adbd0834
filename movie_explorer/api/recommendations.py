"""AI-generated recommendations for a movie."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from movie_explorer.auth import get_current_user_id
from movie_explorer.errors import MovieNotFoundError
from movie_explorer.schemas.recommendations import RecommendationResponse
from movie_explorer.services.recommendation_service import (
    RecommendationService,
    get_recommendation_service,
)

router = APIRouter()


@router.get("/{imdb_id}", response_model=RecommendationResponse)
async def get_recommendations(
    imdb_id: str,
    user_id: str = Depends(get_current_user_id),
    service: RecommendationService = Depends(get_recommendation_service),
) -> RecommendationResponse:
    try:
        return await service.get_recommendations(imdb_id)
    except MovieNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

"""Movie search and detail endpoints, decorated with favorite status."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from movie_explorer.auth import get_current_user_id
from movie_explorer.errors import MovieNotFoundError
from movie_explorer.schemas.movies import EnrichedMovieDetail, EnrichedMovieSearchPage
from movie_explorer.schemas.recommendations import MovieAnalysis
from movie_explorer.services.movie_service import MovieService, get_movie_service

router = APIRouter()


@router.get("/search", response_model=EnrichedMovieSearchPage)
async def search_movies(
    title: str = Query("", description="Title to search for"),
    page: int = Query(1),
    user_id: str = Depends(get_current_user_id),
    service: MovieService = Depends(get_movie_service),
) -> EnrichedMovieSearchPage:
    query = title.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Query parameter 'title' is required")
    return await service.search(query, user_id, page=page)


@router.get("/{imdb_id}", response_model=EnrichedMovieDetail)
async def get_movie(
    imdb_id: str,
    user_id: str = Depends(get_current_user_id),
    service: MovieService = Depends(get_movie_service),
) -> EnrichedMovieDetail:
    try:
        return await service.get_details(imdb_id, user_id)
    except MovieNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/{imdb_id}/analysis", response_model=MovieAnalysis)
async def get_movie_analysis(
    imdb_id: str,
    user_id: str = Depends(get_current_user_id),
    service: MovieService = Depends(get_movie_service),
) -> MovieAnalysis:
    """Summarise audience and critic reception from the movie's ratings."""

    try:
        return await service.get_analysis(imdb_id)
    except MovieNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

"""FastAPI router exposing the caller's favorite movies."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from movie_explorer.auth import get_current_user_id
from movie_explorer.errors import FavoriteValidationError
from movie_explorer.schemas.favorites import (
    FavoriteCreate,
    FavoriteMovie,
    FavoriteUpdate,
    PaginatedFavoritesResponse,
)
from movie_explorer.services.favorites_service import (
    DEFAULT_PAGE_SIZE,
    FavoritesService,
    get_favorites_service,
)

router = APIRouter()


@router.get("", response_model=PaginatedFavoritesResponse)
async def list_favorites(
    page: int = Query(1, description="1-based page number; values below 1 are clamped"),
    limit: int = Query(
        DEFAULT_PAGE_SIZE, description="Page size; clamped into the range 1-100"
    ),
    title_filter: str | None = Query(
        None, alias="filter", description="Case-insensitive title prefix"
    ),
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> PaginatedFavoritesResponse:
    """Return the caller's favorites, newest first."""

    return await service.list_favorites(
        user_id, page=page, limit=limit, title_filter=title_filter
    )


@router.get("/imdbId/{imdb_id}", response_model=FavoriteMovie)
async def get_favorite_by_imdb_id(
    imdb_id: str,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteMovie:
    try:
        return await service.get_by_external_id(imdb_id, user_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/{favorite_id}", response_model=FavoriteMovie)
async def get_favorite(
    favorite_id: str,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteMovie:
    """Fetch one favorite; another user's record is reported as missing."""

    try:
        return await service.get_by_id(favorite_id, user_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.post("", response_model=FavoriteMovie, status_code=status.HTTP_201_CREATED)
async def create_favorite(
    payload: FavoriteCreate,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteMovie:
    try:
        return await service.create(user_id, payload)
    except FavoriteValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@router.put("/{favorite_id}", response_model=FavoriteMovie)
async def update_favorite(
    favorite_id: str,
    payload: FavoriteUpdate,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteMovie:
    """Apply a partial update to one of the caller's favorites."""

    try:
        return await service.update(favorite_id, user_id, payload)
    except PermissionError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.delete("/{favorite_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_favorite(
    favorite_id: str,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> Response:
    try:
        await service.delete(favorite_id, user_id)
    except PermissionError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)

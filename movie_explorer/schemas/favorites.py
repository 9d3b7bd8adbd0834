"""Pydantic schemas that power the favorites API surface.

JSON payloads use camelCase keys (``imdbId``, ``totalPages``) to match the
single-page frontend; Python code keeps using snake_case attribute names.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Fields the owner may edit after the favorite was created.
SNAPSHOT_FIELDS: tuple[str, ...] = (
    "title",
    "year",
    "poster",
    "genre",
    "plot",
    "imdb_rating",
    "director",
    "actors",
    "runtime",
)
REQUIRED_SNAPSHOT_FIELDS: frozenset[str] = frozenset({"title", "year"})


class CamelModel(BaseModel):
    """Base model serialising to camelCase while accepting either spelling."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class FavoriteSnapshot(CamelModel):
    """Optional metadata copied from the movie provider at favorite time."""

    poster: str | None = Field(None, description="Poster image URL")
    genre: str | None = Field(None, examples=["Action, Sci-Fi"])
    plot: str | None = None
    imdb_rating: str | None = Field(None, examples=["8.8"])
    director: str | None = None
    actors: str | None = None
    runtime: str | None = Field(None, examples=["148 min"])


class FavoriteCreate(FavoriteSnapshot):
    """Payload for adding a movie to the caller's favorites."""

    imdb_id: str = Field(..., min_length=1, max_length=32, examples=["tt1375666"])
    title: str = Field(..., min_length=1, max_length=512, examples=["Inception"])
    year: str = Field(..., min_length=1, max_length=32, examples=["2010"])

    @field_validator("imdb_id", "title", "year")
    @classmethod
    def _reject_blank(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Field must not be blank")
        return cleaned


class FavoriteUpdate(FavoriteSnapshot):
    """Partial update payload.

    Omitted fields keep their stored value. The service inspects
    ``model_fields_set`` to tell an omitted field apart from an explicit
    ``null``.
    """

    title: str | None = Field(None, min_length=1, max_length=512)
    year: str | None = Field(None, min_length=1, max_length=32)

    @field_validator("title", "year")
    @classmethod
    def _reject_blank(cls, value: str | None) -> str | None:
        if value is None:
            return value
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Field must not be blank")
        return cleaned

    def changes(self) -> dict[str, str | None]:
        """Return the snapshot fields the caller actually supplied."""

        return {
            name: getattr(self, name)
            for name in SNAPSHOT_FIELDS
            if name in self.model_fields_set
        }


class FavoriteMovie(FavoriteSnapshot):
    """Read model exposed in API responses."""

    id: str = Field(..., description="Favorite identifier (UUID)")
    user_id: str
    imdb_id: str
    title: str
    year: str
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # SQLite drops the offset on read; stored values are always UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class PaginatedFavoritesResponse(CamelModel):
    """Pagination envelope returned by ``GET /favorites``."""

    data: list[FavoriteMovie]
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1, le=100)
    total_pages: int = Field(..., ge=0)
    has_next_page: bool
    has_previous_page: bool


__all__ = [
    "CamelModel",
    "FavoriteCreate",
    "FavoriteMovie",
    "FavoriteSnapshot",
    "FavoriteUpdate",
    "PaginatedFavoritesResponse",
    "REQUIRED_SNAPSHOT_FIELDS",
    "SNAPSHOT_FIELDS",
]

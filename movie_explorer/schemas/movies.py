"""Schemas for movie metadata fetched from the movie provider.

``MovieSummary``/``MovieDetail`` mirror what the provider returns after
normalisation. The ``Enriched*`` variants add the caller's favorite status and
only ever exist for the duration of a request.
"""

from __future__ import annotations

from pydantic import Field

from movie_explorer.schemas.favorites import CamelModel


class MovieSummary(CamelModel):
    """Single search hit."""

    imdb_id: str = Field(..., examples=["tt1375666"])
    title: str
    year: str | None = None
    type: str | None = Field(None, examples=["movie", "series"])
    poster: str | None = None


class MovieRating(CamelModel):
    source: str = Field(..., examples=["Rotten Tomatoes"])
    value: str = Field(..., examples=["87%"])


class MovieDetail(MovieSummary):
    rated: str | None = None
    released: str | None = None
    runtime: str | None = None
    genre: str | None = None
    director: str | None = None
    writer: str | None = None
    actors: str | None = None
    plot: str | None = None
    language: str | None = None
    country: str | None = None
    awards: str | None = None
    ratings: list[MovieRating] = Field(default_factory=list)
    metascore: str | None = None
    imdb_rating: str | None = None
    imdb_votes: str | None = None
    box_office: str | None = None
    production: str | None = None
    website: str | None = None


class MovieSearchPage(CamelModel):
    """One page of provider search results."""

    results: list[MovieSummary] = Field(default_factory=list)
    total_results: int = Field(0, ge=0)
    page: int = Field(1, ge=1)


class EnrichedMovieSummary(MovieSummary):
    is_favorite: bool


class EnrichedMovieDetail(MovieDetail):
    is_favorite: bool


class EnrichedMovieSearchPage(CamelModel):
    results: list[EnrichedMovieSummary] = Field(default_factory=list)
    total_results: int = Field(0, ge=0)
    page: int = Field(1, ge=1)


__all__ = [
    "EnrichedMovieDetail",
    "EnrichedMovieSearchPage",
    "EnrichedMovieSummary",
    "MovieDetail",
    "MovieRating",
    "MovieSearchPage",
    "MovieSummary",
]

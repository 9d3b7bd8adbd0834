"""Schemas for AI-generated recommendations and rating analysis."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from movie_explorer.schemas.favorites import CamelModel

MAX_RECOMMENDATIONS = 5


class Recommendation(CamelModel):
    title: str = Field(..., min_length=1)
    year: str | None = None
    reason: str = Field("", description="One sentence on why the movie is similar")


class RecommendedFor(CamelModel):
    """The movie recommendations were generated for."""

    title: str
    year: str | None = None
    imdb_id: str


class RecommendationResponse(CamelModel):
    movie: RecommendedFor
    recommendations: list[Recommendation] = Field(
        default_factory=list, max_length=MAX_RECOMMENDATIONS
    )


class MovieAnalysis(CamelModel):
    """Sentiment summary of how audiences and critics received a movie."""

    overall_sentiment: Literal["positive", "mixed", "negative"]
    sentiment_score: int = Field(..., ge=0, le=100)
    audience_reception: str = ""
    critics_reception: str = ""
    key_insights: list[str] = Field(default_factory=list)
    summary: str = ""


__all__ = [
    "MAX_RECOMMENDATIONS",
    "MovieAnalysis",
    "Recommendation",
    "RecommendationResponse",
    "RecommendedFor",
]

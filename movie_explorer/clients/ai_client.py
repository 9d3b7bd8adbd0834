"""OpenAI-backed generation of movie recommendations and rating analyses."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from functools import lru_cache
from typing import Any

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from movie_explorer.errors import UpstreamError
from movie_explorer.schemas.movies import MovieRating
from movie_explorer.schemas.recommendations import (
    MAX_RECOMMENDATIONS,
    MovieAnalysis,
    Recommendation,
)
from movie_explorer.settings import get_settings

logger = logging.getLogger(__name__)

PROVIDER_NAME = "ai"

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

RECOMMENDATION_INSTRUCTIONS = f"""

Please recommend exactly {MAX_RECOMMENDATIONS} similar movies that fans of this movie would enjoy. For each recommendation, provide:
1. Movie title
2. Year (if known)
3. A brief reason why it's similar (1 sentence)

Format your response as a JSON array with this structure:
[
  {{
    "title": "Movie Title",
    "year": "2020",
    "reason": "Brief explanation of similarity"
  }}
]

Only return the JSON array, no additional text."""

ANALYSIS_INSTRUCTIONS = """

Analyze how this movie was received by audiences and critics based on the ratings above.
Respond with a single JSON object with this structure:
{
  "overallSentiment": "positive" | "mixed" | "negative",
  "sentimentScore": 0-100,
  "audienceReception": "One or two sentences on audience reception",
  "criticsReception": "One or two sentences on critical reception",
  "keyInsights": ["Short insight", "..."],
  "summary": "A short overall summary"
}

Only return the JSON object, no additional text."""


def build_recommendation_prompt(
    title: str,
    year: str | None = None,
    genre: str | None = None,
    plot: str | None = None,
) -> str:
    prompt = f'Based on the movie "{title}"'
    if year:
        prompt += f" ({year})"
    if genre:
        prompt += f" which is a {genre} movie"
    if plot:
        prompt += f" with the plot: {plot}"
    return prompt + RECOMMENDATION_INSTRUCTIONS


def build_analysis_prompt(
    title: str,
    ratings: Sequence[MovieRating],
    imdb_rating: str | None = None,
    imdb_votes: str | None = None,
) -> str:
    lines = [f'Movie: "{title}"']
    if imdb_rating:
        votes = f" from {imdb_votes} votes" if imdb_votes else ""
        lines.append(f"IMDb rating: {imdb_rating}/10{votes}")
    if ratings:
        lines.append("Ratings:")
        lines.extend(f"- {rating.source}: {rating.value}" for rating in ratings)
    else:
        lines.append("No third-party ratings are available.")
    return "\n".join(lines) + ANALYSIS_INSTRUCTIONS


def _strip_code_fence(content: str) -> str:
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    if content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


def _extract_json(content: str, pattern: re.Pattern[str]) -> Any:
    match = pattern.search(_strip_code_fence(content))
    if match is None:
        raise UpstreamError(PROVIDER_NAME, "AI response did not contain JSON")
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        logger.warning("Could not decode AI response: %s", exc)
        raise UpstreamError(PROVIDER_NAME, "AI response contained invalid JSON") from exc


def parse_recommendations(content: str) -> list[Recommendation]:
    """Extract up to five recommendations from a model reply.

    Entries without a usable title are skipped rather than failing the batch.
    """

    parsed = _extract_json(content, _JSON_ARRAY)
    if not isinstance(parsed, list):
        raise UpstreamError(PROVIDER_NAME, "AI response was not a JSON array")

    recommendations: list[Recommendation] = []
    for entry in parsed:
        if not isinstance(entry, dict):
            continue
        title = str(entry.get("title") or "").strip()
        if not title:
            continue
        year = entry.get("year")
        recommendations.append(
            Recommendation(
                title=title,
                year=str(year).strip() if year not in (None, "") else None,
                reason=str(entry.get("reason") or "").strip(),
            )
        )
        if len(recommendations) == MAX_RECOMMENDATIONS:
            break
    return recommendations


def parse_analysis(content: str) -> MovieAnalysis:
    parsed = _extract_json(content, _JSON_OBJECT)
    if not isinstance(parsed, dict):
        raise UpstreamError(PROVIDER_NAME, "AI response was not a JSON object")

    sentiment = parsed.get("overallSentiment")
    if isinstance(sentiment, str):
        parsed["overallSentiment"] = sentiment.strip().lower()
    score = parsed.get("sentimentScore")
    if isinstance(score, int | float):
        parsed["sentimentScore"] = max(0, min(100, round(score)))

    try:
        return MovieAnalysis.model_validate(parsed)
    except ValidationError as exc:
        logger.warning("AI analysis had an unexpected shape: %s", exc)
        raise UpstreamError(PROVIDER_NAME, "AI response had an unexpected shape") from exc


class AIClient:
    def __init__(
        self,
        api_key: str | None,
        model: str,
        *,
        max_tokens: int = 1024,
        timeout: float = 30.0,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._model = model
        self._max_tokens = max_tokens
        if client is None and api_key:
            client = AsyncOpenAI(api_key=api_key, timeout=timeout)
        self._client = client

    async def recommend(
        self,
        title: str,
        year: str | None = None,
        genre: str | None = None,
        plot: str | None = None,
    ) -> list[Recommendation]:
        prompt = build_recommendation_prompt(title, year, genre, plot)
        content = await self._complete(prompt)
        recommendations = parse_recommendations(content)
        logger.info("Generated %d recommendations for %r", len(recommendations), title)
        return recommendations

    async def analyze_sentiment(
        self,
        title: str,
        ratings: Sequence[MovieRating],
        imdb_rating: str | None = None,
        imdb_votes: str | None = None,
    ) -> MovieAnalysis:
        prompt = build_analysis_prompt(title, ratings, imdb_rating, imdb_votes)
        content = await self._complete(prompt)
        return parse_analysis(content)

    async def _complete(self, prompt: str) -> str:
        if self._client is None:
            raise UpstreamError(PROVIDER_NAME, "AI provider is not configured")

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self._max_tokens,
                temperature=0.7,
            )
        except OpenAIError as exc:
            logger.error("AI provider request failed: %s", exc)
            raise UpstreamError(PROVIDER_NAME, "AI provider request failed") from exc

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise UpstreamError(PROVIDER_NAME, "AI provider returned an empty response")
        return content


@lru_cache(maxsize=1)
def get_ai_client() -> AIClient:
    """Shared AI client; the underlying SDK client pools its connections."""
    settings = get_settings()
    return AIClient(
        settings.openai_api_key,
        settings.ai_model,
        max_tokens=settings.ai_max_tokens,
        timeout=settings.provider_timeout_seconds,
    )


__all__ = [
    "AIClient",
    "build_analysis_prompt",
    "build_recommendation_prompt",
    "get_ai_client",
    "parse_analysis",
    "parse_recommendations",
]

"""Route tests for movie search, detail, analysis and recommendations."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence

import pytest
import pytest_asyncio
from fastapi import Header, HTTPException
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from movie_explorer.auth import get_current_user_id
from movie_explorer.clients.ai_client import get_ai_client
from movie_explorer.clients.omdb_client import get_omdb_client
from movie_explorer.db.connection import get_db
from movie_explorer.errors import MovieNotFoundError, UpstreamError
from movie_explorer.main import app
from movie_explorer.schemas.movies import (
    MovieDetail,
    MovieRating,
    MovieSearchPage,
    MovieSummary,
)
from movie_explorer.schemas.recommendations import MovieAnalysis, Recommendation

from .conftest import SeedFavorite

CATALOGUE = {
    "tt0000001": MovieDetail(
        imdb_id="tt0000001",
        title="Alpha",
        year="2001",
        genre="Drama",
        plot="First.",
        ratings=[MovieRating(source="Rotten Tomatoes", value="91%")],
        imdb_rating="8.1",
        imdb_votes="1,234",
    ),
    "tt0000002": MovieDetail(imdb_id="tt0000002", title="Bravo", year="2002"),
    "tt0000003": MovieDetail(imdb_id="tt0000003", title="Charlie", year="2003"),
}


class FakeProvider:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.searches: list[tuple[str, int]] = []

    async def search_by_title(self, title: str, page: int = 1) -> MovieSearchPage:
        self.searches.append((title, page))
        if self.fail:
            raise UpstreamError("omdb", "Request limit reached!")
        results = [
            MovieSummary(imdb_id=detail.imdb_id, title=detail.title, year=detail.year)
            for detail in CATALOGUE.values()
            if title.lower() in ("movie", detail.title.lower())
        ]
        return MovieSearchPage(results=results, total_results=len(results), page=page)

    async def get_by_id(self, imdb_id: str) -> MovieDetail:
        if self.fail:
            raise UpstreamError("omdb", "Request limit reached!")
        try:
            return CATALOGUE[imdb_id]
        except KeyError:
            raise MovieNotFoundError(imdb_id) from None


class FakeAI:
    def __init__(self) -> None:
        self.analysis_calls: list[tuple[str, list[MovieRating], str | None, str | None]] = []

    async def recommend(self, title, year=None, genre=None, plot=None) -> list[Recommendation]:
        return [
            Recommendation(title=f"Like {title} #{index}", year="2020", reason="Similar")
            for index in range(7)
        ]

    async def analyze_sentiment(
        self,
        title: str,
        ratings: Sequence[MovieRating],
        imdb_rating: str | None = None,
        imdb_votes: str | None = None,
    ) -> MovieAnalysis:
        self.analysis_calls.append((title, list(ratings), imdb_rating, imdb_votes))
        return MovieAnalysis(
            overall_sentiment="positive",
            sentiment_score=88,
            audience_reception="Loved.",
            critics_reception="Praised.",
            key_insights=["Strong ratings"],
            summary="Well received.",
        )


def _test_user(x_test_user: str | None = Header(default=None)) -> str:
    if not x_test_user:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_test_user


HEADERS = {"x-test-user": "u1"}


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def ai() -> FakeAI:
    return FakeAI()


@pytest_asyncio.fixture
async def api_client(
    session: AsyncSession, provider: FakeProvider, ai: FakeAI
) -> AsyncIterator[AsyncClient]:
    async def _override_db() -> AsyncIterator[AsyncSession]:
        yield session

    app.dependency_overrides.clear()
    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_current_user_id] = _test_user
    app.dependency_overrides[get_omdb_client] = lambda: provider
    app.dependency_overrides[get_ai_client] = lambda: ai

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_search_marks_favorites_in_provider_order(
    api_client: AsyncClient, seed_favorite: SeedFavorite
) -> None:
    await seed_favorite("u1", "tt0000002", "Bravo")

    response = await api_client.get("/movies/search?title=movie&page=1", headers=HEADERS)

    assert response.status_code == 200
    payload = response.json()
    assert payload["totalResults"] == 3
    assert payload["page"] == 1
    assert [(item["imdbId"], item["isFavorite"]) for item in payload["results"]] == [
        ("tt0000001", False),
        ("tt0000002", True),
        ("tt0000003", False),
    ]


@pytest.mark.asyncio
async def test_search_with_no_hits(api_client: AsyncClient) -> None:
    response = await api_client.get("/movies/search?title=zzz", headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {"results": [], "totalResults": 0, "page": 1}


@pytest.mark.asyncio
async def test_search_requires_title(api_client: AsyncClient, provider: FakeProvider) -> None:
    response = await api_client.get("/movies/search?title=%20%20", headers=HEADERS)

    assert response.status_code == 400
    assert provider.searches == []


@pytest.mark.asyncio
async def test_search_clamps_page(api_client: AsyncClient, provider: FakeProvider) -> None:
    await api_client.get("/movies/search?title=alpha&page=0", headers=HEADERS)

    assert provider.searches == [("alpha", 1)]


@pytest.mark.asyncio
async def test_provider_failure_maps_to_bad_gateway(
    api_client: AsyncClient, provider: FakeProvider
) -> None:
    provider.fail = True

    response = await api_client.get("/movies/search?title=alpha", headers=HEADERS)

    assert response.status_code == 502
    assert response.json()["error_type"] == "upstream_error"


@pytest.mark.asyncio
async def test_detail_includes_favorite_flag(
    api_client: AsyncClient, seed_favorite: SeedFavorite
) -> None:
    await seed_favorite("u1", "tt0000001", "Alpha")

    favorite = await api_client.get("/movies/tt0000001", headers=HEADERS)
    other = await api_client.get("/movies/tt0000001", headers={"x-test-user": "u2"})

    assert favorite.status_code == 200
    assert favorite.json()["isFavorite"] is True
    assert favorite.json()["imdbRating"] == "8.1"
    assert other.json()["isFavorite"] is False


@pytest.mark.asyncio
async def test_unknown_movie_is_not_found(api_client: AsyncClient) -> None:
    assert (await api_client.get("/movies/tt9999999", headers=HEADERS)).status_code == 404
    assert (
        await api_client.get("/movies/tt9999999/analysis", headers=HEADERS)
    ).status_code == 404
    assert (
        await api_client.get("/recommendations/tt9999999", headers=HEADERS)
    ).status_code == 404


@pytest.mark.asyncio
async def test_analysis_uses_movie_ratings(api_client: AsyncClient, ai: FakeAI) -> None:
    response = await api_client.get("/movies/tt0000001/analysis", headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["overallSentiment"] == "positive"
    assert response.json()["sentimentScore"] == 88
    title, ratings, imdb_rating, imdb_votes = ai.analysis_calls[0]
    assert title == "Alpha"
    assert ratings[0].value == "91%"
    assert (imdb_rating, imdb_votes) == ("8.1", "1,234")


@pytest.mark.asyncio
async def test_recommendations_are_capped_at_five(api_client: AsyncClient) -> None:
    response = await api_client.get("/recommendations/tt0000001", headers=HEADERS)

    assert response.status_code == 200
    payload = response.json()
    assert payload["movie"] == {"title": "Alpha", "year": "2001", "imdbId": "tt0000001"}
    assert len(payload["recommendations"]) == 5
    assert payload["recommendations"][0]["title"] == "Like Alpha #0"


@pytest.mark.asyncio
async def test_health_needs_no_identity(api_client: AsyncClient) -> None:
    response = await api_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_movie_routes_require_identity(api_client: AsyncClient) -> None:
    assert (await api_client.get("/movies/search?title=alpha")).status_code == 401
    assert (await api_client.get("/recommendations/tt0000001")).status_code == 401

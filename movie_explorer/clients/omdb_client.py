"""Async client for the OMDb movie metadata API.

OMDb answers every request with HTTP 200 and signals failures in the body
(``{"Response": "False", "Error": "..."}``), so status handling happens in two
places: transport/HTTP errors first, then the body's ``Response`` flag.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from movie_explorer.cache import (
    CacheClient,
    get_cache_client,
    movie_detail_key,
    movie_search_key,
)
from movie_explorer.errors import MovieNotFoundError, UpstreamError
from movie_explorer.schemas.movies import (
    MovieDetail,
    MovieRating,
    MovieSearchPage,
    MovieSummary,
)
from movie_explorer.settings import get_settings

logger = logging.getLogger(__name__)

PROVIDER_NAME = "omdb"

_SEARCH_NOT_FOUND = "movie not found!"
_DETAIL_NOT_FOUND = ("movie not found!", "incorrect imdb id.", "incorrect imdb id")

_DETAIL_FIELDS: dict[str, str] = {
    "Rated": "rated",
    "Released": "released",
    "Runtime": "runtime",
    "Genre": "genre",
    "Director": "director",
    "Writer": "writer",
    "Actors": "actors",
    "Plot": "plot",
    "Language": "language",
    "Country": "country",
    "Awards": "awards",
    "Metascore": "metascore",
    "imdbRating": "imdb_rating",
    "imdbVotes": "imdb_votes",
    "BoxOffice": "box_office",
    "Production": "production",
    "Website": "website",
}


def _clean(value: Any) -> str | None:
    """Map OMDb's ``"N/A"`` and blank placeholders to ``None``."""

    if value is None:
        return None
    text = str(value).strip()
    if not text or text.upper() == "N/A":
        return None
    return text


def _parse_total(value: Any) -> int:
    try:
        return max(0, int(str(value).replace(",", "")))
    except (TypeError, ValueError):
        return 0


def _summary_from_payload(item: dict[str, Any]) -> MovieSummary:
    return MovieSummary(
        imdb_id=str(item.get("imdbID", "")).strip(),
        title=str(item.get("Title", "")).strip(),
        year=_clean(item.get("Year")),
        type=_clean(item.get("Type")),
        poster=_clean(item.get("Poster")),
    )


def _detail_from_payload(payload: dict[str, Any]) -> MovieDetail:
    summary = _summary_from_payload(payload)
    extra = {field: _clean(payload.get(key)) for key, field in _DETAIL_FIELDS.items()}
    ratings = [
        MovieRating(source=str(entry["Source"]), value=str(entry["Value"]))
        for entry in payload.get("Ratings") or []
        if isinstance(entry, dict) and entry.get("Source") and entry.get("Value")
    ]
    return MovieDetail(**summary.model_dump(), **extra, ratings=ratings)


class OmdbClient:
    """Fetch search pages and movie details from OMDb.

    Successful responses are cached through ``cache`` when one is supplied.
    The cached payloads are plain provider data; favorite status is layered on
    later by the enrichment service.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str,
        *,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
        cache: CacheClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._http_client = http_client
        self._cache = cache

    async def search_by_title(self, title: str, page: int = 1) -> MovieSearchPage:
        page = max(1, page)
        cache_key = movie_search_key(title, page)
        cached = await self._cached(cache_key)
        if cached is not None:
            return MovieSearchPage.model_validate(cached)

        payload = await self._request({"s": title, "page": page})
        if not _is_success(payload):
            error = _error_message(payload)
            if error.lower() == _SEARCH_NOT_FOUND:
                return MovieSearchPage(results=[], total_results=0, page=page)
            logger.warning("OMDb search for %r failed: %s", title, error)
            raise UpstreamError(PROVIDER_NAME, error)

        results = [
            _summary_from_payload(item)
            for item in payload.get("Search") or []
            if isinstance(item, dict) and item.get("imdbID")
        ]
        search_page = MovieSearchPage(
            results=results,
            total_results=_parse_total(payload.get("totalResults")),
            page=page,
        )
        await self._store(cache_key, search_page.model_dump())
        return search_page

    async def get_by_id(self, imdb_id: str) -> MovieDetail:
        cache_key = movie_detail_key(imdb_id)
        cached = await self._cached(cache_key)
        if cached is not None:
            return MovieDetail.model_validate(cached)

        payload = await self._request({"i": imdb_id, "plot": "full"})
        if not _is_success(payload):
            error = _error_message(payload)
            if error.lower() in _DETAIL_NOT_FOUND:
                raise MovieNotFoundError(imdb_id)
            logger.warning("OMDb lookup for %s failed: %s", imdb_id, error)
            raise UpstreamError(PROVIDER_NAME, error)

        detail = _detail_from_payload(payload)
        await self._store(cache_key, detail.model_dump())
        return detail

    async def _request(self, params: dict[str, Any]) -> dict[str, Any]:
        if not self._api_key:
            raise UpstreamError(PROVIDER_NAME, "OMDb API key is not configured")

        query = {"apikey": self._api_key, **params}
        try:
            if self._http_client is not None:
                response = await self._http_client.get(
                    self._base_url, params=query, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(self._base_url, params=query)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("OMDb responded with HTTP %s", exc.response.status_code)
            raise UpstreamError(
                PROVIDER_NAME, f"Provider responded with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("OMDb request failed: %s", exc)
            raise UpstreamError(PROVIDER_NAME, "Provider request failed") from exc
        except ValueError as exc:
            logger.error("OMDb returned a non-JSON body: %s", exc)
            raise UpstreamError(PROVIDER_NAME, "Provider returned an invalid response") from exc

        if not isinstance(payload, dict):
            raise UpstreamError(PROVIDER_NAME, "Provider returned an invalid response")
        return payload

    async def _cached(self, key: str) -> Any:
        if self._cache is None:
            return None
        return await self._cache.get_json(key)

    async def _store(self, key: str, value: Any) -> None:
        if self._cache is not None:
            await self._cache.set_json(key, value)


def _is_success(payload: dict[str, Any]) -> bool:
    return str(payload.get("Response", "True")).lower() != "false"


def _error_message(payload: dict[str, Any]) -> str:
    return str(payload.get("Error") or "Unknown provider error").strip()


_shared_http_client: httpx.AsyncClient | None = None


def get_http_client() -> httpx.AsyncClient:
    """Return the process-wide HTTP client used for provider calls."""

    global _shared_http_client
    if _shared_http_client is None or _shared_http_client.is_closed:
        _shared_http_client = httpx.AsyncClient(
            timeout=get_settings().provider_timeout_seconds
        )
    return _shared_http_client


async def close_http_client() -> None:
    global _shared_http_client
    if _shared_http_client is not None:
        await _shared_http_client.aclose()
        _shared_http_client = None


async def get_omdb_client() -> OmdbClient:
    """FastAPI dependency wiring the OMDb client to settings and the cache."""

    settings = get_settings()
    cache = await get_cache_client()
    return OmdbClient(
        settings.omdb_api_key,
        settings.omdb_base_url,
        timeout=settings.provider_timeout_seconds,
        http_client=get_http_client(),
        cache=cache,
    )


__all__ = [
    "OmdbClient",
    "PROVIDER_NAME",
    "close_http_client",
    "get_http_client",
    "get_omdb_client",
]

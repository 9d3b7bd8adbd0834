"""Redis-backed JSON cache for movie-provider responses.

Only provider payloads are cached. Favorite status is computed per request and
never stored here. When Redis is missing or unreachable every call degrades to
a cache miss.
"""

from __future__ import annotations

import asyncio
import json
import logging
from hashlib import sha256
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from movie_explorer.settings import get_settings

logger = logging.getLogger(__name__)

_SEARCH_PREFIX = "movies:search"
_DETAIL_PREFIX = "movies:detail"

_REDIS_UNAVAILABLE = (RedisConnectionError, RedisTimeoutError, OSError)

_redis_client: Redis | None = None
_client_lock = asyncio.Lock()
_redis_disabled = False


def movie_search_key(title: str, page: int) -> str:
    signature = f"{title.strip().lower()}|{page}"
    digest = sha256(signature.encode("utf-8")).hexdigest()
    return f"{_SEARCH_PREFIX}:{digest}"


def movie_detail_key(imdb_id: str) -> str:
    return f"{_DETAIL_PREFIX}:{imdb_id.strip()}"


async def get_redis() -> Redis | None:
    """Get Redis client, returning None if connection fails."""
    global _redis_client, _redis_disabled

    if _redis_disabled:
        logger.debug("Redis connection disabled after previous failure; skipping attempt.")
        return None

    async with _client_lock:
        if _redis_client is not None:
            return _redis_client
        if _redis_disabled:
            return None

        client = Redis.from_url(
            get_settings().redis_url, decode_responses=True, encoding="utf-8"
        )
        try:
            await client.ping()
        except _REDIS_UNAVAILABLE as exc:
            logger.warning("Redis connection failed: %s. Caching will be disabled.", exc)
            _redis_disabled = True
            await client.aclose()
            return None

        _redis_client = client
        logger.info("Redis connection established successfully")
        return _redis_client


class CacheClient:
    def __init__(self, redis: Redis | None, *, default_ttl: int | None = None) -> None:
        self._redis = redis
        self._default_ttl = default_ttl or get_settings().movie_cache_ttl_seconds

    async def get_json(self, key: str) -> Any:
        if self._redis is None:
            return None
        try:
            payload = await self._redis.get(key)
        except _REDIS_UNAVAILABLE as exc:
            logger.debug("Redis get failed for key %s: %s", key, exc)
            return None
        if payload is None:
            return None
        try:
            return json.loads(payload)
        except json.JSONDecodeError:
            logger.debug("Discarding undecodable cache entry %s", key)
            return None

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> None:
        if self._redis is None:
            return
        encoded = json.dumps(value, default=str)
        try:
            await self._redis.set(key, encoded, ex=ttl or self._default_ttl)
        except _REDIS_UNAVAILABLE as exc:
            logger.debug("Redis set failed for key %s: %s", key, exc)


async def get_cache_client() -> CacheClient:
    redis = await get_redis()
    return CacheClient(redis)


async def close_redis() -> None:
    """Close the global Redis connection gracefully."""
    global _redis_client, _redis_disabled
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
    _redis_disabled = False


__all__ = [
    "CacheClient",
    "close_redis",
    "get_cache_client",
    "get_redis",
    "movie_detail_key",
    "movie_search_key",
]

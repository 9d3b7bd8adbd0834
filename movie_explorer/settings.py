"""Centralized configuration management for the Movie Explorer backend."""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load a local .env before the settings singleton is built so that every module
# importing :mod:`movie_explorer.settings` observes the same environment.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_SQLITE_DATABASE_URL = "sqlite+aiosqlite:///./data/app.db"
POSTGRES_ASYNC_PREFIX = "postgresql+psycopg://"
POSTGRES_SYNC_PREFIXES = ("postgres://", "postgresql://")
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_MOVIE_CACHE_TTL_SECONDS = 600
DEFAULT_OMDB_BASE_URL = "https://www.omdbapi.com/"
DEFAULT_AI_MODEL = "gpt-4o-mini"
DEFAULT_PROVIDER_TIMEOUT_SECONDS = 10.0
DEFAULT_LOG_LEVEL = "INFO"


def _normalize_origin(origin: str) -> str:
    """Return the origin stripped of whitespace and trailing slashes."""

    return origin.strip().rstrip("/")


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    Besides the raw environment values the class exposes derived helpers such
    as the async database URL and the identity provider's issuer, so routers
    and clients never parse environment strings themselves.
    """

    _explicit_redis_url: bool = PrivateAttr(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def __init__(self, **values: object) -> None:
        """Remember whether ``REDIS_URL`` was supplied explicitly."""

        normalized_keys = {str(key).lower() for key in values}
        super().__init__(**values)
        self._explicit_redis_url = "redis_url" in normalized_keys
        redis_env = os.getenv("REDIS_URL")
        if redis_env is not None and redis_env.strip():
            self._explicit_redis_url = True

    database_url: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description=(
            "SQLAlchemy-compatible PostgreSQL URL. Sync-style DSNs are coerced"
            " into the async psycopg driver string."
        ),
    )
    use_sqlite: bool = Field(
        default=False,
        alias="USE_SQLITE",
        description="Force the local SQLite database regardless of DATABASE_URL.",
    )
    redis_url: str = Field(default=DEFAULT_REDIS_URL, alias="REDIS_URL")
    movie_cache_ttl_seconds: int = Field(
        default=DEFAULT_MOVIE_CACHE_TTL_SECONDS,
        alias="MOVIE_CACHE_TTL_SECONDS",
        description="Lifetime of cached movie-provider responses.",
    )
    omdb_api_key: str | None = Field(default=None, alias="OMDB_API_KEY")
    omdb_base_url: str = Field(default=DEFAULT_OMDB_BASE_URL, alias="OMDB_BASE_URL")
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    ai_model: str = Field(default=DEFAULT_AI_MODEL, alias="AI_MODEL")
    ai_max_tokens: int = Field(default=1024, alias="AI_MAX_TOKENS")
    provider_timeout_seconds: float = Field(
        default=DEFAULT_PROVIDER_TIMEOUT_SECONDS,
        alias="PROVIDER_TIMEOUT_SECONDS",
        description="Timeout applied to every call against an external provider.",
    )
    auth0_domain: str | None = Field(default=None, alias="AUTH0_DOMAIN")
    auth0_audience: str | None = Field(default=None, alias="AUTH0_AUDIENCE")
    cors_allow_origins_raw: str | None = Field(default=None, alias="CORS_ALLOW_ORIGINS")
    cors_allow_origin_regex: str | None = Field(
        default=None, alias="CORS_ALLOW_ORIGIN_REGEX"
    )
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, alias="LOG_LEVEL")
    slow_query_threshold: float = Field(
        default=0.1,
        alias="SLOW_QUERY_THRESHOLD",
        description="Seconds after which a SQL statement is logged as slow.",
    )

    @property
    def resolved_database_url(self) -> str:
        """Return the async-compatible database URL after applying fallbacks."""

        if self.use_sqlite or not self.database_url:
            return DEFAULT_SQLITE_DATABASE_URL

        url = self.database_url.strip()
        if url.startswith("sqlite+aiosqlite://"):
            return url

        for prefix in POSTGRES_SYNC_PREFIXES:
            if url.startswith(prefix):
                return url.replace(prefix, POSTGRES_ASYNC_PREFIX, 1)

        if url.startswith(POSTGRES_ASYNC_PREFIX):
            return url

        raise RuntimeError(
            f"Expected a PostgreSQL connection string or SQLite fallback, received: {url}"
        )

    @property
    def database_type(self) -> str:
        """Return ``sqlite`` when using SQLite otherwise ``postgresql``."""

        if self.resolved_database_url.startswith("sqlite"):
            return "sqlite"
        return "postgresql"

    @property
    def cors_allow_origins(self) -> list[str]:
        """Return normalised CORS origins supplied via environment variables."""

        if not self.cors_allow_origins_raw:
            return []

        origins = [
            _normalize_origin(origin)
            for origin in self.cors_allow_origins_raw.split(",")
            if origin.strip()
        ]
        return [origin for origin in origins if origin]

    @property
    def auth0_issuer(self) -> str | None:
        if not self.auth0_domain:
            return None
        domain = self.auth0_domain.strip().removeprefix("https://").rstrip("/")
        return f"https://{domain}/"

    @property
    def resolved_auth0_audience(self) -> str | None:
        """Return the configured audience, defaulting to the management API."""

        if self.auth0_audience:
            return self.auth0_audience
        issuer = self.auth0_issuer
        return f"{issuer}api/v2/" if issuer else None

    @property
    def auth0_jwks_url(self) -> str | None:
        issuer = self.auth0_issuer
        return f"{issuer}.well-known/jwks.json" if issuer else None

    @property
    def log_level_numeric(self) -> int:
        """Translate ``log_level`` into the numeric constant expected by logging."""

        candidate = logging.getLevelName(self.log_level.upper())
        if isinstance(candidate, int):
            return candidate
        return logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Return human-readable warnings for unset optional configuration."""

        warnings: list[str] = []

        if not self._explicit_redis_url and self.redis_url == DEFAULT_REDIS_URL:
            warnings.append(
                "REDIS_URL is not set - movie lookups will not be cached"
            )
        if not self.cors_allow_origins:
            warnings.append(
                "CORS_ALLOW_ORIGINS is not set - using default localhost origins only"
            )
        if not self.omdb_api_key:
            warnings.append("OMDB_API_KEY is not set - movie search will fail")
        if not self.openai_api_key:
            warnings.append(
                "OPENAI_API_KEY is not set - recommendations and analysis will fail"
            )
        if not self.auth0_domain:
            warnings.append(
                "AUTH0_DOMAIN is not set - every authenticated request will be rejected"
            )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_AI_MODEL",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_MOVIE_CACHE_TTL_SECONDS",
    "DEFAULT_OMDB_BASE_URL",
    "DEFAULT_REDIS_URL",
    "DEFAULT_SQLITE_DATABASE_URL",
    "POSTGRES_ASYNC_PREFIX",
    "POSTGRES_SYNC_PREFIXES",
    "get_settings",
]

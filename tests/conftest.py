"""Pytest configuration shared by every test package."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from movie_explorer.settings import get_settings


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep developer ``.env`` values and cached settings out of the tests."""

    for name in (
        "DATABASE_URL",
        "USE_SQLITE",
        "REDIS_URL",
        "CORS_ALLOW_ORIGINS",
        "OMDB_API_KEY",
        "OPENAI_API_KEY",
        "AUTH0_DOMAIN",
        "AUTH0_AUDIENCE",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

"""Domain exceptions raised by the favorites and movie services.

Each class derives from the builtin exception describing its category so that
callers can catch either the precise type or the broad one (``LookupError``
for anything missing, ``PermissionError`` for ownership failures and so on).
Routers translate them into HTTP status codes.
"""

from __future__ import annotations

__all__ = [
    "DuplicateFavoriteError",
    "FavoriteNotFoundError",
    "FavoriteOwnershipError",
    "FavoriteValidationError",
    "MovieNotFoundError",
    "UpstreamError",
]


class FavoriteValidationError(ValueError):
    """A favorite payload is missing a required field."""


class DuplicateFavoriteError(ValueError):
    """The user already has this movie in their favorites."""

    def __init__(self, imdb_id: str) -> None:
        super().__init__("Movie is already in favorites")
        self.imdb_id = imdb_id


class FavoriteNotFoundError(LookupError):
    def __init__(self, message: str = "Favorite movie not found") -> None:
        super().__init__(message)


class FavoriteOwnershipError(PermissionError):
    """The favorite exists but belongs to another user."""


class MovieNotFoundError(LookupError):
    def __init__(self, imdb_id: str) -> None:
        super().__init__(f"Movie {imdb_id} not found")
        self.imdb_id = imdb_id


class UpstreamError(RuntimeError):
    """An external provider (or the favorites store during enrichment) failed.

    ``provider`` names the collaborator that failed, for example ``"omdb"`` or
    ``"ai"``, so the exception handler can log where the failure originated.
    """

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message)
        self.provider = provider

"""SQLAlchemy ORM models for user favorites.

A favorite stores a snapshot of the movie metadata taken when the user saved
it. The snapshot is owned by the user afterwards: edits never re-sync with the
movie provider.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def new_favorite_id() -> str:
    return str(uuid.uuid4())


class Favorite(Base):
    """A movie saved by a single user."""

    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "imdb_id",
            name="uq_favorites_user_imdb",
        ),
        Index("ix_favorites_user_id_created_at", "user_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_favorite_id,
        doc="Random UUID4; never reused after the row is deleted.",
    )
    user_id: Mapped[str] = mapped_column(
        String(128),
        index=True,
        nullable=False,
        doc=(
            "Subject claim issued by the identity provider, for example"
            " ``auth0|69085eab581799cf1f72e67f``."
        ),
    )
    imdb_id: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    year: Mapped[str] = mapped_column(String(32), nullable=False)
    poster: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    genre: Mapped[str | None] = mapped_column(String(255), nullable=True)
    plot: Mapped[str | None] = mapped_column(Text, nullable=True)
    imdb_rating: Mapped[str | None] = mapped_column(String(16), nullable=True)
    director: Mapped[str | None] = mapped_column(String(512), nullable=True)
    actors: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    runtime: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


# Every table the application persists. Startup and migrations build the
# schema from this tuple instead of discovering model modules at runtime.
PERSISTED_MODELS: tuple[type[Base], ...] = (Favorite,)

__all__ = ["Base", "Favorite", "PERSISTED_MODELS", "new_favorite_id", "utcnow"]

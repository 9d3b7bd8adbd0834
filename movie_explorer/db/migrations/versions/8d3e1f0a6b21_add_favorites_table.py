"""Add favorites table.

Revision ID: 8d3e1f0a6b21
Revises:
Create Date: 2026-09-28 14:05:00.000000
"""

from alembic import op
import sqlalchemy as sa


revision = "8d3e1f0a6b21"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "favorites",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("imdb_id", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(length=512), nullable=False),
        sa.Column("year", sa.String(length=32), nullable=False),
        sa.Column("poster", sa.String(length=1024), nullable=True),
        sa.Column("genre", sa.String(length=255), nullable=True),
        sa.Column("plot", sa.Text(), nullable=True),
        sa.Column("imdb_rating", sa.String(length=16), nullable=True),
        sa.Column("director", sa.String(length=512), nullable=True),
        sa.Column("actors", sa.String(length=1024), nullable=True),
        sa.Column("runtime", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "imdb_id", name="uq_favorites_user_imdb"),
    )
    op.create_index("ix_favorites_user_id", "favorites", ["user_id"], unique=False)
    op.create_index(
        "ix_favorites_user_id_created_at",
        "favorites",
        ["user_id", "created_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_favorites_user_id_created_at", table_name="favorites")
    op.drop_index("ix_favorites_user_id", table_name="favorites")
    op.drop_table("favorites")

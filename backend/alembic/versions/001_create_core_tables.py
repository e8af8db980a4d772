"""Create users, categories and topics tables

Revision ID: 001
Revises: None
Create Date: 2024-06-01 00:00:00.000000+00:00

What:  Initial schema: the admin account, categories, and topics with their
       note text and narration URL.
How:   PostgreSQL UUID primary keys (gen_random_uuid()), TIMESTAMP WITH TIME
       ZONE, topics removed with their category (ON DELETE CASCADE).

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _created_at_column() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        _id_column(),
        sa.Column("username", sa.String(150), nullable=False),
        sa.Column("hash", sa.String(255), nullable=False, comment="bcrypt hash"),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'USER'")),
        _created_at_column(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    op.create_table(
        "categories",
        _id_column(),
        sa.Column(
            "name",
            sa.String(255),
            nullable=False,
            comment="Display name, unique across categories",
        ),
        _created_at_column(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_categories_name"),
    )

    op.create_table(
        "topics",
        _id_column(),
        sa.Column("category_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column(
            "content",
            sa.Text(),
            nullable=True,
            comment="Raw note text as typed by the admin",
        ),
        sa.Column(
            "audio_url",
            sa.String(1024),
            nullable=True,
            comment="Public URL of the narration object, empty when removed",
        ),
        _created_at_column(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["category_id"],
            ["categories.id"],
            name="fk_topics_category_id",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("category_id", "title", name="uq_topics_category_title"),
    )

    # Per-category listing and previous/next lookups both filter by category
    # and order by created_at
    op.create_index(
        "idx_topics_category_created_at",
        "topics",
        ["category_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_topics_category_created_at", table_name="topics")
    op.drop_table("topics")
    op.drop_table("categories")
    op.drop_table("users")

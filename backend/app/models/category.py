"""
Accounting Notes Backend: Category SQLAlchemy Model
===================================================

What:  ORM model for the `categories` table.
Who:   Used by CategoryService and TopicService; read by Alembic.

Table Design:
    - UUID primary key generated server-side
    - name: unique across all categories (enforced by CategoryService and
      by a unique constraint)
    - created_at: UTC; the only ordering key the API exposes
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import String, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.topic import Topic


class Category(Base):
    """A named group of topics shown as one section of the notes sidebar."""

    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Display name, unique across categories",
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # Topics are listed oldest first everywhere in the API
    topics: Mapped[List["Topic"]] = relationship(
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Topic.created_at",
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}')>"

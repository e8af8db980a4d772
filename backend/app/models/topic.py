"""
Accounting Notes Backend: Topic SQLAlchemy Model
================================================

What:  ORM model for the `topics` table: a titled note with optional narration.
Who:   Used by TopicService (CRUD) and NotesService (content + audio pipeline).

Table Design:
    - category_id: owning category; rows are removed with the category
    - title: unique within its category
    - content: free-form note text, NULL until first edited
    - audio_url: public URL of `<id>.mp3` in the bucket.
        NULL  → never narrated
        ""    → narration explicitly removed (content became empty)
        URL   → object present in the bucket when the value was written
    - created_at: drives list order and previous/next navigation

Index on (category_id, created_at):
    Serves both the per-category listing and the neighbour lookups.
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.category import Category


class Topic(Base):
    """
    A note inside a category.

    Lifecycle:
        1. Created with a title only (content and audio_url NULL)
        2. Renamed via PUT .../topics/{id}
        3. Content edited via PUT .../notes, which re-derives the narration
        4. Deleted together with its narration object
    """

    __tablename__ = "topics"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    category_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    content: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default=None,
        comment="Raw note text as typed by the admin",
    )

    audio_url: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True,
        default=None,
        comment="Public URL of the narration object, empty when removed",
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    category: Mapped["Category"] = relationship(back_populates="topics")

    __table_args__ = (
        UniqueConstraint("category_id", "title", name="uq_topics_category_title"),
        Index("idx_topics_category_created_at", "category_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Topic(id={self.id}, title='{self.title}', category_id={self.category_id})>"

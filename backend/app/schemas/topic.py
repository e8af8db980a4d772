"""
Accounting Notes Backend: Topic and Notes Schemas
=================================================

What:  API contract for topics (titles) and their notes (content + narration).

`audio_url` semantics:
    null → never narrated
    ""   → narration removed because the content became empty
    URL  → public URL of the current narration
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class TopicRequest(BaseModel):
    """Body of POST .../topics and PUT .../topics/{id}."""

    title: str = Field(min_length=1, max_length=255, description="Topic title")

    model_config = {"extra": "forbid", "str_strip_whitespace": True}


class ContentRequest(BaseModel):
    """
    Body of PUT .../topics/{id}/notes.

    `content` may be omitted or null; both clear the note and its narration.
    """

    content: Optional[str] = Field(default=None, description="Raw note text")

    model_config = {"extra": "forbid"}


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class TopicSummary(BaseModel):
    id: uuid.UUID
    title: str

    model_config = {"from_attributes": True}


class TopicResponse(BaseModel):
    """Full topic row."""

    id: uuid.UUID
    category_id: uuid.UUID
    title: str
    content: Optional[str] = None
    audio_url: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class TopicNeighbour(BaseModel):
    """Previous/next topic in the same category, for reader navigation."""

    id: uuid.UUID
    title: str
    content: Optional[str] = None

    model_config = {"from_attributes": True}


class TopicDetailResponse(BaseModel):
    current: TopicResponse
    previous: Optional[TopicNeighbour] = None
    next: Optional[TopicNeighbour] = None


class NotesResponse(BaseModel):
    """Result of reading or updating a topic's notes."""

    id: uuid.UUID
    title: str
    content: Optional[str] = None
    audio_url: Optional[str] = None

    model_config = {"from_attributes": True}

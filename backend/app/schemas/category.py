"""
Accounting Notes Backend: Category Schemas
==========================================

Request bodies reject unknown fields (the frontend only ever sends `name`).
"""

import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from app.schemas.topic import TopicSummary


class CategoryRequest(BaseModel):
    """Body of POST /categories and PUT /categories/{id}."""

    name: str = Field(min_length=1, max_length=255, description="Category name")

    model_config = {"extra": "forbid", "str_strip_whitespace": True}


class CategoryResponse(BaseModel):
    id: uuid.UUID
    name: str

    model_config = {"from_attributes": True}


class CategoryRecord(CategoryResponse):
    """Full row, returned after create/update/delete."""

    created_at: datetime


class CategoryWithTopics(CategoryResponse):
    """Sidebar entry: the category and the titles of its topics, oldest first."""

    topics: List[TopicSummary] = Field(default_factory=list)

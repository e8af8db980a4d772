"""
Accounting Notes Backend: Category Service
==========================================

What:  CRUD for categories plus the lookups other services validate against.
How:   Stateless; every method receives the request's AsyncSession. Creates and
       renames are flushed here and committed by get_db_session; deletes
       commit here, before the bucket is touched.
Who:   Category routes; TopicService and NotesService call verify_category().

Deleting a category removes its topics through the FK cascade and then the
narration objects those topics had, best-effort.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    StorageError,
)
from app.models.category import Category
from app.models.topic import Topic
from app.schemas.category import CategoryRecord, CategoryWithTopics
from app.services.storage_service import StorageService, storage_service

logger = logging.getLogger(__name__)

CATEGORY_NOT_FOUND = "Kategoria nie znaleziona"
CATEGORY_EXISTS = "Taka kategoria już istnieje"


class CategoryService:
    def __init__(self, publisher: StorageService):
        self.publisher = publisher

    # ── Lookups ───────────────────────────────────────────────────────────

    async def verify_category(self, db: AsyncSession, category_id: UUID) -> Category:
        """
        Returns the category or raises NotFoundError.

        Query plan: primary key lookup.
        """
        result = await db.execute(select(Category).where(Category.id == category_id))
        category = result.scalar_one_or_none()
        if category is None:
            raise NotFoundError(
                message=CATEGORY_NOT_FOUND,
                resource="category",
                resource_id=str(category_id),
            )
        return category

    async def verify_unique_name(
        self,
        db: AsyncSession,
        name: str,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        query = select(Category.id).where(Category.name == name)
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        result = await db.execute(query)
        if result.scalar_one_or_none() is not None:
            raise ConflictError(message=CATEGORY_EXISTS, field="name")

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_categories(self, db: AsyncSession) -> List[CategoryWithTopics]:
        """
        All categories oldest first, each with its topic titles oldest first.

        selectinload issues one extra query for all topics instead of one per
        category; topic order comes from the relationship's order_by.
        """
        try:
            result = await db.execute(
                select(Category)
                .options(selectinload(Category.topics))
                .order_by(Category.created_at.asc())
            )
            categories = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing categories: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        return [CategoryWithTopics.model_validate(c) for c in categories]

    async def get_category(self, db: AsyncSession, category_id: UUID) -> CategoryRecord:
        category = await self.verify_category(db, category_id)
        return CategoryRecord.model_validate(category)

    # ── Commands ──────────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, name: str) -> CategoryRecord:
        await self.verify_unique_name(db, name)

        category = Category(name=name)
        db.add(category)
        await self._flush(db, "create", name)

        logger.info("Category created: %s (%s)", category.id, name)
        return CategoryRecord.model_validate(category)

    async def update(self, db: AsyncSession, category_id: UUID, name: str) -> CategoryRecord:
        category = await self.verify_category(db, category_id)
        await self.verify_unique_name(db, name, exclude_id=category_id)

        category.name = name
        await self._flush(db, "update", name)

        logger.info("Category renamed: %s → %s", category_id, name)
        return CategoryRecord.model_validate(category)

    async def delete(self, db: AsyncSession, category_id: UUID) -> CategoryRecord:
        """
        Deletes the category, its topics, and their narration objects.

        The delete is committed before any object is removed, so a failed
        commit never leaves a surviving topic pointing at a removed object.
        A storage outage never blocks the delete; leftover objects are logged.
        """
        category = await self.verify_category(db, category_id)
        record = CategoryRecord.model_validate(category)

        try:
            result = await db.execute(
                select(Topic.id, Topic.audio_url).where(Topic.category_id == category_id)
            )
            narrated = [topic_id for topic_id, audio_url in result.all() if audio_url]

            await db.delete(category)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error deleting category %s: %s", category_id, str(e))
            raise DatabaseError(context={"category_id": str(category_id)})

        for topic_id in narrated:
            key = self.publisher.audio_key(topic_id)
            try:
                await self.publisher.remove(key)
            except StorageError as e:
                logger.warning("Narration %s left in bucket after category delete: %s", key, e.message)

        logger.info("Category deleted: %s (%d narrations removed)", category_id, len(narrated))
        return record

    @staticmethod
    async def _flush(db: AsyncSession, action: str, name: str) -> None:
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race against a concurrent insert of the same name
            raise ConflictError(message=CATEGORY_EXISTS, field="name")
        except SQLAlchemyError as e:
            logger.error("Database error on category %s (%s): %s", action, name, str(e))
            raise DatabaseError(context={"action": action})


# ── Singleton Instance ────────────────────────────────────────────────────
category_service = CategoryService(storage_service)

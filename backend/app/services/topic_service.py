"""
Accounting Notes Backend: Topic Service
=======================================

What:  CRUD for topics inside a category, title search, and previous/next
       navigation for the reader view.
How:   Stateless; each call gets the request's AsyncSession. Ownership is
       checked on every call: a topic addressed through the wrong category
       is reported as not found.
Who:   Topic routes; NotesService uses verify_topic_in_category().

Navigation (GET .../topics/{id}):
    previous = newest topic in the same category created before this one
    next     = oldest topic in the same category created after this one
    Both use idx_topics_category_created_at.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, DatabaseError, NotFoundError, StorageError
from app.models.topic import Topic
from app.schemas.topic import (
    TopicDetailResponse,
    TopicNeighbour,
    TopicResponse,
    TopicSummary,
)
from app.services.category_service import CategoryService, category_service
from app.services.storage_service import StorageService, storage_service

logger = logging.getLogger(__name__)

TOPIC_NOT_FOUND = "Temat nie znaleziony"
TOPIC_EXISTS = "Taki temat już istnieje"


class TopicService:
    def __init__(self, categories: CategoryService, publisher: StorageService):
        self.categories = categories
        self.publisher = publisher

    # ── Lookups ───────────────────────────────────────────────────────────

    async def verify_topic(self, db: AsyncSession, topic_id: UUID) -> Topic:
        result = await db.execute(select(Topic).where(Topic.id == topic_id))
        topic = result.scalar_one_or_none()
        if topic is None:
            raise NotFoundError(message=TOPIC_NOT_FOUND, resource="topic", resource_id=str(topic_id))
        return topic

    async def verify_topic_in_category(
        self,
        db: AsyncSession,
        category_id: UUID,
        topic_id: UUID,
    ) -> Topic:
        """
        Category must exist, topic must exist and belong to it.

        Raises:
            NotFoundError: with the category or topic message
        """
        await self.categories.verify_category(db, category_id)
        topic = await self.verify_topic(db, topic_id)
        if topic.category_id != category_id:
            raise NotFoundError(
                message=TOPIC_NOT_FOUND,
                resource="topic",
                resource_id=str(topic_id),
                context={"category_id": str(category_id)},
            )
        return topic

    async def verify_unique_title(
        self,
        db: AsyncSession,
        category_id: UUID,
        title: str,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        query = select(Topic.id).where(Topic.category_id == category_id, Topic.title == title)
        if exclude_id is not None:
            query = query.where(Topic.id != exclude_id)
        result = await db.execute(query)
        if result.scalar_one_or_none() is not None:
            raise ConflictError(message=TOPIC_EXISTS, field="title")

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_topics(
        self,
        db: AsyncSession,
        category_id: UUID,
        title: Optional[str] = None,
    ) -> List[TopicSummary]:
        """
        Topic titles of a category, oldest first.

        `title` filters by case-insensitive substring; blank means no filter.
        """
        await self.categories.verify_category(db, category_id)

        query = select(Topic).where(Topic.category_id == category_id)
        if title and title.strip():
            query = query.where(Topic.title.ilike(f"%{title.strip()}%"))
        query = query.order_by(Topic.created_at.asc())

        try:
            result = await db.execute(query)
            topics = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing topics of %s: %s", category_id, str(e))
            raise DatabaseError(context={"category_id": str(category_id)})

        return [TopicSummary.model_validate(t) for t in topics]

    async def get_topic(
        self,
        db: AsyncSession,
        category_id: UUID,
        topic_id: UUID,
    ) -> TopicDetailResponse:
        topic = await self.verify_topic_in_category(db, category_id, topic_id)

        try:
            previous = await self._neighbour(db, topic, before=True)
            following = await self._neighbour(db, topic, before=False)
        except SQLAlchemyError as e:
            logger.error("Database error loading neighbours of %s: %s", topic_id, str(e))
            raise DatabaseError(context={"topic_id": str(topic_id)})

        return TopicDetailResponse(
            current=TopicResponse.model_validate(topic),
            previous=TopicNeighbour.model_validate(previous) if previous else None,
            next=TopicNeighbour.model_validate(following) if following else None,
        )

    @staticmethod
    async def _neighbour(db: AsyncSession, topic: Topic, before: bool) -> Optional[Topic]:
        query = select(Topic).where(Topic.category_id == topic.category_id)
        if before:
            query = query.where(Topic.created_at < topic.created_at).order_by(Topic.created_at.desc())
        else:
            query = query.where(Topic.created_at > topic.created_at).order_by(Topic.created_at.asc())
        result = await db.execute(query.limit(1))
        return result.scalar_one_or_none()

    # ── Commands ──────────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, category_id: UUID, title: str) -> TopicResponse:
        await self.categories.verify_category(db, category_id)
        await self.verify_unique_title(db, category_id, title)

        topic = Topic(category_id=category_id, title=title)
        db.add(topic)
        await self._flush(db, "create")

        logger.info("Topic created: %s in category %s", topic.id, category_id)
        return TopicResponse.model_validate(topic)

    async def update(
        self,
        db: AsyncSession,
        category_id: UUID,
        topic_id: UUID,
        title: str,
    ) -> TopicResponse:
        topic = await self.verify_topic_in_category(db, category_id, topic_id)
        await self.verify_unique_title(db, category_id, title, exclude_id=topic_id)

        topic.title = title
        await self._flush(db, "update")

        logger.info("Topic renamed: %s", topic_id)
        return TopicResponse.model_validate(topic)

    async def delete(self, db: AsyncSession, category_id: UUID, topic_id: UUID) -> TopicResponse:
        """
        Deletes the topic row, commits, then removes its narration object.

        A storage failure is logged and leaves an orphaned object; the row is
        gone either way.
        """
        topic = await self.verify_topic_in_category(db, category_id, topic_id)
        record = TopicResponse.model_validate(topic)

        try:
            await db.delete(topic)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error deleting topic %s: %s", topic_id, str(e))
            raise DatabaseError(context={"topic_id": str(topic_id)})

        if record.audio_url:
            key = self.publisher.audio_key(topic_id)
            try:
                await self.publisher.remove(key)
            except StorageError as e:
                logger.warning("Narration %s left in bucket after topic delete: %s", key, e.message)

        logger.info("Topic deleted: %s", topic_id)
        return record

    @staticmethod
    async def _flush(db: AsyncSession, action: str) -> None:
        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError(message=TOPIC_EXISTS, field="title")
        except SQLAlchemyError as e:
            logger.error("Database error on topic %s: %s", action, str(e))
            raise DatabaseError(context={"action": action})


# ── Singleton Instance ────────────────────────────────────────────────────
topic_service = TopicService(category_service, storage_service)

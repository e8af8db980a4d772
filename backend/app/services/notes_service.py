"""
Accounting Notes Backend: Notes Service (Note Update Pipeline)
==============================================================

What:  Saves a topic's note text and keeps its narration in step with it.
How:   Composes TextNormalizer, a SpeechSynthesizer and StorageService, each
       injected through the constructor.
Who:   PUT/GET /categories/{cid}/topics/{id}/notes.

Update flow:
    ┌──────────┐   ┌──────────┐   ┌───────────┐   ┌────────────┐   ┌──────────┐
    │ Validate │──▶│ Save text│──▶│ Normalize │──▶│ Narration  │──▶│ Save URL │
    │          │   │ (commit) │   │           │   │ clear/make │   │ (commit) │
    └──────────┘   └──────────┘   └───────────┘   └────────────┘   └──────────┘

Failure policy:
    - Validation failures (NotFoundError) propagate.
    - Once the text is committed nothing rolls it back. Synthesis and storage
      failures are logged at WARNING and the narration falls back:
        synthesis failed                     → previous URL kept
        old object removal failed            → ignored, new object published
        publish failed, old object removed   → ""
        publish failed, old object untouched → previous URL kept

Concurrent updates of one topic are not coordinated; the last write to the
row and to the object key wins.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import DatabaseError, StorageError, SynthesisError
from app.schemas.topic import NotesResponse
from app.services.gtts_service import gtts_synthesizer
from app.services.storage_service import StorageService, storage_service
from app.services.text_normalizer import TextNormalizer, is_meaningful, text_normalizer
from app.services.topic_service import TopicService, topic_service
from app.services.tts_base import SpeechSynthesizer

logger = logging.getLogger(__name__)

AUDIO_CONTENT_TYPE = "audio/mpeg"


class NotesService:
    """
    Args:
        normalizer:  Turns raw note text into speakable text.
        synthesizer: Produces MP3 bytes.
        publisher:   Stores and removes `<topic-id>.mp3`.
        language:    Speech language, defaults to settings.tts_language.
        topics:      Ownership checks, defaults to the module singleton.
    """

    def __init__(
        self,
        normalizer: TextNormalizer,
        synthesizer: SpeechSynthesizer,
        publisher: StorageService,
        language: Optional[str] = None,
        topics: Optional[TopicService] = None,
    ):
        self.normalizer = normalizer
        self.synthesizer = synthesizer
        self.publisher = publisher
        self.language = language or settings.tts_language
        self.topics = topics or topic_service

    async def get_notes(self, db: AsyncSession, category_id: UUID, topic_id: UUID) -> NotesResponse:
        topic = await self.topics.verify_topic_in_category(db, category_id, topic_id)
        return NotesResponse.model_validate(topic)

    async def update_notes(
        self,
        db: AsyncSession,
        category_id: UUID,
        topic_id: UUID,
        content: Optional[str],
    ) -> NotesResponse:
        """
        Saves `content` and re-derives the topic's narration.

        Returns:
            NotesResponse with the saved content and the narration URL the
            row now holds ("" when cleared, None when never narrated).

        Raises:
            NotFoundError: category or topic missing, or topic in another category
            DatabaseError: the text itself could not be saved
        """
        # ── Step 1: Validate ──────────────────────────────────────────────
        topic = await self.topics.verify_topic_in_category(db, category_id, topic_id)
        title = topic.title
        previous_url = topic.audio_url

        # ── Step 2: Save the text before touching audio ───────────────────
        topic.content = content
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Saving notes of topic %s failed: %s", topic_id, str(e))
            raise DatabaseError(context={"topic_id": str(topic_id)})

        # ── Steps 3-4: Normalize and branch ───────────────────────────────
        speakable = self.normalizer.normalize(content or "")

        if is_meaningful(speakable):
            audio_url = await self._narrate(topic_id, speakable, previous_url)
        else:
            audio_url = await self._clear(topic_id, previous_url)

        # ── Step 5: Save the narration reference ──────────────────────────
        if audio_url != previous_url:
            topic.audio_url = audio_url
            try:
                await db.commit()
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(
                    "Saving narration URL of topic %s failed, row keeps %r: %s",
                    topic_id,
                    previous_url,
                    str(e),
                )
                audio_url = previous_url

        logger.info(
            "Notes of topic %s saved (%d chars, narration %s)",
            topic_id,
            len(content or ""),
            "cleared" if audio_url == "" else ("set" if audio_url else "none"),
        )
        return NotesResponse(id=topic_id, title=title, content=content, audio_url=audio_url)

    async def _clear(self, topic_id: UUID, previous_url: Optional[str]) -> Optional[str]:
        """Nothing to say: drop the old narration if there was one."""
        if not previous_url:
            return previous_url

        key = self.publisher.audio_key(topic_id)
        try:
            await self.publisher.remove(key)
        except StorageError as e:
            logger.warning("Could not remove narration %s: %s", key, e.message)
        return ""

    async def _narrate(self, topic_id: UUID, text: str, previous_url: Optional[str]) -> Optional[str]:
        try:
            audio = await self.synthesizer.synthesize(text, self.language)
        except SynthesisError as e:
            logger.warning(
                "Synthesis for topic %s failed, keeping previous narration: %s %s",
                topic_id,
                e.message,
                e.context,
            )
            return previous_url

        key = self.publisher.audio_key(topic_id)

        previous_removed = False
        if previous_url:
            try:
                await self.publisher.remove(key)
                previous_removed = True
            except StorageError as e:
                logger.warning("Could not remove old narration %s: %s", key, e.message)

        try:
            return await self.publisher.publish(audio, key, AUDIO_CONTENT_TYPE)
        except StorageError as e:
            fallback = "" if previous_removed else previous_url
            logger.warning("Publishing narration %s failed, falling back to %r: %s", key, fallback, e.message)
            return fallback


# ── Singleton Instance ────────────────────────────────────────────────────
notes_service = NotesService(text_normalizer, gtts_synthesizer, storage_service)

"""
Accounting Notes Backend: Notes Pipeline Unit Tests
===================================================

What we test:
    ✅ Text is committed before any audio work starts
    ✅ Empty or symbol-only content clears the narration
    ✅ Synthesis failure keeps the previous narration
    ✅ Storage failures never fail the update
    ✅ The synthesizer receives normalized text
    ✅ Ownership errors propagate and nothing is saved

Collaborators are mocks; the normalizer is real (default abbreviation table).
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from app.exceptions import DatabaseError, NotFoundError, StorageError, SynthesisError
from app.services.abbreviations import DEFAULT_ABBREVIATIONS, AbbreviationTable
from app.services.notes_service import AUDIO_CONTENT_TYPE, NotesService
from app.services.storage_service import StorageService
from app.services.text_normalizer import TextNormalizer

PUBLIC_URL = "https://cdn.example.com"


@pytest.fixture
def topics(sample_topic):
    lookup = MagicMock()
    lookup.verify_topic_in_category = AsyncMock(return_value=sample_topic)
    return lookup


@pytest.fixture
def service(mock_synthesizer, mock_publisher, topics):
    normalizer = TextNormalizer(AbbreviationTable(DEFAULT_ABBREVIATIONS))
    return NotesService(normalizer, mock_synthesizer, mock_publisher, language="pl", topics=topics)


def audio_key(topic):
    return f"{topic.id}.mp3"


class TestUpdateNotesNarration:
    @pytest.mark.asyncio
    async def test_new_content_is_narrated_and_published(
        self, service, mock_db_session, mock_synthesizer, mock_publisher, sample_topic
    ):
        result = await service.update_notes(
            mock_db_session, sample_topic.category_id, sample_topic.id, "Nowa notatka o podatkach"
        )

        expected_url = f"{PUBLIC_URL}/{audio_key(sample_topic)}"
        assert result.audio_url == expected_url
        assert result.content == "Nowa notatka o podatkach"
        assert result.title == "Podatek VAT"
        assert sample_topic.audio_url == expected_url
        mock_synthesizer.synthesize.assert_awaited_once_with("Nowa notatka o podatkach", "pl")
        mock_publisher.publish.assert_awaited_once_with(
            mock_synthesizer.synthesize.return_value, audio_key(sample_topic), AUDIO_CONTENT_TYPE
        )
        # First-time narration has nothing to remove
        mock_publisher.remove.assert_not_awaited()
        assert mock_db_session.commit.await_count == 2

    @pytest.mark.asyncio
    async def test_existing_narration_is_replaced(
        self, service, mock_db_session, mock_publisher, sample_topic
    ):
        sample_topic.audio_url = f"{PUBLIC_URL}/{audio_key(sample_topic)}"
        events = []
        mock_publisher.remove.side_effect = lambda key: events.append(("remove", key))
        mock_publisher.publish.side_effect = lambda data, key, ct: events.append(("publish", key)) or (
            f"{PUBLIC_URL}/{key}"
        )

        result = await service.update_notes(
            mock_db_session, sample_topic.category_id, sample_topic.id, "Zmieniona treść"
        )

        assert events == [("remove", audio_key(sample_topic)), ("publish", audio_key(sample_topic))]
        assert result.audio_url == f"{PUBLIC_URL}/{audio_key(sample_topic)}"
        # Same URL as before: no second commit needed
        assert mock_db_session.commit.await_count == 1

    @pytest.mark.asyncio
    async def test_synthesizer_receives_normalized_text(
        self, service, mock_db_session, mock_synthesizer, sample_topic
    ):
        result = await service.update_notes(
            mock_db_session, sample_topic.category_id, sample_topic.id, "- VAT wynosi 23% 🙂"
        )

        mock_synthesizer.synthesize.assert_awaited_once_with("wat wynosi 23 procent", "pl")
        # Stored content is the raw text
        assert result.content == "- VAT wynosi 23% 🙂"
        assert sample_topic.content == "- VAT wynosi 23% 🙂"

    @pytest.mark.asyncio
    async def test_text_committed_before_synthesis(
        self, service, mock_db_session, mock_synthesizer, sample_topic
    ):
        events = []
        mock_db_session.commit.side_effect = lambda: events.append("commit")

        async def synthesize(text, language):
            events.append("synthesize")
            return b"ID3" + b"\x00" * 4096

        mock_synthesizer.synthesize.side_effect = synthesize

        await service.update_notes(mock_db_session, sample_topic.category_id, sample_topic.id, "Treść")

        assert events[:2] == ["commit", "synthesize"]


class TestUpdateNotesClearing:
    @pytest.mark.asyncio
    async def test_empty_content_removes_previous_narration(
        self, service, mock_db_session, mock_synthesizer, mock_publisher, sample_topic
    ):
        sample_topic.audio_url = f"{PUBLIC_URL}/{audio_key(sample_topic)}"

        result = await service.update_notes(mock_db_session, sample_topic.category_id, sample_topic.id, "")

        assert result.audio_url == ""
        assert sample_topic.audio_url == ""
        mock_publisher.remove.assert_awaited_once_with(audio_key(sample_topic))
        mock_synthesizer.synthesize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_content_without_narration_changes_nothing(
        self, service, mock_db_session, mock_synthesizer, mock_publisher, sample_topic
    ):
        result = await service.update_notes(mock_db_session, sample_topic.category_id, sample_topic.id, "")

        assert result.audio_url is None
        mock_publisher.remove.assert_not_awaited()
        mock_publisher.publish.assert_not_awaited()
        mock_synthesizer.synthesize.assert_not_awaited()
        assert mock_db_session.commit.await_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["   \n\t ", "- * •", "🙂🙂", "!!! ??? ..."])
    async def test_content_without_letters_counts_as_empty(
        self, service, mock_db_session, mock_synthesizer, mock_publisher, sample_topic, content
    ):
        sample_topic.audio_url = f"{PUBLIC_URL}/{audio_key(sample_topic)}"

        result = await service.update_notes(mock_db_session, sample_topic.category_id, sample_topic.id, content)

        assert result.audio_url == ""
        assert result.content == content
        mock_synthesizer.synthesize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_null_content_is_stored_as_null(self, service, mock_db_session, sample_topic):
        result = await service.update_notes(mock_db_session, sample_topic.category_id, sample_topic.id, None)

        assert result.content is None
        assert sample_topic.content is None

    @pytest.mark.asyncio
    async def test_remove_failure_still_clears_reference(
        self, service, mock_db_session, mock_publisher, sample_topic
    ):
        sample_topic.audio_url = f"{PUBLIC_URL}/{audio_key(sample_topic)}"
        mock_publisher.remove.side_effect = StorageError(key=audio_key(sample_topic))

        result = await service.update_notes(mock_db_session, sample_topic.category_id, sample_topic.id, "")

        assert result.audio_url == ""


class TestUpdateNotesFailures:
    @pytest.mark.asyncio
    async def test_synthesis_failure_keeps_previous_narration(
        self, service, mock_db_session, mock_synthesizer, mock_publisher, sample_topic
    ):
        previous = f"{PUBLIC_URL}/{audio_key(sample_topic)}"
        sample_topic.audio_url = previous
        mock_synthesizer.synthesize.side_effect = SynthesisError()

        result = await service.update_notes(
            mock_db_session, sample_topic.category_id, sample_topic.id, "Nowa treść"
        )

        assert result.audio_url == previous
        assert result.content == "Nowa treść"
        assert sample_topic.content == "Nowa treść"
        mock_publisher.remove.assert_not_awaited()
        mock_publisher.publish.assert_not_awaited()
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_publish_failure_after_remove_clears_reference(
        self, service, mock_db_session, mock_publisher, sample_topic
    ):
        sample_topic.audio_url = f"{PUBLIC_URL}/{audio_key(sample_topic)}"
        mock_publisher.publish.side_effect = StorageError(key=audio_key(sample_topic))

        result = await service.update_notes(
            mock_db_session, sample_topic.category_id, sample_topic.id, "Nowa treść"
        )

        assert result.audio_url == ""
        assert sample_topic.audio_url == ""

    @pytest.mark.asyncio
    async def test_publish_failure_without_previous_keeps_null(
        self, service, mock_db_session, mock_publisher, sample_topic
    ):
        mock_publisher.publish.side_effect = StorageError(key=audio_key(sample_topic))

        result = await service.update_notes(
            mock_db_session, sample_topic.category_id, sample_topic.id, "Nowa treść"
        )

        assert result.audio_url is None
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_remove_failure_still_publishes(
        self, service, mock_db_session, mock_publisher, sample_topic
    ):
        sample_topic.audio_url = "https://old.example.com/legacy.mp3"
        mock_publisher.remove.side_effect = StorageError(key=audio_key(sample_topic))

        result = await service.update_notes(
            mock_db_session, sample_topic.category_id, sample_topic.id, "Nowa treść"
        )

        assert result.audio_url == f"{PUBLIC_URL}/{audio_key(sample_topic)}"
        mock_publisher.publish.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_publish_failure_after_failed_remove_keeps_previous(
        self, service, mock_db_session, mock_publisher, sample_topic
    ):
        previous = f"{PUBLIC_URL}/{audio_key(sample_topic)}"
        sample_topic.audio_url = previous
        mock_publisher.remove.side_effect = StorageError(key=audio_key(sample_topic))
        mock_publisher.publish.side_effect = StorageError(key=audio_key(sample_topic))

        result = await service.update_notes(
            mock_db_session, sample_topic.category_id, sample_topic.id, "Nowa treść"
        )

        assert result.audio_url == previous

    @pytest.mark.asyncio
    async def test_unbuildable_storage_client_does_not_fail_update(
        self, mock_db_session, mock_synthesizer, topics, sample_topic
    ):
        publisher = StorageService(bucket="notes-audio", public_url=PUBLIC_URL)
        service = NotesService(
            TextNormalizer(AbbreviationTable(DEFAULT_ABBREVIATIONS)),
            mock_synthesizer,
            publisher,
            language="pl",
            topics=topics,
        )

        with patch("app.services.storage_service.boto3.client", side_effect=ValueError("Invalid endpoint")):
            result = await service.update_notes(
                mock_db_session, sample_topic.category_id, sample_topic.id, "Nowa treść"
            )

        assert result.content == "Nowa treść"
        assert result.audio_url is None
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_topic_propagates_and_saves_nothing(
        self, service, topics, mock_db_session, mock_synthesizer, sample_topic
    ):
        topics.verify_topic_in_category.side_effect = NotFoundError(message="Temat nie znaleziony")

        with pytest.raises(NotFoundError):
            await service.update_notes(mock_db_session, sample_topic.category_id, sample_topic.id, "Treść")

        mock_db_session.commit.assert_not_awaited()
        mock_synthesizer.synthesize.assert_not_awaited()
        assert sample_topic.content == "Stara treść"

    @pytest.mark.asyncio
    async def test_text_commit_failure_raises_database_error(
        self, service, mock_db_session, mock_synthesizer, sample_topic
    ):
        mock_db_session.commit.side_effect = OperationalError("UPDATE topics", {}, Exception("down"))

        with pytest.raises(DatabaseError):
            await service.update_notes(mock_db_session, sample_topic.category_id, sample_topic.id, "Treść")

        mock_db_session.rollback.assert_awaited_once()
        mock_synthesizer.synthesize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_url_commit_failure_reports_previous_url(
        self, service, mock_db_session, sample_topic
    ):
        mock_db_session.commit.side_effect = [None, OperationalError("UPDATE topics", {}, Exception("down"))]

        result = await service.update_notes(
            mock_db_session, sample_topic.category_id, sample_topic.id, "Treść"
        )

        assert result.audio_url is None
        mock_db_session.rollback.assert_awaited_once()


class TestGetNotes:
    @pytest.mark.asyncio
    async def test_returns_stored_notes(self, service, mock_db_session, sample_topic):
        sample_topic.audio_url = f"{PUBLIC_URL}/{audio_key(sample_topic)}"

        result = await service.get_notes(mock_db_session, sample_topic.category_id, sample_topic.id)

        assert result.id == sample_topic.id
        assert result.title == "Podatek VAT"
        assert result.content == "Stara treść"
        assert result.audio_url == sample_topic.audio_url

"""
Accounting Notes Backend: Category Service Unit Tests
=====================================================

What we test:
    ✅ Lookups raise NotFoundError with the Polish message
    ✅ Duplicate names raise ConflictError (pre-check and unique constraint)
    ✅ Listing returns topic summaries
    ✅ Delete removes the narrations of the category's topics, best-effort
"""

import uuid

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from app.exceptions import ConflictError, DatabaseError, NotFoundError, StorageError
from app.models.category import Category
from app.services.category_service import CATEGORY_EXISTS, CATEGORY_NOT_FOUND, CategoryService


@pytest.fixture
def service(mock_publisher):
    return CategoryService(mock_publisher)


class TestCategoryLookups:
    @pytest.mark.asyncio
    async def test_verify_category_found(self, service, mock_db_session, make_result, sample_category):
        mock_db_session.execute.return_value = make_result(sample_category)

        assert await service.verify_category(mock_db_session, sample_category.id) is sample_category

    @pytest.mark.asyncio
    async def test_verify_category_missing(self, service, mock_db_session, make_result):
        mock_db_session.execute.return_value = make_result(None)

        with pytest.raises(NotFoundError) as exc_info:
            await service.verify_category(mock_db_session, uuid.uuid4())

        assert exc_info.value.message == CATEGORY_NOT_FOUND
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_get_category(self, service, mock_db_session, make_result, sample_category):
        mock_db_session.execute.return_value = make_result(sample_category)

        record = await service.get_category(mock_db_session, sample_category.id)

        assert record.id == sample_category.id
        assert record.name == "Podatki"


class TestCategoryList:
    @pytest.mark.asyncio
    async def test_lists_categories_with_topic_titles(
        self, service, mock_db_session, make_result, sample_category, sample_topic
    ):
        sample_category.topics = [sample_topic]
        empty = Category(id=uuid.uuid4(), name="Kadry")
        mock_db_session.execute.return_value = make_result(rows=[sample_category, empty])

        categories = await service.list_categories(mock_db_session)

        assert [c.name for c in categories] == ["Podatki", "Kadry"]
        assert categories[0].topics[0].title == "Podatek VAT"
        assert categories[1].topics == []


class TestCategoryCommands:
    @pytest.mark.asyncio
    async def test_create(self, service, mock_db_session, make_result):
        mock_db_session.execute.return_value = make_result(None)

        record = await service.create(mock_db_session, "Rachunkowość")

        assert record.name == "Rachunkowość"
        assert record.id is not None
        mock_db_session.add.assert_called_once()

    @pytest.mark.asyncio
    async def test_create_duplicate_name(self, service, mock_db_session, make_result):
        mock_db_session.execute.return_value = make_result(uuid.uuid4())

        with pytest.raises(ConflictError) as exc_info:
            await service.create(mock_db_session, "Podatki")

        assert exc_info.value.message == CATEGORY_EXISTS
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_race_on_unique_constraint(self, service, mock_db_session, make_result):
        mock_db_session.execute.return_value = make_result(None)
        mock_db_session.flush.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))

        with pytest.raises(ConflictError):
            await service.create(mock_db_session, "Podatki")

    @pytest.mark.asyncio
    async def test_update_renames(self, service, mock_db_session, make_result, sample_category):
        mock_db_session.execute.side_effect = [make_result(sample_category), make_result(None)]

        record = await service.update(mock_db_session, sample_category.id, "Podatki dochodowe")

        assert record.name == "Podatki dochodowe"
        assert sample_category.name == "Podatki dochodowe"


class TestCategoryDelete:
    @pytest.mark.asyncio
    async def test_delete_removes_narrations(
        self, service, mock_db_session, make_result, mock_publisher, sample_category
    ):
        narrated, silent = uuid.uuid4(), uuid.uuid4()
        mock_db_session.execute.side_effect = [
            make_result(sample_category),
            make_result(rows=[(narrated, "https://cdn.example.com/x.mp3"), (silent, None)]),
        ]

        record = await service.delete(mock_db_session, sample_category.id)

        assert record.id == sample_category.id
        mock_db_session.delete.assert_awaited_once_with(sample_category)
        mock_publisher.remove.assert_awaited_once_with(f"{narrated}.mp3")

    @pytest.mark.asyncio
    async def test_delete_ignores_storage_failure(
        self, service, mock_db_session, make_result, mock_publisher, sample_category
    ):
        mock_db_session.execute.side_effect = [
            make_result(sample_category),
            make_result(rows=[(uuid.uuid4(), "https://cdn.example.com/a.mp3")]),
        ]
        mock_publisher.remove.side_effect = StorageError()

        record = await service.delete(mock_db_session, sample_category.id)

        assert record.name == "Podatki"
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_missing_category(self, service, mock_db_session, make_result, mock_publisher):
        mock_db_session.execute.return_value = make_result(None)

        with pytest.raises(NotFoundError):
            await service.delete(mock_db_session, uuid.uuid4())

        mock_db_session.delete.assert_not_awaited()
        mock_publisher.remove.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_commits_before_removing_objects(
        self, service, mock_db_session, make_result, mock_publisher, sample_category
    ):
        events = []
        mock_db_session.commit.side_effect = lambda: events.append("commit")
        mock_publisher.remove.side_effect = lambda key: events.append("remove")
        mock_db_session.execute.side_effect = [
            make_result(sample_category),
            make_result(rows=[(uuid.uuid4(), "https://cdn.example.com/a.mp3")]),
        ]

        await service.delete(mock_db_session, sample_category.id)

        assert events == ["commit", "remove"]

    @pytest.mark.asyncio
    async def test_failed_commit_keeps_objects(
        self, service, mock_db_session, make_result, mock_publisher, sample_category
    ):
        mock_db_session.execute.side_effect = [
            make_result(sample_category),
            make_result(rows=[(uuid.uuid4(), "https://cdn.example.com/a.mp3")]),
        ]
        mock_db_session.commit.side_effect = OperationalError("DELETE", {}, Exception("down"))

        with pytest.raises(DatabaseError):
            await service.delete(mock_db_session, sample_category.id)

        mock_db_session.rollback.assert_awaited_once()
        mock_publisher.remove.assert_not_awaited()

"""
Accounting Notes Backend: Test Configuration (conftest.py)
==========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock AsyncSession (no real DB needed)
    ├── make_result: Builds the object db.execute() returns
    ├── sample_category / sample_topic: Detached ORM instances
    ├── mock_publisher / mock_synthesizer: Audio pipeline collaborators
    └── test_client: HTTPX AsyncClient for API endpoint testing
"""

import os
import tempfile
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings BEFORE any app imports: no real database, bucket or
# production cookies during tests
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["ENVIRONMENT"] = "development"
os.environ["R2_ENDPOINT"] = "https://account.r2.example.com"
os.environ["R2_ACCESS_KEY"] = "test-access-key"
os.environ["R2_SECRET_KEY"] = "test-secret-key"
os.environ["R2_BUCKET"] = "test-bucket"
os.environ["R2_PUBLIC_URL"] = "https://cdn.example.com"
os.environ["TTS_TEMP_DIR"] = tempfile.mkdtemp(prefix="accounting_notes_test_")
os.environ["LOG_LEVEL"] = "WARNING"


PUBLIC_URL = "https://cdn.example.com"


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Mock async database session.

    flush() fills in the column defaults SQLAlchemy would generate (id,
    created_at) on every object passed to add(), so services can build
    response models from freshly created rows.

    Usage:
        mock_db_session.execute.return_value = make_result(topic)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()

    async def flush():
        for call in session.add.call_args_list:
            obj = call.args[0]
            if getattr(obj, "id", None) is None:
                obj.id = uuid.uuid4()
            if getattr(obj, "created_at", None) is None:
                obj.created_at = datetime.now(timezone.utc)

    session.flush = AsyncMock(side_effect=flush)
    return session


@pytest.fixture
def make_result():
    """
    Builds a stand-in for the Result returned by AsyncSession.execute().

    make_result(obj)            → scalar_one_or_none() == obj
    make_result(rows=[a, b])    → scalars().all() == [a, b], all() == [a, b]
    """

    def _make(value=None, rows=None):
        result = MagicMock()
        result.scalar_one_or_none.return_value = value
        result.scalars.return_value.all.return_value = list(rows or [])
        result.all.return_value = list(rows or [])
        return result

    return _make


# ══════════════════════════════════════════════════════════════════════════
# Domain Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def sample_category():
    from app.models.category import Category

    return Category(
        id=uuid.uuid4(),
        name="Podatki",
        created_at=datetime(2024, 1, 10, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample_topic(sample_category):
    from app.models.topic import Topic

    return Topic(
        id=uuid.uuid4(),
        category_id=sample_category.id,
        title="Podatek VAT",
        content="Stara treść",
        audio_url=None,
        created_at=datetime(2024, 1, 10, tzinfo=timezone.utc) + timedelta(hours=1),
    )


@pytest.fixture
def mock_publisher():
    """
    StorageService stand-in: real key scheme, awaitable publish/remove.

    publish() returns the URL the real service would build.
    """
    from app.services.storage_service import StorageService

    publisher = MagicMock()
    publisher.audio_key = StorageService.audio_key
    publisher.publish = AsyncMock(side_effect=lambda data, key, content_type: f"{PUBLIC_URL}/{key}")
    publisher.remove = AsyncMock(return_value=None)
    return publisher


@pytest.fixture
def mock_synthesizer():
    synthesizer = MagicMock()
    synthesizer.synthesize = AsyncMock(return_value=b"ID3" + b"\x00" * 4096)
    synthesizer.health_check = AsyncMock(return_value=True)
    return synthesizer


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(mock_db_session):
    """
    HTTPX AsyncClient talking to the app in-process.

    get_db_session is overridden with mock_db_session; route tests patch the
    service singletons they call.
    """
    from app.database import get_db_session
    from app.main import app

    async def override_db():
        yield mock_db_session

    app.dependency_overrides[get_db_session] = override_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()

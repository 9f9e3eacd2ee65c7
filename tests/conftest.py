"""
Blog API — Test Configuration (conftest.py)
===========================================

What:  Shared pytest fixtures for the entire test suite.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    ├── sample_post_data: field values for a BlogPost
    ├── post_payload: a valid POST /posts body
    ├── database: connected Database on TEST_DATABASE_URL, empty tables
    └── test_client: HTTPX AsyncClient bound to an app serving `database`

Storage defaults to an aiosqlite file in a temp directory; export
TEST_DATABASE_URL to run the same suite against PostgreSQL.
"""

import os
import tempfile
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

# Environment overrides must land before blog_api.config is imported.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="blog_api_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_DIR}/blog-app.db"
os.environ.setdefault("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_DB_DIR}/test-blog-app.db")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402

from blog_api.config import settings  # noqa: E402
from blog_api.database import Base, Database  # noqa: E402


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_post(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = post
            result = await post_service.get_post(mock_db_session, post_id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_post_data():
    return {
        "id": uuid4(),
        "title": "Ten things about sqlalchemy",
        "content": "Number one: sessions are not threads.",
        "author": [{"firstName": "Ada", "lastName": "Lovelace"}],
        "created": datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc),
    }


@pytest.fixture
def post_payload():
    return {
        "title": "T",
        "content": "C",
        "author": [{"firstName": "A", "lastName": "B"}],
    }


@pytest_asyncio.fixture
async def database():
    """
    Connected Database with freshly created tables.

    Tables are dropped afterwards so every test starts empty.
    """
    db = Database(settings.test_database_url)
    await db.connect()
    await db.create_schema()
    try:
        yield db
    finally:
        async with db.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await db.disconnect()


@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient talking to the app in-process.

    ASGITransport does not run the lifespan; the app serves the already
    connected `database` fixture.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/posts")
            assert response.status_code == 200
    """
    from blog_api.main import create_app

    app = create_app(database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

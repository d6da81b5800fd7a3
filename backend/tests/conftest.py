"""
Bookshelf Backend: Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock AsyncSession for service unit tests
    ├── sample_book_data: Valid create payload (Dune)
    ├── make_book: Builds transient Book rows with every column filled
    ├── test_settings: Settings pointing at a throwaway SQLite file
    ├── test_app: App with its lifespan entered (tables created)
    └── test_client: HTTPX AsyncClient bound to test_app
"""

import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Keep test output quiet; read when bookshelf.config is first imported
os.environ.setdefault("LOG_LEVEL", "WARNING")

from bookshelf.config import Settings  # noqa: E402
from bookshelf.models.book import Book  # noqa: E402


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_book(mock_db_session, make_book):
            mock_db_session.get.return_value = make_book(id=1)
            result = await book_service.get_book(mock_db_session, 1)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock(return_value=None)
    session.flush = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_book_data():
    """A valid POST /books body."""
    return {
        "title": "Dune",
        "authors": "Frank Herbert",
        "isbn": "9780441013593",
        "editorial": "Chilton Books",
        "year": "1965",
        "edition_number": 1,
        "language": "en",
    }


@pytest.fixture
def make_book():
    """Factory for transient Book instances (not attached to any session)."""
    def _make(**overrides):
        now = datetime.now(timezone.utc)
        values = {
            "id": 1,
            "title": "Dune",
            "authors": "Frank Herbert",
            "isbn": "9780441013593",
            "editorial": None,
            "year": 1965,
            "edition_number": None,
            "language": None,
            "created_at": now,
            "updated_at": now,
        }
        values.update(overrides)
        return Book(**values)
    return _make


@pytest.fixture
def test_settings(tmp_path):
    """Settings bound to a SQLite file unique to this test."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'bookshelf_test.db'}",
        db_create_tables=True,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def test_app(test_settings):
    """
    A fresh application with its lifespan running.

    ASGITransport does not send lifespan events, so the fixture enters the
    lifespan itself: the Database is opened and the tables created before
    the test, and disposed afterwards.
    """
    from bookshelf.main import create_app

    app = create_app(test_settings)
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

"""
NoteBox: Test Configuration (conftest.py)
============================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own in-memory SQLite database (aiosqlite +
       StaticPool), its own NoteStore and its own FastAPI app.

Fixture Hierarchy:
    settings → database (schema created, engine disposed after)
             ├── note_store: NoteStore over that database
             ├── app: create_app(settings, database)
             └── test_client: HTTPX AsyncClient against the app
    mock_store: AsyncMock NoteStore for forcing failures
"""

import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Keep the developer's .env / environment out of the tests
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOG_DIR"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from notebox.config import Settings  # noqa: E402
from notebox.database import Database  # noqa: E402
from notebox.main import create_app  # noqa: E402
from notebox.models.note import Note  # noqa: E402
from notebox.services.note_store import NoteStore  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite://",
        log_dir="",
        log_level="WARNING",
        _env_file=None,
    )


@pytest_asyncio.fixture
async def database(settings):
    """A fresh in-memory database with the notes table created."""
    db = Database(settings)
    await db.create_schema()
    yield db
    await db.dispose()


@pytest.fixture
def note_store(database) -> NoteStore:
    return NoteStore(database.session_factory)


@pytest.fixture
def app(settings, database):
    return create_app(settings=settings, database=database)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient talking to the app in-process.

    raise_app_exceptions=False: Starlette re-raises unhandled errors after
    sending the 500 response; the tests want the response.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_note() -> Note:
    return Note(
        id="3f1c7c1e-0000-4000-8000-000000000001",
        title="Groceries",
        description="Milk, eggs, bread",
        created_at=datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def mock_store(app):
    """
    Replaces the app's NoteStore with an AsyncMock.

    Usage:
        mock_store.delete.side_effect = PersistenceError(operation="delete")
    """
    store = AsyncMock(spec=NoteStore)
    app.state.note_store = store
    return store

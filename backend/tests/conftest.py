"""Test fixtures for the TaskManager backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from taskmanager.core.config import get_settings
from taskmanager.db.session import Database
from taskmanager.integrations import ObjectStore
from taskmanager.main import app


@pytest.fixture()
def db_url(tmp_path: Path) -> str:
    """Provide a throwaway SQLite database URL for one test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest_asyncio.fixture()
async def database(db_url: str) -> AsyncIterator[Database]:
    """Open a database handle with a fresh schema and attach it to the app."""
    handle = Database(db_url)
    await handle.connect()
    await handle.create_all()
    app.state.database = handle
    try:
        yield handle
    finally:
        await handle.close()
        app.state.database = None


@pytest.fixture()
def object_store(tmp_path: Path) -> Iterator[ObjectStore]:
    store = ObjectStore(tmp_path / "uploads", url_prefix="/uploads")
    previous = app.state.object_store
    app.state.object_store = store
    yield store
    app.state.object_store = previous


@pytest.fixture()
def settings():
    """Yield the cached settings; attribute changes are reverted afterwards."""
    current = get_settings()
    snapshot = current.model_dump()
    yield current
    for field, value in snapshot.items():
        setattr(current, field, value)


@pytest_asyncio.fixture()
async def client(
    database: Database, object_store: ObjectStore
) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http

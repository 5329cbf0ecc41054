"""Database handle wrapping the async engine and session factory."""

from __future__ import annotations

import logging

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskmanager.db.base import Base

logger = logging.getLogger(__name__)


class Database:
    """Explicit connect/close lifecycle around one async engine.

    The handle is created once per process (see ``taskmanager.main``) and
    handed to request dependencies through ``app.state``.
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self._echo = echo
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not connected")
        return self._engine

    async def connect(self) -> None:
        """Create the engine and session factory if not already connected."""
        if self._engine is not None:
            return
        self._engine = create_async_engine(self.url, echo=self._echo, future=True)
        self._sessionmaker = async_sessionmaker(
            self._engine, expire_on_commit=False, class_=AsyncSession
        )
        logger.info(
            "Connected to database %s",
            make_url(self.url).render_as_string(hide_password=True),
        )

    async def create_all(self) -> None:
        """Create any missing tables for the registered models."""
        import taskmanager.models  # noqa: F401  registers mappers

        async with self.engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)

    def session(self) -> AsyncSession:
        """Return a new session; use it as an async context manager."""
        if self._sessionmaker is None:
            raise RuntimeError("Database is not connected")
        return self._sessionmaker()

    async def close(self) -> None:
        """Dispose the engine; the handle may be reconnected afterwards."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Database connection closed")

"""
NoteBox: Database Engine & Session Management
================================================

What:  Async SQLAlchemy engine, session factory and declarative Base.
Why:   Centralizes all database connection logic in one place.
How:   A Database object owns one async engine (and its connection pool) plus
       a session factory. The application factory builds one per app and
       keeps it on app.state; nothing is created at import time.
Who:   The Note Store (sessions), the health route (ping), the lifespan
       handler (connect/dispose) and Alembic (Base.metadata).

Connection Pooling Strategy:
    PostgreSQL (asyncpg):
        pool_size / max_overflow from settings, pre-ping to catch stale
        connections, recycle every hour.
    SQLite (aiosqlite):
        No pool sizing. In-memory databases use StaticPool so every session
        shares the single connection that holds the data.
"""

import logging
from typing import Any, Dict

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from notebox.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for migrations
    and Database.create_schema() uses for local setups.
    """
    pass


def _engine_options(settings: Settings) -> Dict[str, Any]:
    """Builds create_async_engine keyword arguments for the configured backend."""
    if settings.is_sqlite:
        options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if make_url(settings.database_url).database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
        return options

    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": settings.db_pool_pre_ping,
        "pool_recycle": 3600,
    }


class Database:
    """
    Owns the async engine and the session factory for one application.

    expire_on_commit=False:
        Note objects are returned to route handlers after their transaction
        commits; expiring them would trigger lazy loads on a closed session.
    """

    def __init__(self, settings: Settings):
        self.url = settings.database_url
        self.engine: AsyncEngine = create_async_engine(
            settings.database_url,
            echo=settings.log_level == "DEBUG",
            **_engine_options(settings),
        )
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def ping(self) -> bool:
        """Runs SELECT 1; returns False instead of raising when unreachable."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.warning("Database unreachable: %s", str(e))
            return False
        return True

    async def connect(self) -> bool:
        """Startup probe. Logs the outcome; the app keeps serving either way."""
        reachable = await self.ping()
        if reachable:
            logger.info("Database connected: %s", make_url(self.url).render_as_string(hide_password=True))
        else:
            logger.error("Database not reachable at startup; requests will fail until it recovers")
        return reachable

    async def create_schema(self) -> None:
        """Creates all tables registered on Base.metadata (idempotent)."""
        # Registers the models with Base.metadata
        from notebox.models import note  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Closes every pooled connection. Called on application shutdown."""
        await self.engine.dispose()

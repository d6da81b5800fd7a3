"""
Bookshelf Backend: Database Handle & Session Management
========================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI session dependency.
How:   A `Database` object owns the engine and its session factory. The
       application constructs one at startup, stores it on `app.state`, and
       disposes it at shutdown. Routes receive a per-request session through
       `get_db_session`, which commits on success and rolls back on error.
Who:   Built by the lifespan handler in main.py; used by routes via Depends().

Connection Pooling (server databases only):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs skip these options; aiosqlite connections are local files.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, AsyncIterator, Dict

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from bookshelf.config import Settings


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for migrations and
    `Database.create_all()` uses to build the schema directly.
    """
    pass


class Database:
    """
    Explicit handle on the relational store.

    Lifecycle:
        1. Created at application startup from Settings
        2. Hands out one AsyncSession per request via `session()`
        3. Disposed at shutdown, closing every pooled connection
    """

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 20,
        max_overflow: int = 10,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ):
        engine_kwargs: Dict[str, Any] = {"echo": echo}
        if not url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=pool_pre_ping,
                pool_recycle=3600,
            )

        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)

        # expire_on_commit=False: attributes stay readable after commit,
        # outside of the session's greenlet context
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.log_level == "DEBUG",
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Unit of work: yields a session, commits if the block succeeds,
        rolls back and re-raises if it fails, and always closes.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_all(self) -> None:
        """Create every table registered on Base.metadata (no-op for existing tables)."""
        # Import registers the model with Base.metadata
        from bookshelf.models.book import Book  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """Runs SELECT 1; returns False instead of raising when the store is unreachable."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception:
            return False
        return True

    async def dispose(self) -> None:
        """Close all connections in the pool."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    The session comes from the `Database` stored on `app.state` during
    startup. Exceptions raised by the route propagate into `session()`,
    which rolls back, and then reach the global exception handlers.

    Example usage in a route:
        @router.get("/books")
        async def list_books(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session

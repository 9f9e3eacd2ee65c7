"""
Blog API — Database Handle & Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   A `Database` object owns the engine for the life of the process.
       It is created by the server runner (or the app lifespan), stored on
       `app.state.database`, and handed to every request through the
       `get_db_session` dependency.
Who:   Used by route handlers via FastAPI's dependency injection system,
       by `blog_api.server` for startup/shutdown, and by the tests.

Lifecycle:
    Database(url)          → nothing opened yet (safe at import time)
    await db.connect()     → engine created, `SELECT 1` round trip
    db.session()           → one AsyncSession per request
    await db.disconnect()  → pool disposed
"""

import logging
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from blog_api.config import settings
from blog_api.exceptions import DatabaseError

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object between the models, Alembic
    autogenerate and `Database.create_schema()`.
    """
    pass


class Database:
    """
    Process-wide storage handle.

    Attributes:
        url:     SQLAlchemy connection URL this handle connects to
        engine:  The AsyncEngine, or None while disconnected
    """

    def __init__(self, url: str):
        self.url = url
        self.engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def is_connected(self) -> bool:
        return self.engine is not None

    def _engine_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
        # SQLite engines pick their own pool class; pool sizing does not apply.
        if make_url(self.url).get_backend_name() != "sqlite":
            options.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )
        return options

    async def connect(self) -> None:
        """
        Create the engine and prove the database answers.

        Raises whatever the driver raises when the database is unreachable;
        the half-built engine is disposed first.
        """
        if self.is_connected:
            return

        engine = create_async_engine(self.url, **self._engine_options())
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception:
            await engine.dispose()
            logger.error("Could not connect to database at %s", make_url(self.url).render_as_string())
            raise

        self.engine = engine
        # expire_on_commit=False: attributes stay readable after commit,
        # the create endpoint serializes the record it just inserted.
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Connected to database (%s)", engine.dialect.name)

    async def create_schema(self) -> None:
        """Create every table known to `Base.metadata` that does not exist yet."""
        from blog_api.models import blog_post  # noqa: F401  (registers the table)

        if self.engine is None:
            raise DatabaseError(message="Database is not connected")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    def session(self) -> AsyncSession:
        """Open a new session; use it as an async context manager."""
        if self._session_factory is None:
            raise DatabaseError(
                message="Database is not connected",
                context={"url": make_url(self.url).render_as_string()},
            )
        return self._session_factory()

    async def disconnect(self) -> None:
        """Close all pooled connections. A no-op when already disconnected."""
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self._session_factory = None
        logger.info("Database connection closed")


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    The session comes from the `Database` stored on `app.state`. Services
    commit their own writes; this dependency only rolls back on error and
    always closes the session.

    Example usage in a route:
        @router.get("/posts")
        async def list_posts(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise

"""
IdeaFlow Backend — Database Handle and Session Management
===========================================================

What:  The `Database` handle (async engine + session factory), the declarative
       `Base`, and the FastAPI session dependency.
How:   A `Database` is constructed once during application startup, stored on
       `app.state.db`, and disposed at shutdown. Request handlers never import
       an engine; they receive an `AsyncSession` through `get_db_session`,
       which reads the handle from the running application.
Who:   Built by the lifespan in main.py (or injected by tests via
       `create_app(database=...)`); consumed by every route through Depends().

Connection Pooling:
    PostgreSQL (asyncpg):
        pool_size / max_overflow from settings, pool_pre_ping on,
        pool_recycle=3600.
    SQLite (aiosqlite, tests and local hacking):
        pool arguments are not passed; SQLAlchemy picks its own pool.
"""

import logging
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    stop_after_attempt,
    wait_exponential_jitter,
)

from ideaflow.config import settings

logger = logging.getLogger(__name__)

# Ids, foreign keys and ratings are 32-bit INTEGER columns on PostgreSQL.
# asyncpg refuses to bind a larger Python int, so callers check first.
INTEGER_MIN = -(2**31)
INTEGER_MAX = 2**31 - 1


def fits_integer_column(value: Optional[int]) -> bool:
    """True for None or a value an INTEGER column can hold."""
    return value is None or INTEGER_MIN <= value <= INTEGER_MAX


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with the shared metadata
    used by `Database.create_all()` and by Alembic.
    """
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ships with foreign key enforcement switched off per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Explicitly constructed data-store handle.

    Lifecycle:
        db = Database(url)          # engine created, no connection opened yet
        await db.wait_until_ready() # probe with retry (startup)
        await db.create_all()       # optional schema bootstrap
        async with db.session() as s: ...
        await db.dispose()          # shutdown, closes pooled connections
    """

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None):
        self.url = url or settings.database_url
        engine_kwargs = {
            "echo": settings.log_level == "DEBUG" if echo is None else echo,
        }
        if not self.is_sqlite:
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )

        self.engine: AsyncEngine = create_async_engine(self.url, **engine_kwargs)

        if self.is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        # expire_on_commit=False: ORM objects stay readable after the
        # lifecycle services commit mid-request.
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def session(self) -> AsyncSession:
        """Returns a new session; use as `async with db.session() as session:`."""
        return self.session_factory()

    async def ping(self) -> None:
        """Runs SELECT 1; raises whatever the driver raises when unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def wait_until_ready(
        self,
        max_attempts: Optional[int] = None,
        min_wait: Optional[int] = None,
        max_wait: Optional[int] = None,
    ) -> None:
        """
        Probe the database until it answers, with exponential backoff + jitter.

        Raises the last connection error once `max_attempts` is exhausted.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max_attempts or settings.db_connect_max_attempts),
            wait=wait_exponential_jitter(
                initial=min_wait or settings.db_connect_min_wait,
                max=max_wait or settings.db_connect_max_wait,
                jitter=1,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                await self.ping()
        logger.info("Database reachable")

    async def create_all(self) -> None:
        """Creates any missing tables (CREATE TABLE IF NOT EXISTS semantics)."""
        # Models must be imported so their tables are registered on Base.metadata
        from ideaflow import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured (%d tables)", len(Base.metadata.tables))

    async def dispose(self) -> None:
        """Gracefully closes all connections in the pool."""
        await self.engine.dispose()


# ── Dependencies ──────────────────────────────────────────────────────────
def get_database(request: Request) -> Database:
    """Returns the Database handle owned by the running application."""
    return request.app.state.db


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the application's Database handle
        2. Yields it to the route handler
        3. On success: commits (a no-op when a service already committed)
        4. On error: rolls back, then re-raises for the global handlers
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/cases")
        async def list_cases(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database = get_database(request)
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

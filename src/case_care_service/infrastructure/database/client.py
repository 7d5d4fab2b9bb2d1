"""Database client for SQLite/PostgreSQL connections."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from case_care_service.config import settings
from .models import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseClient:
    """Async database client for SQLAlchemy."""

    def __init__(self, database_url: Optional[str] = None):
        """Initialize database engine and session factory."""
        self.database_url = database_url or settings.database_url

        # For SQLite, use NullPool to avoid connection issues
        # For PostgreSQL, use default pool
        is_sqlite = "sqlite" in self.database_url
        engine_kwargs = {"echo": settings.log_level == "DEBUG"}
        if is_sqlite:
            engine_kwargs["poolclass"] = NullPool

        self.engine = create_async_engine(self.database_url, **engine_kwargs)

        if is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self.async_session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        logger.info(f"Database client initialized with URL: {self.database_url}")

    async def verify_connection(self):
        """Verify database connection before creating tables."""
        async with self.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")

    async def create_tables(self):
        """Create all database tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    @asynccontextmanager
    async def session_scope(self) -> AsyncIterator[AsyncSession]:
        """Open a session that is rolled back on error and always closed."""
        async with self.async_session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get database session for dependency injection."""
        async with self.session_scope() as session:
            yield session

    async def close(self):
        """Close database engine."""
        await self.engine.dispose()
        logger.info("Database client closed")


_db_client: Optional[DatabaseClient] = None


def get_db_client() -> DatabaseClient:
    """Return the process-wide database client, creating it on first use."""
    global _db_client
    if _db_client is None:
        _db_client = DatabaseClient()
    return _db_client

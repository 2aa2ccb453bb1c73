"""Database configuration and session management"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Optional
import logging

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from crm.config import Settings

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()


def normalize_database_url(url: str) -> str:
    """Convert a plain PostgreSQL URL to the asyncpg dialect."""
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Explicitly constructed connection handle.

    Owns the engine (and with it the connection pool) and the session factory.
    One instance is built at startup and handed to the application; tests build
    their own against SQLite.
    """

    def __init__(self, url: str, echo: bool = False, **engine_kwargs):
        self.url = normalize_database_url(url)
        self.engine: AsyncEngine = create_async_engine(self.url, echo=echo, **engine_kwargs)
        if self.is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        url = normalize_database_url(settings.DATABASE_URL)
        engine_kwargs = {}

        # Add pool parameters only for non-SQLite databases
        if not url.startswith("sqlite"):
            engine_kwargs.update({
                "pool_pre_ping": True,
                "pool_size": settings.DB_POOL_SIZE,
                "max_overflow": 0,
                "pool_timeout": settings.DB_POOL_TIMEOUT,
                "pool_recycle": 3600,
                "connect_args": {
                    "timeout": settings.DB_CONNECT_TIMEOUT,
                    "server_settings": {
                        "timezone": "UTC",
                        "statement_timeout": str(settings.DB_STATEMENT_TIMEOUT_MS),
                    },
                },
            })

        return cls(url, echo=settings.DEBUG, **engine_kwargs)

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Session scoped to a unit of work: commit on success, rollback on error."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_all(self):
        """Create tables (development and tests; migrations are managed outside the app)"""
        # Import models so every table is registered on Base.metadata
        from crm import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def dispose(self):
        """Close database connections"""
        await self.engine.dispose()
        logger.info("Database connections closed")


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for FastAPI endpoints to get database session.

    Usage:
        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            result = await db.execute(select(Item))
            return result.scalars().all()
    """
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database is not configured on the application")

    async with database.session() as session:
        yield session

"""
Async engine and session management.

Provides the engine/session factory used by FastAPI dependencies, Celery
tasks and CLI commands.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tubebrief.config import get_settings

logger = logging.getLogger(__name__)

# Async engine and session factory
_async_engine: Optional[AsyncEngine] = None
_async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _get_async_engine() -> AsyncEngine:
    """Get or create async engine."""
    global _async_engine
    if _async_engine is None:
        db_config = get_settings().database
        engine_kwargs = {"pool_pre_ping": True, "echo": db_config.echo}
        if not db_config.url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=db_config.pool_size,
                max_overflow=db_config.max_overflow,
                pool_recycle=db_config.pool_recycle,
            )
        _async_engine = create_async_engine(db_config.url, **engine_kwargs)
    return _async_engine


def _get_async_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create async session factory."""
    global _async_session_factory
    if _async_session_factory is None:
        _async_session_factory = async_sessionmaker(
            bind=_get_async_engine(),
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )
    return _async_session_factory


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Async context manager for database sessions in Celery tasks or scripts.

    Usage:
        async with get_db_session() as db:
            result = await db.execute(select(Brief))
            await db.commit()

    Yields:
        AsyncSession: SQLAlchemy async database session
    """
    factory = _get_async_session_factory()
    session = factory()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_db() -> None:
    """Create all tables that do not exist yet."""
    # Import models so their tables are registered on the metadata
    from tubebrief.database.base import Base
    import tubebrief.models  # noqa: F401

    async with _get_async_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def close_db() -> None:
    """Dispose of the engine and its connection pool."""
    global _async_engine, _async_session_factory
    if _async_engine is not None:
        await _async_engine.dispose()
        _async_engine = None
        _async_session_factory = None


async def check_db_connection() -> bool:
    """Check if the database connection is healthy."""
    try:
        async with _get_async_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return False


def get_db_info() -> dict:
    """Get database connection information with credentials hidden."""
    return {
        "status": "configured" if _async_engine is not None else "idle",
        "url": _sanitize_database_url(get_settings().database.url),
    }


def _sanitize_database_url(url: str) -> str:
    """Hide password in a database URL for safe logging."""
    if "@" not in url or "://" not in url:
        return url

    protocol, rest = url.split("://", 1)
    credentials, host = rest.rsplit("@", 1)
    if ":" in credentials:
        username = credentials.split(":", 1)[0]
        return f"{protocol}://{username}:***@{host}"
    return url

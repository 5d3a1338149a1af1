# backend/app/db/session.py
"""
Async database session management for SQLAlchemy.

Production considerations:
- Uses asyncpg for PostgreSQL
- Uses aiosqlite for SQLite (local development and tests)
- Pool settings differ for SQLite (no pooling) vs PostgreSQL

Every store write goes through run_in_transaction(), which commits on
success and rolls back on any error or on timeout.
"""
import asyncio
import logging
from typing import AsyncGenerator, Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, AsyncAdaptedQueuePool

from backend.app.core.config import Settings, settings
from backend.app.core.errors import (
    CatalogServiceError,
    TransactionError,
    TransactionTimeoutError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def create_engine_for(config: Settings) -> AsyncEngine:
    """
    Create and configure the async SQLAlchemy engine.

    SQLite (local development):
    - NullPool, a fresh connection per session
    - check_same_thread=False for async compatibility

    PostgreSQL (production):
    - pool_size=5 / max_overflow=10
    - pool_pre_ping=True to drop stale connections
    - pool_recycle=300
    """
    if config.is_sqlite:
        return create_async_engine(
            config.DATABASE_URL,
            echo=config.DATABASE_ECHO,
            poolclass=NullPool,
            connect_args={"check_same_thread": False},
        )

    return create_async_engine(
        config.DATABASE_URL,
        echo=config.DATABASE_ECHO,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=300,
    )


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: attributes stay readable after commit
    # autoflush=False: explicit flush control
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Global async engine instance
# Created once at module load, reused across all requests
# ─────────────────────────────────────────────────────────────────────────────
engine: AsyncEngine = create_engine_for(settings)

AsyncSessionLocal: async_sessionmaker[AsyncSession] = create_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency generator for database sessions.

    One session per request, closed after the request completes.
    This does NOT auto-commit; stores commit through run_in_transaction().
    """
    async with AsyncSessionLocal() as session:
        yield session


async def run_in_transaction(
    db: AsyncSession,
    operation: Callable[[], Awaitable[T]],
    timeout: Optional[float] = None,
    name: str = "transaction",
) -> T:
    """
    Run ``operation`` and commit, all within ``timeout`` seconds.

    Any failure rolls the whole session back:
    - domain errors (CatalogServiceError) are re-raised unchanged
    - SQLAlchemy errors become TransactionError
    - timeout becomes TransactionTimeoutError (retryable)
    """

    async def _body() -> T:
        result = await operation()
        await db.commit()
        return result

    try:
        if timeout is None:
            return await _body()
        return await asyncio.wait_for(_body(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        await db.rollback()
        logger.warning("%s timed out after %.1fs, rolled back", name, timeout)
        raise TransactionTimeoutError(f"{name} timed out") from exc
    except CatalogServiceError:
        await db.rollback()
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.warning("%s failed, rolled back: %s", name, exc)
        raise TransactionError(f"{name} failed") from exc

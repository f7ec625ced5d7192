"""
Database engine and session management (SQLAlchemy 2.0 async).

A request gets one session and one transaction: workflow writes and their
audit events commit together or not at all.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from src.config import get_settings
from src.kernel.errors import StorageError
from src.logging_config import get_logger

settings = get_settings()
logger = get_logger(__name__)


def _sqlite_pragmas(dbapi_conn, connection_record):
    # WAL lets readers proceed while a transition holds the write lock
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def make_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an engine suited to the database backend."""
    if database_url.startswith("sqlite"):
        # One connection per session so conditional updates from concurrent
        # requests contend on the database lock, not on a shared handle
        sqlite_engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )
        event.listen(sqlite_engine.sync_engine, "connect", _sqlite_pragmas)
        return sqlite_engine

    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


engine = make_engine(settings.database_url, echo=settings.debug)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def session_scope(
    factory: Optional[async_sessionmaker] = None,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Unit of work: commit on success, roll back on error.

    A failing commit is rolled back and raised as StorageError so callers
    see the same error as a failed query.
    """
    async with (factory or async_session_maker)() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        try:
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            raise StorageError("Failed to commit transaction") from exc


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one transactional session per request."""
    async with session_scope() as session:
        yield session


async def init_db() -> None:
    """Create tables for all registered models."""
    from src.kernel.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ping_db() -> bool:
    """True if the database answers a trivial query."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("Database ping failed", exc_info=True)
        return False
    return True


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()

"""Database engine and session factories.

Two session styles are exposed:
- ``get_db_session``: FastAPI dependency, one transaction per request
- ``get_async_session``: context manager for workers and scripts that
  commit on their own schedule (the validation run commits per event)
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from loguru import logger
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from src.core.config import settings
from src.core.infrastructure.health import DatabaseHealthResult, HealthStatus

async_engine = create_async_engine(
    settings.SQLALCHEMY_DATABASE_URI,
    echo=settings.DB_ECHO,
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
)


def _new_session() -> AsyncSession:
    return AsyncSession(async_engine, expire_on_commit=False, autoflush=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; commits when the request handler returns."""
    async with _new_session() as session:
        async with session.begin():
            yield session


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Session whose transactions are managed by the caller.

    Usage:
        async with get_async_session() as session:
            ...
            await session.commit()

    Anything left uncommitted when the block raises is rolled back.
    """
    session = _new_session()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_db() -> None:
    """Verify the database is reachable."""
    try:
        async with async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection established successfully")
    except Exception as e:
        logger.error(f"Failed to connect to database: {e}")
        raise


async def check_db_health() -> DatabaseHealthResult:
    try:
        async with async_engine.connect() as conn:
            version = (await conn.execute(text("SELECT version()"))).scalar()
            has_events = (
                await conn.execute(text("SELECT to_regclass('public.events')"))
            ).scalar() is not None
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return DatabaseHealthResult(
            status=HealthStatus.ERROR,
            connected=False,
            error=str(e),
        )

    return DatabaseHealthResult(
        status=HealthStatus.OK if has_events else HealthStatus.DEGRADED,
        connected=True,
        version=version.split(",")[0] if version else "unknown",
        schema_ready=has_events,
    )

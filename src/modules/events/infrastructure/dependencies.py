"""Event module infrastructure dependencies."""

from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.infrastructure.database.session import get_async_session, get_db_session
from src.core.infrastructure.redis import get_redis_client
from src.core.infrastructure.redis.client import RedisClient
from src.modules.events.infrastructure.link_checker import HttpLinkChecker
from src.modules.events.infrastructure.mappers import EventMapper, UrlTombstoneMapper
from src.modules.events.infrastructure.repositories import (
    PostgreSQLEventRepository,
    PostgreSQLTombstoneRepository,
)
from src.modules.events.infrastructure.validation_lock import RedisValidationLock


def get_event_mapper() -> EventMapper:
    return EventMapper()


def get_tombstone_mapper() -> UrlTombstoneMapper:
    return UrlTombstoneMapper()


async def get_event_repository(
    session: AsyncSession = Depends(get_db_session),
    mapper: EventMapper = Depends(get_event_mapper),
) -> PostgreSQLEventRepository:
    return PostgreSQLEventRepository(session, mapper)


async def get_tombstone_repository(
    session: AsyncSession = Depends(get_db_session),
    mapper: UrlTombstoneMapper = Depends(get_tombstone_mapper),
) -> PostgreSQLTombstoneRepository:
    return PostgreSQLTombstoneRepository(session, mapper)


async def get_validation_session() -> AsyncGenerator[AsyncSession, None]:
    """Session committed per event by the validation service."""
    async with get_async_session() as session:
        yield session


async def get_validation_event_repository(
    session: AsyncSession = Depends(get_validation_session),
    mapper: EventMapper = Depends(get_event_mapper),
) -> PostgreSQLEventRepository:
    return PostgreSQLEventRepository(session, mapper)


async def get_validation_tombstone_repository(
    session: AsyncSession = Depends(get_validation_session),
    mapper: UrlTombstoneMapper = Depends(get_tombstone_mapper),
) -> PostgreSQLTombstoneRepository:
    return PostgreSQLTombstoneRepository(session, mapper)


async def get_validation_transaction(
    session: AsyncSession = Depends(get_validation_session),
) -> AsyncSession:
    return session


def get_link_checker() -> HttpLinkChecker:
    return HttpLinkChecker()


def get_validation_lock(
    redis_client: RedisClient = Depends(get_redis_client),
) -> RedisValidationLock:
    return RedisValidationLock(redis_client)

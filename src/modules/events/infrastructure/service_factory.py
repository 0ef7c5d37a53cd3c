"""Wiring of the validation service outside FastAPI (Celery, scripts)."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.infrastructure.redis import RedisClient
from src.modules.events.application.validation_service import EventValidationService
from src.modules.events.infrastructure.link_checker import HttpLinkChecker
from src.modules.events.infrastructure.mappers import EventMapper, UrlTombstoneMapper
from src.modules.events.infrastructure.repositories import (
    PostgreSQLEventRepository,
    PostgreSQLTombstoneRepository,
)
from src.modules.events.infrastructure.validation_lock import RedisValidationLock


def build_validation_service(
    session: AsyncSession,
    redis_client: RedisClient | None = None,
) -> EventValidationService:
    """Validation service committing on `session`, locking through Redis if given."""
    return EventValidationService(
        event_repository=PostgreSQLEventRepository(session, EventMapper()),
        tombstone_repository=PostgreSQLTombstoneRepository(
            session, UrlTombstoneMapper()
        ),
        link_checker=HttpLinkChecker(),
        validation_lock=RedisValidationLock(redis_client) if redis_client else None,
        transaction=session,
    )

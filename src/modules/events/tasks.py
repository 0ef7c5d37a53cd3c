"""Event link validation Celery tasks.

- run_validation_batch: periodic batch, scheduled by Celery Beat
- validate_event: on-demand validation of one event
"""

from celery import shared_task
from loguru import logger

from src.core.config import settings
from src.core.infrastructure.celery.queues import Queues
from src.core.infrastructure.logging import get_business_logger


@shared_task(
    name="src.modules.events.tasks.run_validation_batch",
    bind=True,
    max_retries=0,  # the next beat tick picks up where this one stopped
    queue=Queues.VALIDATE,
    soft_time_limit=settings.validation_batch_time_limit_sec,
    time_limit=settings.validation_batch_time_limit_sec + 300,
)
def run_validation_batch(_self: object, limit: int | None = None) -> dict[str, int]:
    """Validate the least recently checked events.

    Args:
        limit: Batch size, defaults to VALIDATION_BATCH_SIZE
    """
    import asyncio

    return asyncio.run(_run_validation_batch_async(limit or settings.VALIDATION_BATCH_SIZE))


async def _run_validation_batch_async(limit: int) -> dict[str, int]:
    from src.core.infrastructure.database.session import get_async_session
    from src.core.infrastructure.redis import RedisClient
    from src.modules.events.infrastructure.service_factory import (
        build_validation_service,
    )

    business_log = get_business_logger()
    business_log.info("validation_batch_started", limit=limit)

    redis_client = RedisClient()
    try:
        async with get_async_session() as session:
            service = build_validation_service(session, redis_client)
            result = await service.run_validation_batch(limit)
    finally:
        await redis_client.close()

    return {
        "processed": result.processed,
        "validated": result.validated,
        "publishable": result.publishable,
        "errors": result.errors,
    }


@shared_task(
    name="src.modules.events.tasks.validate_event",
    bind=True,
    max_retries=0,
    queue=Queues.VALIDATE,
)
def validate_event(_self: object, event_id: str) -> dict[str, object]:
    """Validate a single event by id.

    Args:
        event_id: Event to validate
    """
    import asyncio

    return asyncio.run(_validate_event_async(event_id))


async def _validate_event_async(event_id: str) -> dict[str, object]:
    from src.core.infrastructure.database.session import get_async_session
    from src.core.infrastructure.redis import RedisClient
    from src.modules.events.infrastructure.service_factory import (
        build_validation_service,
    )

    redis_client = RedisClient()
    try:
        async with get_async_session() as session:
            service = build_validation_service(session, redis_client)
            result = await service.validate_event_by_id(event_id)
    finally:
        await redis_client.close()

    if not result.success:
        logger.warning(f"Validation of event {event_id} failed: {result.error}")

    return {
        "event_id": event_id,
        "success": result.success,
        "score": result.score,
        "publishable": result.publishable,
        "error": result.error,
    }

"""Redis-backed validation lock."""

from loguru import logger
from redis.exceptions import RedisError

from src.core.config import settings
from src.core.infrastructure.logging import BusinessEvents
from src.core.infrastructure.redis import RedisClient, RedisUnavailableError


class RedisValidationLock:
    """SET NX EX lock per event.

    When Redis is unreachable the lock degrades to "always acquired" and the
    validation proceeds, like the ingest lock it is modelled on.
    """

    def __init__(self, redis_client: RedisClient, ttl: int | None = None):
        self.redis_client = redis_client
        self.ttl = ttl or settings.VALIDATION_LOCK_TTL_SEC
        self._degraded: set[str] = set()

    async def acquire(self, event_id: str) -> bool:
        try:
            async with self.redis_client.ensure_available(
                timeout=settings.REDIS_CLIENT_TIMEOUT_SEC,
            ):
                return await self.redis_client.acquire_validation_lock(
                    event_id, ttl=self.ttl
                )
        except (RedisUnavailableError, RedisError) as e:
            logger.warning(f"Failed to acquire validation lock for event {event_id}: {e}")
            BusinessEvents.feature_degraded(
                feature="validation_lock",
                reason=str(e),
                event_id=event_id,
            )
            self._degraded.add(event_id)
            return True

    async def release(self, event_id: str) -> None:
        if event_id in self._degraded:
            self._degraded.discard(event_id)
            return
        try:
            await self.redis_client.release_validation_lock(event_id)
        except RedisError as e:
            logger.warning(f"Failed to release validation lock for event {event_id}: {e}")

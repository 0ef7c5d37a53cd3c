"""Redis client wrapper."""

from src.core.infrastructure.redis.client import (
    RedisClient,
    RedisUnavailableError,
    get_redis_client,
    redis_client,
)
from src.core.infrastructure.redis.keys import RedisKeys

__all__ = [
    "RedisClient",
    "RedisKeys",
    "RedisUnavailableError",
    "get_redis_client",
    "redis_client",
]

"""Redis key naming.

Redis is used for:
- Validation locks: at most one in-flight validation per event
"""


class RedisKeys:
    """Redis key namespaces."""

    # lock:{resource}
    LOCK_PREFIX = "lock"

    @classmethod
    def lock(cls, resource: str) -> str:
        return f"{cls.LOCK_PREFIX}:{resource}"

    @classmethod
    def validation_lock(cls, event_id: str) -> str:
        """Lock key guarding the validation of a single event.

        Args:
            event_id: Event id

        Returns:
            Formatted Redis key
        """
        return cls.lock(f"validate_event:{event_id}")

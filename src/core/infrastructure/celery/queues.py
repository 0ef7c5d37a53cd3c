"""Celery queue definitions.

- q_validate: event link validation (scheduled batches and on-demand checks)
"""

from enum import StrEnum


class Queues(StrEnum):
    """Celery queue enum."""

    VALIDATE = "q_validate"

    @classmethod
    def all_queues(cls) -> list[str]:
        return [q.value for q in cls]


# Task name pattern -> queue
TASK_ROUTES = {
    "src.modules.events.tasks.*": {"queue": Queues.VALIDATE},
}

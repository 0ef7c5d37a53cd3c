"""Celery application.

- JSON serialization
- one queue per concern
- periodic link validation through Celery Beat
"""

from celery import Celery
from kombu import Exchange, Queue

from src.core.config import settings
from src.core.infrastructure.celery.queues import TASK_ROUTES, Queues

celery_app = Celery("eventlinkhealth")

celery_app.conf.update(
    broker_url=settings.celery_broker_url,
    result_backend=settings.celery_result_backend,
    task_serializer=settings.CELERY_TASK_SERIALIZER,
    result_serializer=settings.CELERY_RESULT_SERIALIZER,
    accept_content=settings.CELERY_ACCEPT_CONTENT,
    timezone=settings.TIMEZONE,
    enable_utc=True,
    task_track_started=True,
    task_time_limit=600,
    task_soft_time_limit=540,
    task_default_retry_delay=settings.CELERY_TASK_DEFAULT_RETRY_DELAY,
    task_max_retries=settings.CELERY_TASK_MAX_RETRIES,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    result_expires=3600,
    worker_prefetch_multiplier=1,
    worker_concurrency=1,
)

default_exchange = Exchange("default", type="direct")
celery_app.conf.task_queues = (
    Queue(Queues.VALIDATE, default_exchange, routing_key=Queues.VALIDATE),
)

celery_app.conf.task_routes = TASK_ROUTES
celery_app.conf.task_default_queue = Queues.VALIDATE

celery_app.conf.beat_schedule = {
    "validate-event-links": {
        "task": "src.modules.events.tasks.run_validation_batch",
        "schedule": float(settings.VALIDATION_BATCH_INTERVAL_SEC),
        "options": {"queue": Queues.VALIDATE},
        "args": (settings.VALIDATION_BATCH_SIZE,),
    },
}

celery_app.autodiscover_tasks(["src.modules.events"], related_name="tasks")

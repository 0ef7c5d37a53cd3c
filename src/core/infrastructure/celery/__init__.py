"""Celery application and queues."""

from src.core.infrastructure.celery.app import celery_app
from src.core.infrastructure.celery.queues import Queues

__all__ = ["celery_app", "Queues"]

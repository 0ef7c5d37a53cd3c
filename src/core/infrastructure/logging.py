"""Logging configuration.

Two loggers are in use:
1. loguru: diagnostic logs for developers
2. structlog: structured business events (validation outcomes, tombstones)
"""

import sys
from typing import Any

import structlog
from loguru import logger

from src.core.config import settings


def setup_logging() -> None:
    """Configure structlog and loguru."""
    _configure_structlog()
    _configure_loguru()

    logger.info(f"Logging configured with level: {settings.LOG_LEVEL}")


def _configure_structlog() -> None:
    if settings.ENVIRONMENT == "local":
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            _get_log_level_number(settings.LOG_LEVEL)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _configure_loguru() -> None:
    logger.remove()

    logger.add(
        sys.stderr,
        level=settings.LOG_LEVEL,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if settings.ENVIRONMENT != "local":
        logger.add(
            "logs/eventlinkhealth_{time:YYYY-MM-DD}.log",
            rotation="00:00",
            retention="30 days",
            level="INFO",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        )


def _get_log_level_number(level: str) -> int:
    levels = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    return levels.get(level.upper(), 20)


# ============================================================================
# Business event logger
# ============================================================================


def get_business_logger() -> structlog.BoundLogger:
    """Structured logger for business events.

    Usage:
        log = get_business_logger()
        log.info("validation_scheduled", batch_size=100)
    """
    return structlog.get_logger("business")


class BusinessEvents:
    """Helpers that keep business event names and fields consistent."""

    _log = structlog.get_logger("business.events")

    @classmethod
    def event_link_validated(
        cls,
        event_id: str,
        url: str,
        status: int,
        score: int,
        publishable: bool,
        **extra: Any,
    ) -> None:
        cls._log.info(
            "event_link_validated",
            event_type="validation",
            event_id=event_id,
            url=url,
            status=status,
            score=score,
            publishable=publishable,
            **extra,
        )

    @classmethod
    def event_link_healed(
        cls,
        event_id: str,
        original_url: str,
        healed_url: str,
        old_score: int,
        new_score: int,
        **extra: Any,
    ) -> None:
        cls._log.info(
            "event_link_healed",
            event_type="healing",
            event_id=event_id,
            original_url=original_url,
            healed_url=healed_url,
            old_score=old_score,
            new_score=new_score,
            **extra,
        )

    @classmethod
    def event_link_tombstoned(
        cls,
        event_id: str,
        domain: str,
        path: str,
        reason: str,
        **extra: Any,
    ) -> None:
        cls._log.warning(
            "event_link_tombstoned",
            event_type="tombstone",
            event_id=event_id,
            domain=domain,
            path=path,
            reason=reason,
            **extra,
        )

    @classmethod
    def validation_batch_completed(
        cls,
        processed: int,
        validated: int,
        publishable: int,
        errors: int,
        **extra: Any,
    ) -> None:
        level = "info" if errors == 0 else "warning"
        getattr(cls._log, level)(
            "validation_batch_completed",
            event_type="validation_batch",
            processed=processed,
            validated=validated,
            publishable=publishable,
            errors=errors,
            **extra,
        )

    @classmethod
    def feature_degraded(
        cls,
        feature: str,
        reason: str,
        **extra: Any,
    ) -> None:
        cls._log.warning(
            "feature_degraded",
            event_type="degradation",
            feature=feature,
            reason=reason,
            **extra,
        )

"""Application configuration."""

import math
from typing import Annotated, Any, Literal, Self

from pydantic import (
    AnyUrl,
    BeforeValidator,
    HttpUrl,
    computed_field,
    model_validator,
)
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


LINK_CHECK_REQUESTS_PER_EVENT = 4


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "EventLinkHealth"
    SERVER_PORT: int = 8000
    ROOTPATH: str = ""
    API_V1_STR: str = "/api/v1"
    FRONTEND_HOST: str = "http://localhost:3000"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "UTC"

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []
    CORS_ALLOW_METHODS: list[str] = ["GET", "POST", "DELETE"]
    CORS_ALLOW_HEADERS: list[str] = ["*"]

    @computed_field
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS] + [
            self.FRONTEND_HOST
        ]

    # Sentry
    SENTRY_DSN: HttpUrl | None = None

    # PostgreSQL
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "eventlinkhealth"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False

    @computed_field
    @property
    def database_url_object(self) -> MultiHostUrl:
        return MultiHostUrl.build(
            scheme="postgresql+psycopg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_SERVER,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        )

    @computed_field
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        return str(self.database_url_object)

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_CLIENT_TIMEOUT_SEC: float = 5.0

    # Link checker
    LINK_CHECK_TIMEOUT_SEC: float = 8.0
    LINK_CHECK_USER_AGENT: str = (
        "EventLinkHealth/1.0 (+https://taxproexchange.com)"
    )

    # Validation
    VALIDATION_SCORE_MIN: int = 50  # publishable threshold
    VALIDATION_RECHECK_HOURS: int = 24
    VALIDATION_POLITENESS_DELAY_SEC: float = 0.5
    VALIDATION_BATCH_SIZE: int = 100
    VALIDATION_BATCH_INTERVAL_SEC: int = 3600
    VALIDATION_LOCK_TTL_SEC: int = 120
    VALIDATION_RECENT_LIMIT: int = 10
    TOMBSTONE_TTL_DAYS: int | None = None  # None: tombstones never expire

    # Celery Settings
    CELERY_BROKER_URL: str | None = None  # defaults to REDIS_URL
    CELERY_RESULT_BACKEND: str | None = None  # defaults to REDIS_URL
    CELERY_TASK_SERIALIZER: str = "json"
    CELERY_RESULT_SERIALIZER: str = "json"
    CELERY_ACCEPT_CONTENT: list[str] = ["json"]
    CELERY_TASK_DEFAULT_RETRY_DELAY: int = 60
    CELERY_TASK_MAX_RETRIES: int = 3

    @computed_field
    @property
    def celery_broker_url(self) -> str:
        return self.CELERY_BROKER_URL or self.REDIS_URL

    @computed_field
    @property
    def celery_result_backend(self) -> str:
        return self.CELERY_RESULT_BACKEND or self.REDIS_URL

    @computed_field
    @property
    def validation_batch_time_limit_sec(self) -> int:
        """Soft time limit for one batch task.

        Worst case per event: two requests for the URL (HEAD plus GET) and
        two more for its healed form, each bounded by LINK_CHECK_TIMEOUT_SEC,
        followed by the politeness delay.
        """
        per_event = (
            LINK_CHECK_REQUESTS_PER_EVENT * self.LINK_CHECK_TIMEOUT_SEC
            + self.VALIDATION_POLITENESS_DELAY_SEC
        )
        return math.ceil(self.VALIDATION_BATCH_SIZE * per_event)

    @model_validator(mode="after")
    def _check_validation_thresholds(self) -> Self:
        if not 0 <= self.VALIDATION_SCORE_MIN <= 100:
            raise ValueError("VALIDATION_SCORE_MIN must be between 0 and 100")
        if self.TOMBSTONE_TTL_DAYS is not None and self.TOMBSTONE_TTL_DAYS <= 0:
            raise ValueError("TOMBSTONE_TTL_DAYS must be positive when set")
        return self


settings = Settings()

"""
pytest configuration and shared fixtures.

Test layout:
- unit/: unit tests (no external services)

Usage:
    # Run all tests
    uv run pytest

    # Unit tests only
    uv run pytest tests/unit/

    # With coverage
    uv run pytest --cov=src --cov-report=html
"""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import Settings

# ============================================
# Configuration fixtures
# ============================================


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def test_settings() -> Settings:
    """Test configuration."""
    return Settings(
        ENVIRONMENT="local",
        POSTGRES_SERVER="localhost",
        POSTGRES_PORT=5432,
        POSTGRES_USER="postgres",
        POSTGRES_PASSWORD="postgres",
        POSTGRES_DB="eventlinkhealth_test",
        REDIS_URL="redis://localhost:6379/1",  # DB 1 isolates tests
    )


# ============================================
# Database fixtures
# ============================================


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """Mock database session (pure unit tests)."""
    session = AsyncMock(spec=AsyncSession)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    return session


# ============================================
# Redis fixtures
# ============================================


@pytest.fixture
def mock_redis_client() -> MagicMock:
    """Mock Redis client."""
    from src.core.infrastructure.redis.client import RedisClient

    client = MagicMock(spec=RedisClient)
    client.ping = AsyncMock(return_value=True)
    client.acquire_validation_lock = AsyncMock(return_value=True)
    client.release_validation_lock = AsyncMock(return_value=True)
    client.health_check = AsyncMock(return_value={"status": "ok", "connected": True})
    return client


# ============================================
# HTTP client fixtures
# ============================================


@pytest.fixture
async def async_client(
    test_settings, mock_db_session, mock_redis_client
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for API tests."""
    _ = test_settings
    from main import app
    from src.core.infrastructure.database.session import get_db_session
    from src.core.infrastructure.redis import get_redis_client

    saved_overrides = dict(app.dependency_overrides)
    app.dependency_overrides[get_db_session] = lambda: mock_db_session
    app.dependency_overrides[get_redis_client] = lambda: mock_redis_client

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    # Restore the application -> infrastructure overrides
    app.dependency_overrides.clear()
    app.dependency_overrides.update(saved_overrides)


# ============================================
# Domain object fixtures
# ============================================


@pytest.fixture
def sample_event_data() -> dict[str, Any]:
    """Sample event data."""
    return {
        "id": "event-123",
        "title": "Annual Tax Conference 2025",
        "organizer": "National Tax Association",
        "candidate_url": "https://example.com/events/annual-tax-conference",
        "canonical_url": None,
        "last_checked_at": None,
    }


@pytest.fixture
def stale_check_time() -> datetime:
    """A last_checked_at old enough for the batch to recheck."""
    return datetime.now(UTC) - timedelta(hours=25)


@pytest.fixture
def fresh_check_time() -> datetime:
    """A last_checked_at recent enough for the batch to skip."""
    return datetime.now(UTC) - timedelta(hours=1)


# ============================================
# Helpers
# ============================================


def _html_page(
    title: str | None = None,
    canonical: str | None = None,
    filler: int = 0,
    body: str = "",
) -> str:
    """Build an HTML document with an optional title, canonical link and padding."""
    head = ""
    if title is not None:
        head += f"<title>{title}</title>"
    if canonical is not None:
        head += f'<link rel="canonical" href="{canonical}">'
    return f"<html><head>{head}</head><body>{body}{'x' * filler}</body></html>"


@pytest.fixture
def html_page() -> Callable[..., str]:
    """Factory for small HTML documents."""
    return _html_page

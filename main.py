"""EventLinkHealth backend - event link validation service entry point."""

import sentry_sdk
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.concurrency import asynccontextmanager
from fastapi.routing import APIRoute
from loguru import logger
from starlette.middleware.cors import CORSMiddleware

from src.core.config import settings
from src.core.domain.exceptions import DomainException
from src.core.infrastructure.database.session import check_db_health, init_db
from src.core.infrastructure.logging import setup_logging
from src.core.infrastructure.redis import redis_client
from src.core.interfaces.http.exceptions import (
    BizException,
    biz_exception_handler,
    domain_exception_handler,
    global_exception_handler,
    request_validation_handler,
)
from src.core.interfaces.http.routers import api_router
from src.modules.events.application import dependencies as events_app_deps
from src.modules.events.infrastructure import dependencies as events_infra_deps


def custom_generate_unique_id(route: APIRoute) -> str:
    """Generate unique operation IDs for OpenAPI."""
    if route.tags:
        return f"{route.tags[0]}-{route.name}"
    return route.name


# Initialize Sentry if configured
if settings.SENTRY_DSN and settings.ENVIRONMENT != "local":
    sentry_sdk.init(
        dsn=str(settings.SENTRY_DSN),
        enable_tracing=True,
        environment=settings.ENVIRONMENT,
    )


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Application lifespan manager."""
    setup_logging()
    logger.info("Starting EventLinkHealth backend...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    logger.info("Initializing database connection...")
    await init_db()

    yield

    await redis_client.close()
    logger.info("Shutting down EventLinkHealth backend...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description=(
        "Event link health validation: fetches event URLs, scores them, "
        "heals and tombstones dead links, and gates publishing."
    ),
    version="0.1.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc",
    root_path=settings.ROOTPATH,
    generate_unique_id_function=custom_generate_unique_id,
    lifespan=lifespan,
)

# Dependency overrides (application -> infrastructure)
app.dependency_overrides[events_app_deps.get_event_repository] = (
    events_infra_deps.get_event_repository
)
app.dependency_overrides[events_app_deps.get_tombstone_repository] = (
    events_infra_deps.get_tombstone_repository
)
app.dependency_overrides[events_app_deps.get_validation_event_repository] = (
    events_infra_deps.get_validation_event_repository
)
app.dependency_overrides[events_app_deps.get_validation_tombstone_repository] = (
    events_infra_deps.get_validation_tombstone_repository
)
app.dependency_overrides[events_app_deps.get_validation_transaction] = (
    events_infra_deps.get_validation_transaction
)
app.dependency_overrides[events_app_deps.get_link_checker] = (
    events_infra_deps.get_link_checker
)
app.dependency_overrides[events_app_deps.get_validation_lock] = (
    events_infra_deps.get_validation_lock
)

# Exception handlers
app.add_exception_handler(BizException, biz_exception_handler)
app.add_exception_handler(DomainException, domain_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, global_exception_handler)

# CORS middleware
if settings.all_cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.all_cors_origins,
        allow_credentials=True,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )

# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint.

    - healthy: database and Redis reachable
    - degraded: database reachable, Redis not (locks are skipped)
    - unhealthy: database unreachable or schema not migrated
    """
    db_health_result = await check_db_health()
    redis_health_result = await redis_client.health_check()

    db_ok = db_health_result.status.value == "ok"
    redis_ok = redis_health_result.status.value == "ok"

    if db_ok and redis_ok:
        overall_status = "healthy"
    elif db_ok:
        overall_status = "degraded"
    else:
        overall_status = "unhealthy"

    return {
        "status": overall_status,
        "environment": settings.ENVIRONMENT,
        "version": "0.1.0",
        "components": {
            "database": db_health_result.to_dict(),
            "redis": redis_health_result.to_dict(),
        },
    }


@app.get("/", tags=["root"])
async def root():
    """Root endpoint."""
    return {
        "message": "Welcome to EventLinkHealth API",
        "docs": f"{settings.API_V1_STR}/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.SERVER_PORT,
        reload=settings.ENVIRONMENT == "local",
    )

"""Event link-health API routes."""

from fastapi import APIRouter, Depends, Query, status

from src.core.config import settings
from src.core.interfaces.http.exceptions import BizException
from src.core.interfaces.http.response import ApiResponse
from src.modules.events.application.dependencies import (
    get_event_validation_service,
    get_link_health_query_service,
    get_tombstone_service,
)
from src.modules.events.application.query_service import LinkHealthQueryService
from src.modules.events.application.tombstone_service import TombstoneService
from src.modules.events.application.validation_service import EventValidationService
from src.modules.events.interfaces.schemas import (
    EventLinkHealthResponse,
    LinkHealthStatsResponse,
    RecentEventResponse,
    RecentSummaryResponse,
    RecentValidationsResponse,
    RecheckBatchResponse,
    RecheckEventResponse,
    TombstoneResurrectResponse,
)

router = APIRouter(prefix="/events", tags=["events"])

DEFAULT_RECHECK_BATCH_SIZE = 50


@router.post(
    "/recheck",
    response_model=ApiResponse[RecheckEventResponse | RecheckBatchResponse],
    summary="Recheck event links",
    description="Validate one event (id) or a batch of the least recently checked events",
)
async def recheck_events(
    id: str | None = Query(None, description="Event ID to validate"),
    batch_size: int = Query(
        DEFAULT_RECHECK_BATCH_SIZE, ge=1, le=500, description="Batch size"
    ),
    service: EventValidationService = Depends(get_event_validation_service),
) -> ApiResponse[RecheckEventResponse | RecheckBatchResponse]:
    if id:
        result = await service.validate_event_by_id(id)
        if not result.success:
            raise BizException(
                message=result.error or "Validation failed",
                code=status.HTTP_400_BAD_REQUEST,
                error_code="VALIDATION_FAILED",
            )
        return ApiResponse.success(
            data=RecheckEventResponse(
                event_id=id,
                score=result.score or 0,
                publishable=bool(result.publishable),
                message=f"Event validated successfully with score {result.score}",
            )
        )

    batch = await service.run_validation_batch(batch_size)
    message = (
        f"Validation complete: {batch.validated} validated, "
        f"{batch.publishable} publishable"
    )
    return ApiResponse.success(
        data=RecheckBatchResponse(
            processed=batch.processed,
            validated=batch.validated,
            publishable=batch.publishable,
            errors=batch.errors,
            message=message,
        ),
        message=message,
    )


@router.get(
    "/link-health/stats",
    response_model=ApiResponse[LinkHealthStatsResponse],
    summary="Link health statistics",
)
async def get_link_health_stats(
    service: LinkHealthQueryService = Depends(get_link_health_query_service),
) -> ApiResponse[LinkHealthStatsResponse]:
    stats = await service.get_stats()
    return ApiResponse.success(data=LinkHealthStatsResponse(**stats.model_dump()))


@router.get(
    "/link-health/recent",
    response_model=ApiResponse[RecentValidationsResponse],
    summary="Recently created events with their link health",
)
async def get_recent_validations(
    limit: int = Query(
        settings.VALIDATION_RECENT_LIMIT, ge=1, le=100, description="Number of events"
    ),
    service: LinkHealthQueryService = Depends(get_link_health_query_service),
) -> ApiResponse[RecentValidationsResponse]:
    recent = await service.get_recent(limit)
    return ApiResponse.success(
        data=RecentValidationsResponse(
            events=[RecentEventResponse(**e.model_dump()) for e in recent.events],
            summary=RecentSummaryResponse(**recent.summary.model_dump()),
        )
    )


@router.get(
    "/{event_id}/link-health",
    response_model=ApiResponse[EventLinkHealthResponse],
    summary="Link health of one event",
)
async def get_event_link_health(
    event_id: str,
    service: LinkHealthQueryService = Depends(get_link_health_query_service),
) -> ApiResponse[EventLinkHealthResponse]:
    event_status = await service.get_event_status(event_id)
    return ApiResponse.success(
        data=EventLinkHealthResponse(**event_status.model_dump())
    )


@router.delete(
    "/tombstones",
    response_model=ApiResponse[TombstoneResurrectResponse],
    summary="Resurrect a tombstoned URL",
)
async def resurrect_tombstone(
    url: str = Query(..., min_length=1, description="URL to resurrect"),
    service: TombstoneService = Depends(get_tombstone_service),
) -> ApiResponse[TombstoneResurrectResponse]:
    removed = await service.resurrect(url)
    return ApiResponse.success(
        data=TombstoneResurrectResponse(url=url, removed=removed),
        message=f"{removed} tombstone(s) removed",
    )

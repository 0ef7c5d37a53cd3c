"""Event link-health API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class RecheckEventResponse(BaseModel):
    """Single-event recheck response."""

    event_id: str = Field(..., description="Event ID")
    score: int = Field(..., description="Link health score")
    publishable: bool = Field(..., description="Passes the publishing gate")
    message: str


class RecheckBatchResponse(BaseModel):
    """Batch recheck response."""

    processed: int = Field(..., description="Events looked at")
    validated: int = Field(..., description="Events checked over the network")
    publishable: int = Field(..., description="Validated events that are publishable")
    errors: int = Field(..., description="Events whose validation failed")
    message: str


class EventLinkHealthResponse(BaseModel):
    event_id: str
    title: str
    link_health_score: int | None = None
    publishable: bool
    last_checked_at: datetime | None = None
    url_status: int | None = None


class LinkHealthStatsResponse(BaseModel):
    total_events: int
    publishable_events: int
    unvalidated_events: int
    low_score_events: int = Field(..., description="Events scoring below 70")
    validation_rate: str = Field(..., description='Publishable share, e.g. "42.5%"')


class RecentEventResponse(BaseModel):
    id: str
    title: str
    organizer: str | None = None
    candidate_url: str | None = None
    canonical_url: str | None = None
    url_status: int | None = None
    link_health_score: int | None = None
    publishable: bool
    last_checked_at: datetime | None = None
    created_at: datetime


class RecentSummaryResponse(BaseModel):
    total: int
    publishable: int
    average_score: int


class RecentValidationsResponse(BaseModel):
    events: list[RecentEventResponse]
    summary: RecentSummaryResponse


class TombstoneResurrectResponse(BaseModel):
    url: str
    removed: int = Field(..., description="Tombstones removed")

"""Event application data models."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel


@dataclass
class BatchValidationResult:
    """Counters of one batch run."""

    processed: int = 0
    validated: int = 0
    publishable: int = 0
    errors: int = 0


@dataclass
class EventValidationResult:
    """Outcome of validating a single event."""

    success: bool
    score: int | None = None
    publishable: bool | None = None
    error: str | None = None

    @classmethod
    def failed(cls, error: str) -> "EventValidationResult":
        return cls(success=False, error=error)


@dataclass(frozen=True)
class ValidationOutcome:
    """What the full validation cycle decided for an event."""

    score: int
    publishable: bool
    tombstoned: bool = False
    healed: bool = False
    network_checked: bool = True


class EventLinkStatusData(BaseModel):
    """Link-health view of one event."""

    event_id: str
    title: str
    link_health_score: int | None = None
    publishable: bool
    last_checked_at: datetime | None = None
    url_status: int | None = None


class RecentEventData(BaseModel):
    """Recently created event with its validation fields."""

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


class RecentValidationSummary(BaseModel):
    total: int
    publishable: int
    average_score: int


class RecentValidationsData(BaseModel):
    events: list[RecentEventData]
    summary: RecentValidationSummary


class LinkHealthStatsData(BaseModel):
    """Aggregate link-health counters."""

    total_events: int
    publishable_events: int
    unvalidated_events: int
    low_score_events: int
    validation_rate: str

"""Event domain entities."""

from datetime import datetime, timedelta

from pydantic import Field

from src.core.domain.base_entity import BaseEntity
from src.modules.events.domain.fetcher import LinkCheckResult
from src.modules.events.domain.scoring import is_publishable


class Event(BaseEntity):
    """Event listing whose external link is validated.

    Only the link-health fields are owned here; the rest of the event record
    belongs to the listing features.
    """

    title: str = Field(..., description="Event title")
    organizer: str | None = Field(default=None, description="Organizer name")
    candidate_url: str | None = Field(default=None, description="Submitted URL")
    canonical_url: str | None = Field(default=None, description="Best known URL")
    url_status: int | None = Field(default=None, description="Last HTTP status, 0 = fetch failed")
    redirect_chain: list[str] = Field(default_factory=list, description="URLs visited while redirecting")
    link_health_score: int | None = Field(default=None, ge=0, le=100, description="Link health score")
    last_checked_at: datetime | None = Field(default=None, description="Last validation time")
    publishable: bool = Field(default=False, description="Passes the link-health gate")

    @property
    def url_to_check(self) -> str | None:
        """URL the validator should fetch."""
        return self.canonical_url or self.candidate_url

    def needs_validation(self, now: datetime, recheck_hours: int) -> bool:
        """Whether the event is due for a (re)check."""
        if self.last_checked_at is None:
            return True
        return now - self.last_checked_at >= timedelta(hours=recheck_hours)

    def apply_link_check(
        self,
        result: LinkCheckResult,
        checked_at: datetime,
        score_min: int,
    ) -> None:
        """Record the outcome of a link check."""
        self.canonical_url = result.canonical or result.final_url
        self.url_status = result.status
        self.redirect_chain = list(result.redirect_chain)
        self.link_health_score = result.score
        self.last_checked_at = checked_at
        self.publishable = is_publishable(result.score, result.status, score_min)
        self._update_timestamp()

    def mark_tombstoned(self, checked_at: datetime) -> None:
        """Record a check short-circuited by a tombstone."""
        self.url_status = 404
        self.link_health_score = 0
        self.last_checked_at = checked_at
        self.publishable = False
        self._update_timestamp()


class UrlTombstone(BaseEntity):
    """A (domain, path) judged permanently dead."""

    domain: str = Field(..., description="Hostname")
    path: str = Field(..., description="Path plus query string")
    reason: str = Field(..., description="Diagnostic, e.g. 'Status: 404, Score: 0'")

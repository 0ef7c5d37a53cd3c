"""Read-side services for link-health reporting."""

from src.core.config import settings
from src.modules.events.application.models import (
    EventLinkStatusData,
    LinkHealthStatsData,
    RecentEventData,
    RecentValidationsData,
    RecentValidationSummary,
)
from src.modules.events.domain.exceptions import EventNotFoundError
from src.modules.events.domain.repository import EventRepository

LOW_SCORE_THRESHOLD = 70


def format_rate(part: int, total: int) -> str:
    """Percentage with one decimal, "0%" when there is nothing to divide."""
    if not total:
        return "0%"
    return f"{part / total * 100:.1f}%"


class LinkHealthQueryService:
    """Link-health status, statistics and recent validations."""

    def __init__(self, event_repository: EventRepository):
        self.event_repository = event_repository

    async def get_event_status(self, event_id: str) -> EventLinkStatusData:
        event = await self.event_repository.get_by_id(event_id)
        if event is None:
            raise EventNotFoundError(event_id)

        return EventLinkStatusData(
            event_id=event.id,
            title=event.title,
            link_health_score=event.link_health_score,
            publishable=event.publishable,
            last_checked_at=event.last_checked_at,
            url_status=event.url_status,
        )

    async def get_stats(self) -> LinkHealthStatsData:
        total = await self.event_repository.count_all()
        publishable = await self.event_repository.count_publishable()
        unvalidated = await self.event_repository.count_unvalidated()
        low_score = await self.event_repository.count_below_score(LOW_SCORE_THRESHOLD)

        return LinkHealthStatsData(
            total_events=total,
            publishable_events=publishable,
            unvalidated_events=unvalidated,
            low_score_events=low_score,
            validation_rate=format_rate(publishable, total),
        )

    async def get_recent(self, limit: int | None = None) -> RecentValidationsData:
        """Most recently created events with a summary of their link health.

        Unscored events count as 0 in the average.
        """
        events = await self.event_repository.list_recent(
            limit or settings.VALIDATION_RECENT_LIMIT
        )
        items = [
            RecentEventData(
                id=event.id,
                title=event.title,
                organizer=event.organizer,
                candidate_url=event.candidate_url,
                canonical_url=event.canonical_url,
                url_status=event.url_status,
                link_health_score=event.link_health_score,
                publishable=event.publishable,
                last_checked_at=event.last_checked_at,
                created_at=event.created_at,
            )
            for event in events
        ]

        total_score = sum(item.link_health_score or 0 for item in items)
        average_score = round(total_score / len(items)) if items else 0

        return RecentValidationsData(
            events=items,
            summary=RecentValidationSummary(
                total=len(items),
                publishable=sum(1 for item in items if item.publishable),
                average_score=average_score,
            ),
        )

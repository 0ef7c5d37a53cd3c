"""Event entity-model mappers."""

from src.core.infrastructure.database.mapper import BaseMapper
from src.modules.events.domain.entities import Event, UrlTombstone
from src.modules.events.infrastructure.models import EventModel, UrlTombstoneModel


class EventMapper(BaseMapper[Event, EventModel]):
    """Event entity-model mapper."""

    def to_domain(self, model: EventModel) -> Event:
        return Event(
            id=model.id,
            title=model.title,
            organizer=model.organizer,
            candidate_url=model.candidate_url,
            canonical_url=model.canonical_url,
            url_status=model.url_status,
            redirect_chain=list(model.redirect_chain or []),
            link_health_score=model.link_health_score,
            last_checked_at=model.last_checked_at,
            publishable=model.publishable,
            created_at=model.created_at,
            updated_at=model.updated_at,
            is_deleted=model.is_deleted,
        )

    def to_model(self, entity: Event) -> EventModel:
        return EventModel(
            id=entity.id,
            title=entity.title,
            organizer=entity.organizer,
            candidate_url=entity.candidate_url,
            canonical_url=entity.canonical_url,
            url_status=entity.url_status,
            redirect_chain=list(entity.redirect_chain),
            link_health_score=entity.link_health_score,
            last_checked_at=entity.last_checked_at,
            publishable=entity.publishable,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            is_deleted=entity.is_deleted,
        )


class UrlTombstoneMapper(BaseMapper[UrlTombstone, UrlTombstoneModel]):
    """Tombstone entity-model mapper."""

    def to_domain(self, model: UrlTombstoneModel) -> UrlTombstone:
        return UrlTombstone(
            id=model.id,
            domain=model.domain,
            path=model.path,
            reason=model.reason,
            created_at=model.created_at,
            updated_at=model.updated_at,
            is_deleted=model.is_deleted,
        )

    def to_model(self, entity: UrlTombstone) -> UrlTombstoneModel:
        return UrlTombstoneModel(
            id=entity.id,
            domain=entity.domain,
            path=entity.path,
            reason=entity.reason,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            is_deleted=entity.is_deleted,
        )

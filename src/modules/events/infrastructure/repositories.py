"""Event repository implementations."""

from datetime import datetime

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from src.core.domain.exceptions import EntityNotFoundError
from src.core.infrastructure.database.base_model import utc_now
from src.modules.events.domain.entities import Event, UrlTombstone
from src.modules.events.domain.exceptions import EventNotFoundError
from src.modules.events.domain.repository import EventRepository, TombstoneRepository
from src.modules.events.infrastructure.mappers import EventMapper, UrlTombstoneMapper
from src.modules.events.infrastructure.models import EventModel, UrlTombstoneModel


class PostgreSQLEventRepository(EventRepository):
    """PostgreSQL event repository implementation."""

    def __init__(self, session: AsyncSession, mapper: EventMapper):
        self.session = session
        self.mapper = mapper

    async def get_by_id(self, event_id: str) -> Event | None:
        statement = select(EventModel).where(
            EventModel.id == event_id,
            col(EventModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def list_for_validation(self, limit: int = 100) -> list[Event]:
        statement = (
            select(EventModel)
            .where(col(EventModel.is_deleted).is_(False))
            .order_by(col(EventModel.last_checked_at).asc().nullsfirst())
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return self.mapper.to_domain_list(list(result.scalars().all()))

    async def list_recent(self, limit: int = 10) -> list[Event]:
        statement = (
            select(EventModel)
            .where(col(EventModel.is_deleted).is_(False))
            .order_by(col(EventModel.created_at).desc())
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return self.mapper.to_domain_list(list(result.scalars().all()))

    async def _count(self, *conditions) -> int:
        statement = select(func.count(EventModel.id)).where(
            col(EventModel.is_deleted).is_(False), *conditions
        )
        result = await self.session.execute(statement)
        return int(result.scalar_one() or 0)

    async def count_all(self) -> int:
        return await self._count()

    async def count_publishable(self) -> int:
        return await self._count(col(EventModel.publishable).is_(True))

    async def count_unvalidated(self) -> int:
        return await self._count(col(EventModel.last_checked_at).is_(None))

    async def count_below_score(self, threshold: int) -> int:
        return await self._count(col(EventModel.link_health_score) < threshold)

    async def create(self, event: Event) -> Event:
        model = self.mapper.to_model(event)
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self.mapper.to_domain(model)

    async def update(self, event: Event) -> Event:
        statement = select(EventModel).where(EventModel.id == event.id)
        result = await self.session.execute(statement)
        existing = result.scalar_one_or_none()
        if not existing:
            raise EventNotFoundError(event.id)

        existing.canonical_url = event.canonical_url
        existing.url_status = event.url_status
        existing.redirect_chain = list(event.redirect_chain)
        existing.link_health_score = event.link_health_score
        existing.last_checked_at = event.last_checked_at
        existing.publishable = event.publishable
        existing.updated_at = event.updated_at

        self.session.add(existing)
        await self.session.flush()
        await self.session.refresh(existing)
        return self.mapper.to_domain(existing)


class PostgreSQLTombstoneRepository(TombstoneRepository):
    """PostgreSQL tombstone repository implementation.

    Duplicate (domain, path) rows are tolerated: the table is only read to
    short-circuit checks.
    """

    def __init__(self, session: AsyncSession, mapper: UrlTombstoneMapper):
        self.session = session
        self.mapper = mapper

    async def get_by_id(self, tombstone_id: str) -> UrlTombstone | None:
        statement = select(UrlTombstoneModel).where(
            UrlTombstoneModel.id == tombstone_id,
            col(UrlTombstoneModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def exists(
        self,
        domain: str,
        path: str,
        created_after: datetime | None = None,
    ) -> bool:
        statement = select(UrlTombstoneModel.id).where(
            UrlTombstoneModel.domain == domain,
            UrlTombstoneModel.path == path,
            col(UrlTombstoneModel.is_deleted).is_(False),
        )
        if created_after is not None:
            statement = statement.where(UrlTombstoneModel.created_at >= created_after)
        result = await self.session.execute(statement.limit(1))
        return result.scalar_one_or_none() is not None

    async def create(self, tombstone: UrlTombstone) -> UrlTombstone:
        model = self.mapper.to_model(tombstone)
        self.session.add(model)
        await self.session.flush()
        return self.mapper.to_domain(model)

    async def update(self, tombstone: UrlTombstone) -> UrlTombstone:
        statement = select(UrlTombstoneModel).where(
            UrlTombstoneModel.id == tombstone.id
        )
        result = await self.session.execute(statement)
        existing = result.scalar_one_or_none()
        if not existing:
            raise EntityNotFoundError("UrlTombstone", tombstone.id)

        existing.reason = tombstone.reason
        existing.is_deleted = tombstone.is_deleted
        existing.updated_at = tombstone.updated_at

        self.session.add(existing)
        await self.session.flush()
        return self.mapper.to_domain(existing)

    async def delete_by_parts(self, domain: str, path: str) -> int:
        statement = select(UrlTombstoneModel).where(
            UrlTombstoneModel.domain == domain,
            UrlTombstoneModel.path == path,
            col(UrlTombstoneModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        models = result.scalars().all()
        now = utc_now()
        for model in models:
            model.is_deleted = True
            model.updated_at = now
            self.session.add(model)
        await self.session.flush()
        return len(models)

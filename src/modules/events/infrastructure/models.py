"""Event database models."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, Text
from sqlmodel import Field

from src.core.infrastructure.database.base_model import BaseModel


class EventModel(BaseModel, table=True):
    """Event database model (link-health columns plus the fields used for keywords)."""

    __tablename__ = "events"
    __table_args__ = (Index("ix_events_created_at", "created_at"),)

    title: str = Field(nullable=False)
    organizer: str | None = Field(default=None, nullable=True)
    candidate_url: str | None = Field(default=None, sa_type=Text, nullable=True)
    canonical_url: str | None = Field(default=None, sa_type=Text, nullable=True)
    url_status: int | None = Field(default=None, nullable=True)
    redirect_chain: list = Field(default_factory=list, sa_type=JSON, nullable=False)
    link_health_score: int | None = Field(default=None, nullable=True, index=True)
    last_checked_at: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),
        nullable=True,
        index=True,
    )
    publishable: bool = Field(default=False, nullable=False, index=True)


class UrlTombstoneModel(BaseModel, table=True):
    """Permanently dead (domain, path) pairs."""

    __tablename__ = "event_url_tombstones"
    __table_args__ = (
        Index("ix_event_url_tombstones_domain_path", "domain", "path"),
    )

    domain: str = Field(nullable=False)
    path: str = Field(sa_type=Text, nullable=False)
    reason: str = Field(nullable=False)

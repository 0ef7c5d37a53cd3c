"""Event and tombstone repository interfaces."""

from abc import abstractmethod
from datetime import datetime
from typing import Protocol

from src.core.domain.repository import BaseRepository
from src.modules.events.domain.entities import Event, UrlTombstone


class EventRepository(BaseRepository[Event]):
    """Event repository interface."""

    @abstractmethod
    async def list_for_validation(self, limit: int = 100) -> list[Event]:
        """Events ordered by last_checked_at ascending, never-checked first."""
        pass

    @abstractmethod
    async def list_recent(self, limit: int = 10) -> list[Event]:
        """Most recently created events."""
        pass

    @abstractmethod
    async def count_all(self) -> int:
        pass

    @abstractmethod
    async def count_publishable(self) -> int:
        pass

    @abstractmethod
    async def count_unvalidated(self) -> int:
        pass

    @abstractmethod
    async def count_below_score(self, threshold: int) -> int:
        pass


class TombstoneRepository(BaseRepository[UrlTombstone]):
    """Tombstone store: append-mostly, looked up by exact (domain, path)."""

    @abstractmethod
    async def exists(
        self,
        domain: str,
        path: str,
        created_after: datetime | None = None,
    ) -> bool:
        """Whether a live tombstone exists for (domain, path).

        Args:
            domain: Hostname
            path: Path plus query
            created_after: Ignore tombstones older than this (expiry)
        """
        pass

    @abstractmethod
    async def delete_by_parts(self, domain: str, path: str) -> int:
        """Remove tombstones for (domain, path); returns how many were removed."""
        pass


class Transaction(Protocol):
    """Commit/rollback boundary; an AsyncSession satisfies it."""

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class ValidationLock(Protocol):
    """At most one in-flight validation per event."""

    async def acquire(self, event_id: str) -> bool: ...

    async def release(self, event_id: str) -> None: ...

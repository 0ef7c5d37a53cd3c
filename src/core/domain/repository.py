"""Base repository interface."""

from abc import ABC, abstractmethod
from typing import TypeVar

T = TypeVar("T")


class BaseRepository[T](ABC):
    """Common repository operations."""

    @abstractmethod
    async def get_by_id(self, entity_id: str) -> T | None:
        """Get an entity by id."""
        pass

    @abstractmethod
    async def create(self, entity: T) -> T:
        """Create an entity."""
        pass

    @abstractmethod
    async def update(self, entity: T) -> T:
        """Update an entity."""
        pass

"""Entity <-> table model conversion."""

from abc import ABC, abstractmethod
from typing import TypeVar

E = TypeVar("E")  # Entity type
M = TypeVar("M")  # Model type


class BaseMapper[E, M](ABC):
    """Converts between domain entities and SQLModel rows."""

    @abstractmethod
    def to_domain(self, model: M) -> E: ...

    @abstractmethod
    def to_model(self, entity: E) -> M: ...

    def to_domain_list(self, models: list[M]) -> list[E]:
        return [self.to_domain(model) for model in models]

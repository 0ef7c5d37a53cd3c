"""Link checker port and result model."""

from dataclasses import dataclass, field
from typing import Protocol


@dataclass
class LinkCheckResult:
    """Outcome of fetching and scoring one URL."""

    final_url: str
    status: int
    redirect_chain: list[str] = field(default_factory=list)
    score: int = 0
    needs_js: bool = False
    canonical: str | None = None
    title: str | None = None
    error: str | None = None

    @property
    def is_dead(self) -> bool:
        """404/410: the only statuses worth a healing attempt."""
        return self.status in (404, 410)

    @classmethod
    def failed(cls, url: str, error: str) -> "LinkCheckResult":
        """Result for a fetch that never produced a response."""
        return cls(final_url=url, status=0, error=error)


class LinkChecker(Protocol):
    async def check_url(
        self,
        url: str,
        keywords: list[str] | None = None,
    ) -> LinkCheckResult: ...

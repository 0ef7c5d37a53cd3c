"""Tombstone maintenance."""

from loguru import logger

from src.core.infrastructure.logging import get_business_logger
from src.modules.events.domain.exceptions import InvalidEventUrlError
from src.modules.events.domain.repository import TombstoneRepository
from src.modules.events.domain.tombstone import extract_url_parts


class TombstoneService:
    def __init__(self, tombstone_repository: TombstoneRepository):
        self.tombstone_repository = tombstone_repository
        self.business_log = get_business_logger()

    async def resurrect(self, url: str) -> int:
        """Remove the tombstones matching the URL's (domain, path).

        Returns:
            Number of tombstones removed
        """
        url_parts = extract_url_parts(url)
        if url_parts is None:
            raise InvalidEventUrlError(url)

        removed = await self.tombstone_repository.delete_by_parts(
            url_parts.domain, url_parts.path
        )
        logger.info(f"Resurrected {url}: {removed} tombstone(s) removed")
        self.business_log.info(
            "event_url_resurrected",
            domain=url_parts.domain,
            path=url_parts.path,
            removed=removed,
        )
        return removed

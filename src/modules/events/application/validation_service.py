"""Event link validation service.

Runs the validation cycle for events: tombstone lookup, fetch and score,
one healing attempt for dead links, tombstoning, and persistence of the
link-health fields.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta

from loguru import logger

from src.core.config import settings
from src.core.infrastructure.logging import BusinessEvents
from src.modules.events.application.models import (
    BatchValidationResult,
    EventValidationResult,
    ValidationOutcome,
)
from src.modules.events.domain.entities import Event, UrlTombstone
from src.modules.events.domain.fetcher import LinkChecker, LinkCheckResult
from src.modules.events.domain.healing import heal_url
from src.modules.events.domain.repository import (
    EventRepository,
    TombstoneRepository,
    Transaction,
    ValidationLock,
)
from src.modules.events.domain.scoring import build_keywords
from src.modules.events.domain.tombstone import (
    UrlParts,
    extract_url_parts,
    should_tombstone,
    tombstone_reason,
)

EVENT_NOT_FOUND = "Event not found"
EVENT_HAS_NO_URL = "Event has no URL to validate"
EVENT_LOCKED = "Event is already being validated"


class EventLockedError(Exception):
    """Another worker holds the validation lock for the event."""


class EventValidationService:
    """Validates event links and maintains the publishable flag.

    Args:
        event_repository: Event store
        tombstone_repository: Dead-link store
        link_checker: Fetches and scores URLs
        validation_lock: Optional per-event lock
        transaction: Optional commit/rollback boundary, used once per event
        score_min: Publishable score threshold
        recheck_hours: Minimum age of a check before the batch redoes it
        politeness_delay_sec: Pause after each network-checked event in a batch
        tombstone_ttl_days: Ignore tombstones older than this, None = never
        sleep: Awaitable sleep, replaced in tests
    """

    def __init__(
        self,
        event_repository: EventRepository,
        tombstone_repository: TombstoneRepository,
        link_checker: LinkChecker,
        validation_lock: ValidationLock | None = None,
        transaction: Transaction | None = None,
        score_min: int | None = None,
        recheck_hours: int | None = None,
        politeness_delay_sec: float | None = None,
        tombstone_ttl_days: int | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.event_repository = event_repository
        self.tombstone_repository = tombstone_repository
        self.link_checker = link_checker
        self.validation_lock = validation_lock
        self.transaction = transaction
        self.score_min = (
            score_min if score_min is not None else settings.VALIDATION_SCORE_MIN
        )
        self.recheck_hours = (
            recheck_hours
            if recheck_hours is not None
            else settings.VALIDATION_RECHECK_HOURS
        )
        self.politeness_delay_sec = (
            politeness_delay_sec
            if politeness_delay_sec is not None
            else settings.VALIDATION_POLITENESS_DELAY_SEC
        )
        self.tombstone_ttl_days = (
            tombstone_ttl_days
            if tombstone_ttl_days is not None
            else settings.TOMBSTONE_TTL_DAYS
        )
        self._sleep = sleep
        self._fetches = 0

    async def run_validation_batch(self, limit: int = 100) -> BatchValidationResult:
        """Validate up to `limit` events, least recently checked first.

        Per-event failures are counted in `errors` and never abort the batch.
        A failure to list the events is re-raised.
        """
        start_time = time.time()
        result = BatchValidationResult()

        try:
            events = await self.event_repository.list_for_validation(limit)
        except Exception as e:
            logger.exception(f"Failed to list events for validation: {e}")
            raise

        if not events:
            logger.info("No events found for validation")
            return result

        logger.info(f"Starting validation batch for {len(events)} events")

        for event in events:
            result.processed += 1

            url = event.url_to_check
            if not url:
                logger.warning(f"Event {event.id} has no URL to validate")
                continue

            if not event.needs_validation(datetime.now(UTC), self.recheck_hours):
                logger.debug(f"Skipping recently validated event: {event.id}")
                continue

            fetches_before = self._fetches
            try:
                outcome = await self._validate_with_lock(event, url)
                await self._commit()
            except EventLockedError:
                logger.info(f"Event {event.id} is locked by another worker, skipping")
                continue
            except Exception as e:
                result.errors += 1
                logger.exception(f"Error validating event {event.id}: {e}")
                await self._rollback()
            else:
                if outcome.network_checked:
                    result.validated += 1
                    if outcome.publishable:
                        result.publishable += 1

            # Pause after any event that hit the network, failed or not
            if self._fetches > fetches_before:
                await self._sleep(self.politeness_delay_sec)

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"Validation batch complete: {result.processed} processed, "
            f"{result.validated} validated, {result.publishable} publishable, "
            f"{result.errors} errors"
        )
        BusinessEvents.validation_batch_completed(
            processed=result.processed,
            validated=result.validated,
            publishable=result.publishable,
            errors=result.errors,
            duration_ms=duration_ms,
        )
        return result

    async def validate_event_by_id(self, event_id: str) -> EventValidationResult:
        """Validate one event now, regardless of when it was last checked.

        Never raises: every failure is reported through the result.
        """
        try:
            event = await self.event_repository.get_by_id(event_id)
            if event is None:
                return EventValidationResult.failed(EVENT_NOT_FOUND)

            url = event.url_to_check
            if not url:
                return EventValidationResult.failed(EVENT_HAS_NO_URL)

            outcome = await self._validate_with_lock(event, url)
            await self._commit()
        except EventLockedError:
            return EventValidationResult.failed(EVENT_LOCKED)
        except Exception as e:
            logger.exception(f"Error validating event {event_id}: {e}")
            await self._rollback()
            return EventValidationResult.failed(str(e) or type(e).__name__)

        return EventValidationResult(
            success=True,
            score=outcome.score,
            publishable=outcome.publishable,
        )

    async def _validate_with_lock(self, event: Event, url: str) -> ValidationOutcome:
        if self.validation_lock is None:
            return await self._validate_event(event, url)

        if not await self.validation_lock.acquire(event.id):
            raise EventLockedError(event.id)
        try:
            return await self._validate_event(event, url)
        finally:
            await self.validation_lock.release(event.id)

    async def _validate_event(self, event: Event, url: str) -> ValidationOutcome:
        """Full validation cycle for one event."""
        logger.info(f"Validating event: {event.title} ({url})")

        url_parts = extract_url_parts(url)
        if url_parts and await self._is_tombstoned(url_parts):
            logger.info(f"URL is tombstoned, skipping fetch: {url}")
            event.mark_tombstoned(datetime.now(UTC))
            await self.event_repository.update(event)
            return ValidationOutcome(
                score=0,
                publishable=False,
                tombstoned=True,
                network_checked=False,
            )

        keywords = build_keywords(event.title, event.organizer)
        result = await self._check_url(url, keywords)

        healed = False
        if result.is_dead:
            result, healed = await self._try_heal(event, url, keywords, result)

        tombstoned = False
        if url_parts and should_tombstone(
            result.status, result.redirect_chain, result.score
        ):
            await self._tombstone(event, url_parts, result)
            tombstoned = True

        event.apply_link_check(result, datetime.now(UTC), self.score_min)
        await self.event_repository.update(event)

        logger.info(
            f"Event {event.id} validated: score={result.score}, "
            f"publishable={event.publishable}"
        )
        BusinessEvents.event_link_validated(
            event_id=event.id,
            url=url,
            status=result.status,
            score=result.score,
            publishable=event.publishable,
            needs_js=result.needs_js,
        )
        return ValidationOutcome(
            score=result.score,
            publishable=event.publishable,
            tombstoned=tombstoned,
            healed=healed,
        )

    async def _try_heal(
        self,
        event: Event,
        url: str,
        keywords: list[str],
        result: LinkCheckResult,
    ) -> tuple[LinkCheckResult, bool]:
        """Re-check a cleaned-up URL once; keep it only if it scores higher."""
        healed_url = heal_url(url)
        if healed_url == url:
            return result, False

        logger.info(f"Attempting to heal URL: {url} -> {healed_url}")
        healed_result = await self._check_url(healed_url, keywords)
        if healed_result.score <= result.score:
            return result, False

        logger.info(f"Healed URL improved score: {result.score} -> {healed_result.score}")
        BusinessEvents.event_link_healed(
            event_id=event.id,
            original_url=url,
            healed_url=healed_url,
            old_score=result.score,
            new_score=healed_result.score,
        )
        return healed_result, True

    async def _check_url(self, url: str, keywords: list[str]) -> LinkCheckResult:
        self._fetches += 1
        return await self.link_checker.check_url(url, keywords)

    async def _is_tombstoned(self, url_parts: UrlParts) -> bool:
        created_after = None
        if self.tombstone_ttl_days:
            created_after = datetime.now(UTC) - timedelta(days=self.tombstone_ttl_days)
        return await self.tombstone_repository.exists(
            url_parts.domain,
            url_parts.path,
            created_after=created_after,
        )

    async def _tombstone(
        self,
        event: Event,
        url_parts: UrlParts,
        result: LinkCheckResult,
    ) -> None:
        reason = tombstone_reason(result.status, result.score)
        await self.tombstone_repository.create(
            UrlTombstone(domain=url_parts.domain, path=url_parts.path, reason=reason)
        )
        logger.info(f"Tombstoned URL: {url_parts.domain}{url_parts.path}")
        BusinessEvents.event_link_tombstoned(
            event_id=event.id,
            domain=url_parts.domain,
            path=url_parts.path,
            reason=reason,
        )

    async def _commit(self) -> None:
        if self.transaction is not None:
            await self.transaction.commit()

    async def _rollback(self) -> None:
        if self.transaction is None:
            return
        try:
            await self.transaction.rollback()
        except Exception as e:
            logger.error(f"Rollback failed: {e}")

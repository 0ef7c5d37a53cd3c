"""EventValidationService unit tests.

Covers:
- batch ordering, staleness gate and counters
- tombstone short-circuit and tombstone creation
- healing of dead links
- single-event validation
- per-event locking
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from src.modules.events.application.validation_service import (
    EVENT_HAS_NO_URL,
    EVENT_LOCKED,
    EVENT_NOT_FOUND,
    EventValidationService,
)
from src.modules.events.domain.entities import Event, UrlTombstone
from src.modules.events.domain.fetcher import LinkCheckResult

pytestmark = pytest.mark.anyio

EVENT_URL = "https://example.com/events/tax-summit"


# ============================================
# Test doubles
# ============================================


class InMemoryEventRepository:
    """In-memory event store."""

    def __init__(self, events: list[Event] | None = None) -> None:
        self.events: dict[str, Event] = {e.id: e for e in events or []}
        self.updates: list[Event] = []
        self.fail_update_for: set[str] = set()
        self.fail_listing = False

    async def get_by_id(self, entity_id: str) -> Event | None:
        event = self.events.get(entity_id)
        return event.model_copy(deep=True) if event else None

    async def create(self, entity: Event) -> Event:
        self.events[entity.id] = entity
        return entity

    async def update(self, entity: Event) -> Event:
        if entity.id in self.fail_update_for:
            raise RuntimeError("database is read-only")
        stored = entity.model_copy(deep=True)
        self.events[entity.id] = stored
        self.updates.append(stored)
        return stored

    async def list_for_validation(self, limit: int = 100) -> list[Event]:
        if self.fail_listing:
            raise RuntimeError("connection lost")
        never_checked = [e for e in self.events.values() if e.last_checked_at is None]
        checked = sorted(
            (e for e in self.events.values() if e.last_checked_at is not None),
            key=lambda e: e.last_checked_at,
        )
        return [e.model_copy(deep=True) for e in (never_checked + checked)[:limit]]


class InMemoryTombstoneRepository:
    """In-memory tombstone store."""

    def __init__(self, tombstones: list[UrlTombstone] | None = None) -> None:
        self.tombstones: list[UrlTombstone] = list(tombstones or [])
        self.exists_calls: list[tuple[str, str, datetime | None]] = []

    async def exists(
        self, domain: str, path: str, created_after: datetime | None = None
    ) -> bool:
        self.exists_calls.append((domain, path, created_after))
        return any(
            t.domain == domain
            and t.path == path
            and not t.is_deleted
            and (created_after is None or t.created_at >= created_after)
            for t in self.tombstones
        )

    async def create(self, entity: UrlTombstone) -> UrlTombstone:
        self.tombstones.append(entity)
        return entity


class ScriptedLinkChecker:
    """Returns a prepared result per URL and records every call."""

    def __init__(self, results: dict[str, LinkCheckResult]) -> None:
        self.results = results
        self.calls: list[tuple[str, list[str] | None]] = []

    async def check_url(
        self, url: str, keywords: list[str] | None = None
    ) -> LinkCheckResult:
        self.calls.append((url, keywords))
        return self.results.get(url) or LinkCheckResult.failed(url, "unexpected url")


class FakeLock:
    def __init__(self, held: set[str] | None = None) -> None:
        self.held = set(held or [])
        self.acquired: list[str] = []
        self.released: list[str] = []

    async def acquire(self, event_id: str) -> bool:
        if event_id in self.held:
            return False
        self.acquired.append(event_id)
        return True

    async def release(self, event_id: str) -> None:
        self.released.append(event_id)


def make_event(
    event_id: str = "event-1",
    url: str | None = EVENT_URL,
    last_checked_at: datetime | None = None,
    **kwargs,
) -> Event:
    return Event(
        id=event_id,
        title=kwargs.pop("title", "Annual Tax Conference 2025"),
        organizer=kwargs.pop("organizer", "National Tax Association"),
        candidate_url=url,
        last_checked_at=last_checked_at,
        **kwargs,
    )


def healthy_result(url: str = EVENT_URL, **kwargs) -> LinkCheckResult:
    defaults = {
        "final_url": url,
        "status": 200,
        "redirect_chain": [],
        "score": 81,
        "canonical": "https://example.com/events/tax-summit-2025",
        "title": "annual tax conference 2025",
    }
    defaults.update(kwargs)
    return LinkCheckResult(**defaults)


def dead_result(url: str = EVENT_URL, status: int = 404, score: int = 0) -> LinkCheckResult:
    return LinkCheckResult(final_url=url, status=status, score=score, needs_js=True)


def make_service(
    events: list[Event],
    results: dict[str, LinkCheckResult],
    tombstones: list[UrlTombstone] | None = None,
    **kwargs,
) -> tuple[
    EventValidationService,
    InMemoryEventRepository,
    InMemoryTombstoneRepository,
    ScriptedLinkChecker,
    AsyncMock,
]:
    event_repo = InMemoryEventRepository(events)
    tombstone_repo = InMemoryTombstoneRepository(tombstones)
    checker = ScriptedLinkChecker(results)
    sleep = AsyncMock()
    kwargs.setdefault("score_min", 50)
    kwargs.setdefault("recheck_hours", 24)
    kwargs.setdefault("politeness_delay_sec", 0.5)
    service = EventValidationService(
        event_repository=event_repo,
        tombstone_repository=tombstone_repo,
        link_checker=checker,
        sleep=sleep,
        **kwargs,
    )
    return service, event_repo, tombstone_repo, checker, sleep


# ============================================
# Batch validation
# ============================================


class TestRunValidationBatch:
    """run_validation_batch tests."""

    async def test_healthy_event_becomes_publishable(self):
        service, event_repo, tombstone_repo, checker, sleep = make_service(
            [make_event()], {EVENT_URL: healthy_result()}
        )

        result = await service.run_validation_batch(100)

        assert (result.processed, result.validated, result.publishable, result.errors) == (
            1,
            1,
            1,
            0,
        )
        event = event_repo.events["event-1"]
        assert event.publishable is True
        assert event.url_status == 200
        assert event.link_health_score == 81
        assert event.canonical_url == "https://example.com/events/tax-summit-2025"
        assert event.last_checked_at is not None
        assert tombstone_repo.tombstones == []
        sleep.assert_awaited_once_with(0.5)

    async def test_keywords_built_from_title_and_organizer(self):
        service, _, _, checker, _ = make_service(
            [make_event()], {EVENT_URL: healthy_result()}
        )

        await service.run_validation_batch()

        assert checker.calls == [
            (
                EVENT_URL,
                ["annual", "conference", "2025", "national", "tax", "association"],
            )
        ]

    async def test_canonical_falls_back_to_final_url(self):
        result = healthy_result(
            canonical=None, final_url="https://example.com/events/final"
        )
        service, event_repo, _, _, _ = make_service([make_event()], {EVENT_URL: result})

        await service.run_validation_batch()

        assert event_repo.events["event-1"].canonical_url == "https://example.com/events/final"

    async def test_canonical_url_preferred_for_checking(self):
        event = make_event(canonical_url="https://example.com/canonical")
        service, _, _, checker, _ = make_service(
            [event],
            {"https://example.com/canonical": healthy_result("https://example.com/canonical")},
        )

        await service.run_validation_batch()

        assert [url for url, _ in checker.calls] == ["https://example.com/canonical"]

    async def test_dead_link_is_tombstoned(self):
        service, event_repo, tombstone_repo, _, _ = make_service(
            [make_event()], {EVENT_URL: dead_result()}
        )

        result = await service.run_validation_batch()

        assert result.validated == 1
        assert result.publishable == 0
        event = event_repo.events["event-1"]
        assert event.url_status == 404
        assert event.link_health_score == 0
        assert event.publishable is False
        assert len(tombstone_repo.tombstones) == 1
        tombstone = tombstone_repo.tombstones[0]
        assert tombstone.domain == "example.com"
        assert tombstone.path == "/events/tax-summit"
        assert tombstone.reason == "Status: 404, Score: 0"

    async def test_long_redirect_chain_is_tombstoned_but_kept_publishable(self):
        chain = [f"https://example.com/hop/{i}" for i in range(5)]
        service, event_repo, tombstone_repo, _, _ = make_service(
            [make_event()],
            {EVENT_URL: healthy_result(redirect_chain=chain, score=71)},
        )

        await service.run_validation_batch()

        assert len(tombstone_repo.tombstones) == 1
        assert tombstone_repo.tombstones[0].reason == "Status: 200, Score: 71"
        assert event_repo.events["event-1"].redirect_chain == chain
        assert event_repo.events["event-1"].publishable is True

    async def test_tombstoned_url_is_not_fetched(self):
        tombstone = UrlTombstone(
            domain="example.com", path="/events/tax-summit", reason="Status: 404, Score: 0"
        )
        service, event_repo, tombstone_repo, checker, sleep = make_service(
            [make_event()], {EVENT_URL: healthy_result()}, tombstones=[tombstone]
        )

        result = await service.run_validation_batch()

        assert checker.calls == []
        assert (result.processed, result.validated, result.errors) == (1, 0, 0)
        event = event_repo.events["event-1"]
        assert event.url_status == 404
        assert event.link_health_score == 0
        assert event.publishable is False
        assert event.last_checked_at is not None
        assert len(tombstone_repo.tombstones) == 1
        sleep.assert_not_awaited()

    async def test_expired_tombstone_ignored(self):
        tombstone = UrlTombstone(
            domain="example.com",
            path="/events/tax-summit",
            reason="Status: 404, Score: 0",
            created_at=datetime.now(UTC) - timedelta(days=40),
        )
        service, event_repo, tombstone_repo, checker, _ = make_service(
            [make_event()],
            {EVENT_URL: healthy_result()},
            tombstones=[tombstone],
            tombstone_ttl_days=30,
        )

        await service.run_validation_batch()

        assert len(checker.calls) == 1
        assert tombstone_repo.exists_calls[0][2] is not None
        assert event_repo.events["event-1"].publishable is True

    async def test_recently_checked_event_skipped(self, fresh_check_time):
        event = make_event(last_checked_at=fresh_check_time)
        service, event_repo, _, checker, _ = make_service(
            [event], {EVENT_URL: healthy_result()}
        )

        result = await service.run_validation_batch()

        assert (result.processed, result.validated) == (1, 0)
        assert checker.calls == []
        assert event_repo.updates == []

    async def test_stale_event_rechecked(self, stale_check_time):
        event = make_event(last_checked_at=stale_check_time)
        service, _, _, checker, _ = make_service([event], {EVENT_URL: healthy_result()})

        result = await service.run_validation_batch()

        assert result.validated == 1
        assert len(checker.calls) == 1

    async def test_event_without_url_skipped(self):
        service, event_repo, _, checker, _ = make_service(
            [make_event(url=None)], {}
        )

        result = await service.run_validation_batch()

        assert (result.processed, result.validated, result.errors) == (1, 0, 0)
        assert checker.calls == []
        assert event_repo.updates == []

    async def test_never_checked_events_first(self, stale_check_time):
        older = make_event(
            "event-old",
            url="https://example.com/old",
            last_checked_at=stale_check_time - timedelta(days=3),
        )
        recent = make_event(
            "event-recent", url="https://example.com/recent", last_checked_at=stale_check_time
        )
        never = make_event("event-new", url="https://example.com/new")
        service, _, _, checker, _ = make_service(
            [recent, older, never],
            {
                "https://example.com/old": healthy_result("https://example.com/old"),
                "https://example.com/recent": healthy_result("https://example.com/recent"),
                "https://example.com/new": healthy_result("https://example.com/new"),
            },
        )

        await service.run_validation_batch()

        assert [url for url, _ in checker.calls] == [
            "https://example.com/new",
            "https://example.com/old",
            "https://example.com/recent",
        ]

    async def test_failure_does_not_abort_batch(self):
        events = [
            make_event("event-1", url="https://example.com/a"),
            make_event("event-2", url="https://example.com/b"),
        ]
        transaction = AsyncMock()
        service, event_repo, _, _, _ = make_service(
            events,
            {
                "https://example.com/a": healthy_result("https://example.com/a"),
                "https://example.com/b": healthy_result("https://example.com/b"),
            },
            transaction=transaction,
        )
        event_repo.fail_update_for.add("event-1")

        result = await service.run_validation_batch()

        assert (result.processed, result.validated, result.publishable, result.errors) == (
            2,
            1,
            1,
            1,
        )
        transaction.rollback.assert_awaited_once()
        transaction.commit.assert_awaited_once()
        assert event_repo.events["event-2"].publishable is True

    async def test_pause_follows_failed_update_after_fetch(self):
        events = [
            make_event("event-1", url="https://example.com/a"),
            make_event("event-2", url="https://example.com/b"),
        ]
        service, event_repo, _, checker, sleep = make_service(
            events,
            {
                "https://example.com/a": healthy_result("https://example.com/a"),
                "https://example.com/b": healthy_result("https://example.com/b"),
            },
        )
        event_repo.fail_update_for.add("event-1")

        result = await service.run_validation_batch()

        assert result.errors == 1
        assert len(checker.calls) == 2
        assert sleep.await_count == 2

    async def test_no_pause_when_failure_precedes_fetch(self):
        service, _, tombstone_repo, checker, sleep = make_service(
            [make_event()], {EVENT_URL: healthy_result()}
        )

        async def broken_exists(*_args, **_kwargs):
            raise RuntimeError("tombstone lookup failed")

        tombstone_repo.exists = broken_exists

        result = await service.run_validation_batch()

        assert result.errors == 1
        assert checker.calls == []
        sleep.assert_not_awaited()

    async def test_listing_failure_raises(self):
        service, event_repo, _, _, _ = make_service([], {})
        event_repo.fail_listing = True

        with pytest.raises(RuntimeError, match="connection lost"):
            await service.run_validation_batch()

    async def test_empty_batch(self):
        service, _, _, _, sleep = make_service([], {})

        result = await service.run_validation_batch()

        assert (result.processed, result.validated, result.publishable, result.errors) == (
            0,
            0,
            0,
            0,
        )
        sleep.assert_not_awaited()

    async def test_counters_invariant(self, fresh_check_time):
        events = [
            make_event("a", url="https://example.com/a"),
            make_event("b", url="https://example.com/b"),
            make_event("c", url=None),
            make_event("d", url="https://example.com/d", last_checked_at=fresh_check_time),
        ]
        service, _, _, _, _ = make_service(
            events,
            {
                "https://example.com/a": healthy_result("https://example.com/a"),
                "https://example.com/b": dead_result("https://example.com/b"),
            },
        )

        result = await service.run_validation_batch()

        assert result.processed == 4
        assert result.validated == 2
        assert result.publishable == 1
        assert result.errors == 0
        assert result.publishable <= result.validated
        assert result.validated + result.errors <= result.processed

    async def test_score_min_applied(self):
        service, event_repo, _, _, _ = make_service(
            [make_event()], {EVENT_URL: healthy_result(score=55)}, score_min=60
        )

        result = await service.run_validation_batch()

        assert result.publishable == 0
        assert event_repo.events["event-1"].publishable is False

    async def test_commit_per_event(self):
        events = [
            make_event("a", url="https://example.com/a"),
            make_event("b", url="https://example.com/b"),
        ]
        transaction = AsyncMock()
        service, _, _, _, _ = make_service(
            events,
            {
                "https://example.com/a": healthy_result("https://example.com/a"),
                "https://example.com/b": healthy_result("https://example.com/b"),
            },
            transaction=transaction,
        )

        await service.run_validation_batch()

        assert transaction.commit.await_count == 2
        transaction.rollback.assert_not_awaited()


# ============================================
# Healing
# ============================================


class TestHealing:
    """Dead links get one retry with tracking parameters removed."""

    TRACKED_URL = "https://example.com/events/tax-summit?utm_source=mail&id=7#top"
    HEALED_URL = "https://example.com/events/tax-summit?id=7"

    async def test_healed_url_kept_when_better(self):
        service, event_repo, tombstone_repo, checker, _ = make_service(
            [make_event(url=self.TRACKED_URL)],
            {
                self.TRACKED_URL: dead_result(self.TRACKED_URL),
                self.HEALED_URL: healthy_result(self.HEALED_URL, canonical=None, score=60),
            },
        )

        result = await service.run_validation_batch()

        assert [url for url, _ in checker.calls] == [self.TRACKED_URL, self.HEALED_URL]
        event = event_repo.events["event-1"]
        assert event.url_status == 200
        assert event.link_health_score == 60
        assert event.canonical_url == self.HEALED_URL
        assert event.publishable is True
        assert result.publishable == 1
        assert tombstone_repo.tombstones == []

    async def test_healed_url_dropped_when_not_better(self):
        service, event_repo, tombstone_repo, checker, _ = make_service(
            [make_event(url=self.TRACKED_URL)],
            {
                self.TRACKED_URL: dead_result(self.TRACKED_URL),
                self.HEALED_URL: dead_result(self.HEALED_URL),
            },
        )

        await service.run_validation_batch()

        assert len(checker.calls) == 2
        event = event_repo.events["event-1"]
        assert event.url_status == 404
        assert event.canonical_url == self.TRACKED_URL
        assert len(tombstone_repo.tombstones) == 1
        assert tombstone_repo.tombstones[0].path == "/events/tax-summit?utm_source=mail&id=7"

    async def test_no_heal_attempt_for_clean_url(self):
        service, _, _, checker, _ = make_service([make_event()], {EVENT_URL: dead_result()})

        await service.run_validation_batch()

        assert len(checker.calls) == 1

    async def test_no_heal_attempt_for_non_dead_status(self):
        service, _, _, checker, _ = make_service(
            [make_event(url=self.TRACKED_URL)],
            {self.TRACKED_URL: dead_result(self.TRACKED_URL, status=500)},
        )

        await service.run_validation_batch()

        assert len(checker.calls) == 1

    async def test_gone_status_also_healed(self):
        service, _, _, checker, _ = make_service(
            [make_event(url=self.TRACKED_URL)],
            {
                self.TRACKED_URL: dead_result(self.TRACKED_URL, status=410),
                self.HEALED_URL: healthy_result(self.HEALED_URL),
            },
        )

        await service.run_validation_batch()

        assert len(checker.calls) == 2


# ============================================
# Single-event validation
# ============================================


class TestValidateEventById:
    """validate_event_by_id tests."""

    async def test_success(self):
        service, event_repo, _, _, sleep = make_service(
            [make_event()], {EVENT_URL: healthy_result()}
        )

        result = await service.validate_event_by_id("event-1")

        assert result.success is True
        assert result.score == 81
        assert result.publishable is True
        assert result.error is None
        assert event_repo.events["event-1"].publishable is True
        sleep.assert_not_awaited()

    async def test_bypasses_staleness_gate(self, fresh_check_time):
        service, _, _, checker, _ = make_service(
            [make_event(last_checked_at=fresh_check_time)], {EVENT_URL: healthy_result()}
        )

        result = await service.validate_event_by_id("event-1")

        assert result.success is True
        assert len(checker.calls) == 1

    async def test_event_not_found(self):
        service, event_repo, _, checker, _ = make_service([], {})

        result = await service.validate_event_by_id("missing")

        assert result.success is False
        assert result.error == EVENT_NOT_FOUND == "Event not found"
        assert checker.calls == []
        assert event_repo.updates == []

    async def test_event_without_url(self):
        service, event_repo, _, checker, _ = make_service([make_event(url=None)], {})

        result = await service.validate_event_by_id("event-1")

        assert result.success is False
        assert result.error == EVENT_HAS_NO_URL == "Event has no URL to validate"
        assert checker.calls == []
        assert event_repo.updates == []

    async def test_persistence_error_reported(self):
        transaction = AsyncMock()
        service, event_repo, _, _, _ = make_service(
            [make_event()], {EVENT_URL: healthy_result()}, transaction=transaction
        )
        event_repo.fail_update_for.add("event-1")

        result = await service.validate_event_by_id("event-1")

        assert result.success is False
        assert result.error == "database is read-only"
        transaction.rollback.assert_awaited_once()

    async def test_fetch_failure_is_a_successful_validation(self):
        service, event_repo, _, _, _ = make_service(
            [make_event()], {EVENT_URL: LinkCheckResult.failed(EVENT_URL, "DNS failure")}
        )

        result = await service.validate_event_by_id("event-1")

        assert result.success is True
        assert result.score == 0
        assert result.publishable is False
        event = event_repo.events["event-1"]
        assert event.url_status == 0
        assert event.redirect_chain == []


# ============================================
# Locking
# ============================================


class TestValidationLock:
    """At most one validation per event at a time."""

    async def test_lock_acquired_and_released(self):
        lock = FakeLock()
        service, _, _, _, _ = make_service(
            [make_event()], {EVENT_URL: healthy_result()}, validation_lock=lock
        )

        await service.run_validation_batch()

        assert lock.acquired == ["event-1"]
        assert lock.released == ["event-1"]

    async def test_lock_released_on_failure(self):
        lock = FakeLock()
        service, event_repo, _, _, _ = make_service(
            [make_event()], {EVENT_URL: healthy_result()}, validation_lock=lock
        )
        event_repo.fail_update_for.add("event-1")

        result = await service.run_validation_batch()

        assert result.errors == 1
        assert lock.released == ["event-1"]

    async def test_locked_event_skipped_in_batch(self):
        lock = FakeLock(held={"event-1"})
        service, event_repo, _, checker, _ = make_service(
            [make_event()], {EVENT_URL: healthy_result()}, validation_lock=lock
        )

        result = await service.run_validation_batch()

        assert (result.processed, result.validated, result.errors) == (1, 0, 0)
        assert checker.calls == []
        assert event_repo.updates == []
        assert lock.released == []

    async def test_locked_event_reported_in_single_mode(self):
        lock = FakeLock(held={"event-1"})
        service, _, _, checker, _ = make_service(
            [make_event()], {EVENT_URL: healthy_result()}, validation_lock=lock
        )

        result = await service.validate_event_by_id("event-1")

        assert result.success is False
        assert result.error == EVENT_LOCKED
        assert checker.calls == []

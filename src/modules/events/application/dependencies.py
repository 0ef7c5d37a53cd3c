"""Event module application dependencies."""

from typing import NoReturn

from fastapi import Depends

from src.modules.events.application.query_service import LinkHealthQueryService
from src.modules.events.application.tombstone_service import TombstoneService
from src.modules.events.application.validation_service import EventValidationService
from src.modules.events.domain.fetcher import LinkChecker
from src.modules.events.domain.repository import (
    EventRepository,
    TombstoneRepository,
    Transaction,
    ValidationLock,
)


def _missing_dependency(name: str) -> NoReturn:
    raise RuntimeError(f"Missing dependency override for {name}")


async def get_event_repository() -> EventRepository:
    _missing_dependency("EventRepository")


async def get_tombstone_repository() -> TombstoneRepository:
    _missing_dependency("TombstoneRepository")


# Validation commits once per event, so it runs on its own session
async def get_validation_event_repository() -> EventRepository:
    _missing_dependency("EventRepository (validation)")


async def get_validation_tombstone_repository() -> TombstoneRepository:
    _missing_dependency("TombstoneRepository (validation)")


async def get_validation_transaction() -> Transaction:
    _missing_dependency("Transaction")


async def get_link_checker() -> LinkChecker:
    _missing_dependency("LinkChecker")


async def get_validation_lock() -> ValidationLock:
    _missing_dependency("ValidationLock")


async def get_event_validation_service(
    event_repository: EventRepository = Depends(get_validation_event_repository),
    tombstone_repository: TombstoneRepository = Depends(
        get_validation_tombstone_repository
    ),
    link_checker: LinkChecker = Depends(get_link_checker),
    validation_lock: ValidationLock = Depends(get_validation_lock),
    transaction: Transaction = Depends(get_validation_transaction),
) -> EventValidationService:
    return EventValidationService(
        event_repository=event_repository,
        tombstone_repository=tombstone_repository,
        link_checker=link_checker,
        validation_lock=validation_lock,
        transaction=transaction,
    )


async def get_link_health_query_service(
    event_repository: EventRepository = Depends(get_event_repository),
) -> LinkHealthQueryService:
    return LinkHealthQueryService(event_repository)


async def get_tombstone_service(
    tombstone_repository: TombstoneRepository = Depends(get_tombstone_repository),
) -> TombstoneService:
    return TombstoneService(tombstone_repository)

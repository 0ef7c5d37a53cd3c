#!/usr/bin/env python3
"""Event link validation script.

Runs the validation pipeline outside Celery, for backfills and debugging.

Usage:
    # Validate the 100 least recently checked events
    python scripts/validate_links.py

    # Custom batch size
    python scripts/validate_links.py --limit 20

    # One event, regardless of when it was last checked
    python scripts/validate_links.py --event-id <event_id>

    # JSON output
    python scripts/validate_links.py --json

    # Skip the Redis lock
    python scripts/validate_links.py --no-lock
"""

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path

# Make the project root importable
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


async def run(limit: int, event_id: str | None, use_lock: bool) -> dict:
    from src.core.infrastructure.database.session import get_async_session
    from src.core.infrastructure.redis import RedisClient
    from src.modules.events.infrastructure.service_factory import (
        build_validation_service,
    )

    redis_client = RedisClient() if use_lock else None
    try:
        async with get_async_session() as session:
            service = build_validation_service(session, redis_client)
            if event_id:
                result = await service.validate_event_by_id(event_id)
                return {"mode": "single", "event_id": event_id, **asdict(result)}

            batch = await service.run_validation_batch(limit)
            return {"mode": "batch", "limit": limit, **asdict(batch)}
    finally:
        if redis_client is not None:
            await redis_client.close()


def print_result(result: dict, json_output: bool = False) -> None:
    if json_output:
        print(json.dumps(result, indent=2))
        return

    print(f"\n{'=' * 60}")
    print(f"Link validation ({result['mode']})")
    print(f"{'=' * 60}")
    for key, value in result.items():
        if key != "mode":
            print(f"  {key}: {value}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Validate event links")
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Batch size (default: VALIDATION_BATCH_SIZE)",
    )
    parser.add_argument("--event-id", help="Validate a single event")
    parser.add_argument("--json", action="store_true", help="JSON output")
    parser.add_argument(
        "--no-lock", action="store_true", help="Do not take the Redis lock"
    )
    args = parser.parse_args()

    from src.core.config import settings
    from src.core.infrastructure.logging import setup_logging

    setup_logging()

    limit = args.limit or settings.VALIDATION_BATCH_SIZE
    result = asyncio.run(run(limit, args.event_id, not args.no_lock))
    print_result(result, args.json)

    if result["mode"] == "single" and not result["success"]:
        sys.exit(1)
    if result["mode"] == "batch" and result["errors"]:
        sys.exit(2)


if __name__ == "__main__":
    main()

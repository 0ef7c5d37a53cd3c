#!/usr/bin/env python3
"""Health check script.

Checks the components the validation pipeline depends on. Usable as an
operator tool or a monitoring probe.

Usage:
    # Full check
    python scripts/health_check.py

    # One component
    python scripts/health_check.py --component database
    python scripts/health_check.py --component redis
    python scripts/health_check.py --component queues

    # JSON output
    python scripts/health_check.py --json

    # Non-zero exit code unless healthy (CI/CD)
    python scripts/health_check.py --strict
"""

import argparse
import asyncio
import json
import sys
from datetime import UTC, datetime
from pathlib import Path

# Make the project root importable
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

QUEUE_WARNING_BACKLOG = 100
QUEUE_UNHEALTHY_BACKLOG = 500


async def check_database() -> dict:
    """Database connectivity and event counters."""
    try:
        from src.core.infrastructure.database.session import get_async_session
        from src.modules.events.infrastructure.mappers import EventMapper
        from src.modules.events.infrastructure.repositories import (
            PostgreSQLEventRepository,
        )

        async with get_async_session() as session:
            event_repo = PostgreSQLEventRepository(session, EventMapper())
            total = await event_repo.count_all()
            unvalidated = await event_repo.count_unvalidated()

        return {
            "status": "healthy",
            "message": "Database connection OK",
            "total_events": total,
            "unvalidated_events": unvalidated,
        }

    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}


async def check_redis() -> dict:
    try:
        from src.core.infrastructure.redis.client import RedisClient

        redis_client = RedisClient()
        try:
            is_ok = await redis_client.ping()
        finally:
            await redis_client.close()

        if is_ok:
            return {"status": "healthy", "message": "Redis connection OK"}
        return {"status": "unhealthy", "error": "Redis ping failed"}

    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}


async def check_queues() -> dict:
    """Celery queue backlog."""
    try:
        from src.core.infrastructure.celery.queues import Queues
        from src.core.infrastructure.redis.client import RedisClient

        redis_client = RedisClient()
        queues = {}
        total_backlog = 0

        try:
            for queue in Queues.all_queues():
                try:
                    length = await redis_client.client.llen(queue)
                    queues[queue] = {"length": length}
                    total_backlog += length
                except Exception as e:
                    queues[queue] = {"error": str(e)}
        finally:
            await redis_client.close()

        status = "healthy"
        if total_backlog > QUEUE_WARNING_BACKLOG:
            status = "warning"
        if total_backlog > QUEUE_UNHEALTHY_BACKLOG:
            status = "unhealthy"

        return {
            "status": status,
            "total_backlog": total_backlog,
            "queues": queues,
        }

    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}


CHECKERS = {
    "database": check_database,
    "redis": check_redis,
    "queues": check_queues,
}


async def run_full_check() -> dict:
    results = {
        "timestamp": datetime.now(UTC).isoformat(),
        "overall_status": "healthy",
        "components": {},
    }

    outcomes = await asyncio.gather(
        *(checker() for checker in CHECKERS.values()),
        return_exceptions=True,
    )
    for name, outcome in zip(CHECKERS, outcomes, strict=True):
        if isinstance(outcome, Exception):
            outcome = {"status": "error", "error": str(outcome)}
        results["components"][name] = outcome

    statuses = [c.get("status", "unknown") for c in results["components"].values()]
    if any(s in ("unhealthy", "error") for s in statuses):
        results["overall_status"] = "unhealthy"
    elif any(s == "warning" for s in statuses):
        results["overall_status"] = "degraded"

    return results


async def run_component_check(component: str) -> dict:
    if component not in CHECKERS:
        return {"error": f"Unknown component: {component}"}

    result = await CHECKERS[component]()
    return {
        "timestamp": datetime.now(UTC).isoformat(),
        "component": component,
        "result": result,
    }


def print_result(result: dict, json_output: bool = False) -> None:
    if json_output:
        print(json.dumps(result, indent=2))
        return

    print(f"\n{'=' * 60}")
    print(f"Health Check Report - {result.get('timestamp', 'N/A')}")
    print(f"{'=' * 60}")

    if "overall_status" in result:
        print(f"\nOverall Status: {result['overall_status'].upper()}")
        print(f"\n{'-' * 40}")
        for component, info in result.get("components", {}).items():
            comp_status = info.get("status", "unknown")
            print(f"{component}: {comp_status}")
            if comp_status != "healthy":
                for key, value in info.items():
                    if key != "status":
                        print(f"    {key}: {value}")
    elif "result" in result:
        info = result["result"]
        print(f"\n{result.get('component', 'Component')}: {info.get('status', 'unknown')}")
        for key, value in info.items():
            if key != "status":
                print(f"    {key}: {value}")
    else:
        print(result.get("error", "Unknown error"))


def main() -> None:
    parser = argparse.ArgumentParser(description="EventLinkHealth health check")
    parser.add_argument("--component", choices=list(CHECKERS), help="Check one component")
    parser.add_argument("--json", action="store_true", help="JSON output")
    parser.add_argument("--strict", action="store_true", help="Exit 1 unless healthy")
    args = parser.parse_args()

    if args.component:
        result = asyncio.run(run_component_check(args.component))
        status = result.get("result", {}).get("status", "unhealthy")
    else:
        result = asyncio.run(run_full_check())
        status = result["overall_status"]

    print_result(result, args.json)

    if args.strict and status != "healthy":
        sys.exit(1)


if __name__ == "__main__":
    main()

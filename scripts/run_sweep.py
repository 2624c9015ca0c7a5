#!/usr/bin/env python3
"""Run one land request sweep.

Activates approved requests whose dates have started and expires
allocations whose end date has passed, releasing their land.

Usage:
    python scripts/run_sweep.py
    python scripts/run_sweep.py --date 2026-05-01
    python scripts/run_sweep.py --create-tables --log-json
"""

import argparse
import asyncio
import sys
from datetime import date
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import structlog

from gardenshare.application.notifications import UnitOfWorkNotificationSink
from gardenshare.application.sweep import run_sweep
from gardenshare.domain.exceptions import SweepFailedError
from gardenshare.infrastructure.config import settings
from gardenshare.infrastructure.database import create_tables, engine
from gardenshare.infrastructure.logging import configure_logging
from gardenshare.infrastructure.unit_of_work import sqlalchemy_uow_factory

logger = structlog.get_logger()


async def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Run one land request sweep")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Day to sweep for, YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables before sweeping (local development)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Log JSON lines instead of console output",
    )
    args = parser.parse_args()

    configure_logging(settings.log_level, log_json=args.log_json or settings.log_json)

    if args.create_tables:
        await create_tables()

    uow_factory = sqlalchemy_uow_factory()
    today = args.date or date.today()
    try:
        result = await run_sweep(uow_factory, today, UnitOfWorkNotificationSink(uow_factory))
    except SweepFailedError as e:
        logger.error("Sweep failed", today=today.isoformat(), error=e.message)
        return 1
    finally:
        await engine.dispose()

    if not result.changed:
        print(f"Sweep {today.isoformat()}: nothing to do")
    else:
        print(f"Sweep {today.isoformat()}: {len(result.activated)} activated, {len(result.expired)} expired")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

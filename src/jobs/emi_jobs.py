"""
Batch entry point for scheduled EMI jobs.

Usage:
    python -m src.jobs.emi_jobs sweep
    python -m src.jobs.emi_jobs reminders
    python -m src.jobs.emi_jobs repair-all

Exits non-zero when any plan failed, so schedulers can alert on it.
"""

import argparse
import asyncio
import sys
from dataclasses import asdict, is_dataclass
from typing import Sequence

import structlog

from src.application.services import EmiSweeper
from src.core.clock import utcnow
from src.core.dependencies import get_notification_sender, plan_store_scope
from src.core.logging import setup_logging
from src.infrastructure.database import db_manager

logger = structlog.get_logger(__name__)

JOBS = ("sweep", "reminders", "repair-all")


async def run_job(job: str, sweeper: EmiSweeper) -> int:
    """
    Run one job and log its summary.

    Returns:
        Number of failures, used as the exit status signal
    """
    now = utcnow()

    if job == "sweep":
        summary = await sweeper.process_overdue_emis(now)
        failures = summary.failed
    elif job == "reminders":
        summary = await sweeper.send_payment_reminders(now)
        failures = 0
    elif job == "repair-all":
        summary = await sweeper.fix_all_emi_status_inconsistencies(now)
        failures = len(summary.errors)
    else:
        raise ValueError(f"Unknown job: {job}")

    logger.info(
        "emi_job_finished",
        job=job,
        summary=asdict(summary) if is_dataclass(summary) else summary,
    )
    return failures


async def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="emi_jobs", description="Run scheduled EMI jobs")
    parser.add_argument("job", choices=JOBS)
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    args = parser.parse_args(argv)

    setup_logging()
    db_manager.init(args.database_url)

    sweeper = EmiSweeper(store_scope=plan_store_scope, notifier=get_notification_sender())
    try:
        failures = await run_job(args.job, sweeper)
    finally:
        await db_manager.close()

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

"""Worker process for the scheduled ledger jobs.

Runs an asyncio loop that, once a day, applies the monthly accrual for the
current month, credits service anniversaries, and on 31 December applies the
year-end carry forward. Every job is idempotent, so repeated runs within the
same period are harmless.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from datetime import date

from leave_ledger.config import get_settings
from leave_ledger.db import dispose_engine, get_session_factory
from leave_ledger.exceptions import AccrualRunAborted
from leave_ledger.services.accrual import accrue_monthly, credit_anniversaries
from leave_ledger.services.carryover import process_year_end

logger = logging.getLogger(__name__)


def is_year_end(day: date) -> bool:
    return day.month == 12 and day.day == 31


async def run_daily_jobs(today: date, stop: asyncio.Event) -> None:
    """Run every job due on ``today``; one failing job does not prevent the others."""
    session_factory = get_session_factory()

    try:
        await accrue_monthly(session_factory, today.year, today.month, cancel_event=stop)
    except AccrualRunAborted as exc:
        logger.error("Monthly accrual aborted for %s: %s", today, exc.message)  # noqa: TRY400
    except Exception:
        logger.exception("Monthly accrual failed for %s", today)

    if stop.is_set():
        return

    try:
        await credit_anniversaries(session_factory, today, cancel_event=stop)
    except AccrualRunAborted as exc:
        logger.error("Anniversary credits aborted for %s: %s", today, exc.message)  # noqa: TRY400
    except Exception:
        logger.exception("Anniversary credits failed for %s", today)

    if stop.is_set() or not is_year_end(today):
        return

    try:
        await process_year_end(session_factory, today.year, cancel_event=stop)
    except AccrualRunAborted as exc:
        logger.error("Year-end processing aborted for %d: %s", today.year, exc.message)  # noqa: TRY400
    except Exception:
        logger.exception("Year-end processing failed for %d", today.year)


async def run_accrual_loop(stop: asyncio.Event | None = None) -> None:
    """Main worker loop. Returns once ``stop`` is set."""
    if stop is None:
        stop = asyncio.Event()
    interval = get_settings().worker_interval_seconds

    logger.info("Ledger worker started (interval=%ds)", interval)
    while not stop.is_set():
        await run_daily_jobs(date.today(), stop)
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(stop.wait(), timeout=interval)

    logger.info("Ledger worker stopped")


async def _serve() -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)
    try:
        await run_accrual_loop(stop)
    finally:
        await dispose_engine()


def main() -> None:
    """Entry point for the worker process."""
    logging.basicConfig(level=get_settings().log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    asyncio.run(_serve())


if __name__ == "__main__":
    main()

"""Per-employee batch runner shared by the scheduled ledger jobs.

Each employee is processed in its own session and transaction by a small pool
of worker tasks. Failures are isolated per employee, except for a store outage
which stops the whole run.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from leave_ledger.config import get_settings
from leave_ledger.exceptions import AccrualRunAborted, StoreUnavailable
from leave_ledger.schemas.accrual import BatchRunResponse

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from leave_ledger.models.enums import RunKind
    from leave_ledger.services.employee import EmployeeInfo

logger = logging.getLogger(__name__)

SYSTEM_ACTOR_ID = uuid.UUID(int=0)


class Outcome(enum.StrEnum):
    """What happened to one employee in a batch run."""

    CREDITED = "CREDITED"
    SKIPPED = "SKIPPED"


EmployeeJob = Callable[["AsyncSession", "EmployeeInfo"], Awaitable[Outcome]]


@dataclass
class BatchRunResult:
    """Summary of a batch run."""

    kind: str
    period: str
    processed: int = 0
    credited: int = 0
    skipped: int = 0
    errors: int = 0
    cancelled: bool = False

    def to_response(self) -> BatchRunResponse:
        return BatchRunResponse(
            kind=self.kind,
            period=self.period,
            processed=self.processed,
            credited=self.credited,
            skipped=self.skipped,
            errors=self.errors,
            cancelled=self.cancelled,
        )


async def run_batch(
    session_factory: async_sessionmaker[AsyncSession],
    employees: Sequence[EmployeeInfo],
    job: EmployeeJob,
    *,
    kind: RunKind,
    period: str,
    concurrency: int | None = None,
    cancel_event: asyncio.Event | None = None,
) -> BatchRunResult:
    """Run ``job`` once per employee and tally the outcomes.

    Cancellation is checked before each employee; work already committed is
    kept. A ``StoreUnavailable`` from any employee stops the remaining workers
    and raises ``AccrualRunAborted`` with the partial counts.
    """
    result = BatchRunResult(kind=kind.value, period=period)
    if concurrency is None:
        concurrency = get_settings().accrual_concurrency

    queue: asyncio.Queue[EmployeeInfo] = asyncio.Queue()
    for employee in employees:
        queue.put_nowait(employee)

    abort = asyncio.Event()
    outages: list[StoreUnavailable] = []

    async def worker() -> None:
        while not queue.empty():
            if abort.is_set():
                return
            if cancel_event is not None and cancel_event.is_set():
                result.cancelled = True
                return

            employee = queue.get_nowait()
            result.processed += 1
            try:
                async with session_factory() as session:
                    outcome = await job(session, employee)
            except StoreUnavailable as exc:
                logger.error("%s %s: store unavailable at employee=%s: %s", kind, period, employee.id, exc)  # noqa: TRY400
                result.errors += 1
                outages.append(exc)
                abort.set()
                return
            except Exception:
                logger.exception("%s %s failed for employee=%s", kind, period, employee.id)
                result.errors += 1
                continue

            if outcome == Outcome.CREDITED:
                result.credited += 1
            else:
                result.skipped += 1

    workers = max(1, min(concurrency, len(employees)))
    logger.info("Starting %s run for %s: employees=%d workers=%d", kind, period, len(employees), workers)
    await asyncio.gather(*(worker() for _ in range(workers)))

    if outages:
        raise AccrualRunAborted(result) from outages[0]

    logger.info(
        "%s run for %s complete: processed=%d credited=%d skipped=%d errors=%d cancelled=%s",
        kind,
        period,
        result.processed,
        result.credited,
        result.skipped,
        result.errors,
        result.cancelled,
    )
    return result

"""Accrual engine: monthly casual/sick credits and service-anniversary bonuses."""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from leave_ledger.exceptions import CapExceeded
from leave_ledger.models.enums import AuditReason, LeaveType, OperationKind, RunKind
from leave_ledger.services.balance import AlreadyApplied, balance_of, upsert_balance
from leave_ledger.services.batch import SYSTEM_ACTOR_ID, BatchRunResult, Outcome, run_batch
from leave_ledger.services.employee import get_employee_service, list_accrual_roster
from leave_ledger.services.validator import (
    ANNIVERSARY_CREDITS,
    MONTHLY_CASUAL_ACCRUAL,
    MONTHLY_SICK_ACCRUAL,
    check_adjustment,
)

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Mapping
    from decimal import Decimal

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from leave_ledger.models.balance import LeaveBalance
    from leave_ledger.services.balance import BalancePlan
    from leave_ledger.services.employee import EmployeeInfo, EmployeeService

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pure computation helpers (no DB)
# ---------------------------------------------------------------------------


def monthly_period(year: int, month: int) -> str:
    """Idempotence period key for a monthly accrual, e.g. ``2025-06``."""
    if not 1 <= month <= 12:
        msg = f"month must be between 1 and 12, got {month}"
        raise ValueError(msg)
    return f"{year:04d}-{month:02d}"


def _monthly_plan(current: LeaveBalance) -> Mapping[LeaveType, Decimal]:
    """Both credits or neither: a cap breach on either side skips the employee."""
    for leave_type, amount in ((LeaveType.CASUAL, MONTHLY_CASUAL_ACCRUAL), (LeaveType.SICK, MONTHLY_SICK_ACCRUAL)):
        check_adjustment(balance_of(current, leave_type), leave_type, amount, OperationKind.CREDIT)
    return {LeaveType.CASUAL: MONTHLY_CASUAL_ACCRUAL, LeaveType.SICK: MONTHLY_SICK_ACCRUAL}


def anniversary_on(joined: date, years: int) -> date:
    """Date of the ``years``-th service anniversary (29 Feb falls back to 28 Feb)."""
    try:
        return joined.replace(year=joined.year + years)
    except ValueError:
        return date(joined.year + years, 2, 28)


def anniversary_due(joined: date | None, target_date: date) -> int | None:
    """Return the milestone (in years) whose anniversary is ``target_date``, if any."""
    if joined is None:
        return None
    for years in ANNIVERSARY_CREDITS:
        if anniversary_on(joined, years) == target_date:
            return years
    return None


# ---------------------------------------------------------------------------
# Per-employee credit
# ---------------------------------------------------------------------------


async def _credit_employee(
    session: AsyncSession,
    employee: EmployeeInfo,
    plan: BalancePlan,
    *,
    reason: AuditReason,
    marker: tuple[RunKind, str],
    note: str,
) -> Outcome:
    """Apply one scheduled credit; already-applied and capped employees are skipped."""
    try:
        await upsert_balance(
            session,
            employee.id,
            plan,
            actor_id=SYSTEM_ACTOR_ID,
            reason=reason,
            note=note,
            marker=marker,
        )
    except AlreadyApplied:
        logger.debug("%s %s already applied for employee=%s", marker[0], marker[1], employee.id)
        return Outcome.SKIPPED
    except CapExceeded as exc:
        logger.warning("Skipping %s for employee=%s (%s): %s", note, employee.id, employee.full_name, exc.message)
        return Outcome.SKIPPED

    logger.info("Credited %s to employee=%s (%s)", note, employee.id, employee.full_name)
    return Outcome.CREDITED


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


async def accrue_monthly(
    session_factory: async_sessionmaker[AsyncSession],
    year: int | None = None,
    month: int | None = None,
    *,
    employee_service: EmployeeService | None = None,
    concurrency: int | None = None,
    cancel_event: asyncio.Event | None = None,
) -> BatchRunResult:
    """Credit every active employee +1 casual and +0.5 sick for one month.

    Safe to re-run for the same month: each employee carries a
    ``monthly_accrual`` marker for the period, written in the same
    transaction as the credit, and is skipped once it exists.

    Args:
        session_factory: Opens one session per employee.
        year: Defaults to the current year.
        month: Defaults to the current month.
        employee_service: Source of the active roster.
        concurrency: Worker count; defaults to ``settings.accrual_concurrency``.
        cancel_event: When set, the run stops before the next employee.
    """
    today = date.today()
    period = monthly_period(year or today.year, month or today.month)
    roster = await list_accrual_roster(employee_service or get_employee_service())

    async def job(session: AsyncSession, employee: EmployeeInfo) -> Outcome:
        return await _credit_employee(
            session,
            employee,
            _monthly_plan,
            reason=AuditReason.ACCRUAL,
            marker=(RunKind.MONTHLY_ACCRUAL, period),
            note=f"monthly accrual {period}",
        )

    return await run_batch(
        session_factory,
        roster,
        job,
        kind=RunKind.MONTHLY_ACCRUAL,
        period=period,
        concurrency=concurrency,
        cancel_event=cancel_event,
    )


async def credit_anniversaries(
    session_factory: async_sessionmaker[AsyncSession],
    target_date: date | None = None,
    *,
    employee_service: EmployeeService | None = None,
    concurrency: int | None = None,
    cancel_event: asyncio.Event | None = None,
) -> BatchRunResult:
    """Grant the one-time casual bonus to employees reaching 3 or 5 years of service.

    Each milestone is applied at most once per employee, whichever day the
    job runs for.
    """
    if target_date is None:
        target_date = date.today()

    roster = [
        employee
        for employee in await list_accrual_roster(employee_service or get_employee_service())
        if anniversary_due(employee.date_of_joining, target_date) is not None
    ]

    async def job(session: AsyncSession, employee: EmployeeInfo) -> Outcome:
        years = anniversary_due(employee.date_of_joining, target_date)
        assert years is not None  # noqa: S101
        credit = ANNIVERSARY_CREDITS[years]

        def plan(current: LeaveBalance) -> Mapping[LeaveType, Decimal]:
            check_adjustment(balance_of(current, LeaveType.CASUAL), LeaveType.CASUAL, credit, OperationKind.CREDIT)
            return {LeaveType.CASUAL: credit}

        return await _credit_employee(
            session,
            employee,
            plan,
            reason=AuditReason.ANNIVERSARY,
            marker=(RunKind.ANNIVERSARY, f"{years}y"),
            note=f"{years}-year anniversary",
        )

    return await run_batch(
        session_factory,
        roster,
        job,
        kind=RunKind.ANNIVERSARY,
        period=target_date.isoformat(),
        concurrency=concurrency,
        cancel_event=cancel_event,
    )

"""Year-end carry forward.

Runs on 31 December: casual leave carries forward up to a limit, sick leave
lapses, and the LOP allowance is reset for the new year.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from leave_ledger.models.enums import AuditReason, LeaveType, RunKind
from leave_ledger.services.balance import AlreadyApplied, balance_of, upsert_balance
from leave_ledger.services.batch import SYSTEM_ACTOR_ID, BatchRunResult, Outcome, run_batch
from leave_ledger.services.employee import get_employee_service, list_accrual_roster
from leave_ledger.services.validator import (
    CARRY_FORWARD_CASUAL_LIMIT,
    YEAR_END_LOP_BALANCE,
    YEAR_END_SICK_BALANCE,
    check_reset,
)

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Mapping
    from decimal import Decimal

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from leave_ledger.models.balance import LeaveBalance
    from leave_ledger.services.employee import EmployeeInfo, EmployeeService

logger = logging.getLogger(__name__)


def year_end_targets(current: LeaveBalance) -> dict[LeaveType, Decimal]:
    """Balances an employee starts the new year with."""
    return {
        LeaveType.CASUAL: min(current.casual_balance, CARRY_FORWARD_CASUAL_LIMIT),
        LeaveType.SICK: YEAR_END_SICK_BALANCE,
        LeaveType.LOP: YEAR_END_LOP_BALANCE,
    }


def _year_end_plan(current: LeaveBalance) -> Mapping[LeaveType, Decimal]:
    deltas: dict[LeaveType, Decimal] = {}
    for leave_type, target in year_end_targets(current).items():
        check_reset(leave_type, target)
        deltas[leave_type] = target - balance_of(current, leave_type)
    return deltas


async def _carry_forward(session: AsyncSession, employee: EmployeeInfo, year: int) -> Outcome:
    try:
        result = await upsert_balance(
            session,
            employee.id,
            _year_end_plan,
            actor_id=SYSTEM_ACTOR_ID,
            reason=AuditReason.YEAR_END,
            note=f"year-end carry forward {year}",
            marker=(RunKind.YEAR_END, str(year)),
        )
    except AlreadyApplied:
        logger.debug("Year-end %d already processed for employee=%s", year, employee.id)
        return Outcome.SKIPPED

    if not result.changed:
        return Outcome.SKIPPED

    logger.info(
        "Year-end %d for employee=%s (%s): casual=%s sick=%s lop=%s",
        year,
        employee.id,
        employee.full_name,
        result.balance.casual,
        result.balance.sick,
        result.balance.lop,
    )
    return Outcome.CREDITED


async def process_year_end(
    session_factory: async_sessionmaker[AsyncSession],
    year: int | None = None,
    *,
    employee_service: EmployeeService | None = None,
    concurrency: int | None = None,
    cancel_event: asyncio.Event | None = None,
) -> BatchRunResult:
    """Apply the year-end reset to every active employee, once per year."""
    if year is None:
        year = date.today().year

    roster = await list_accrual_roster(employee_service or get_employee_service())

    async def job(session: AsyncSession, employee: EmployeeInfo) -> Outcome:
        return await _carry_forward(session, employee, year)

    return await run_batch(
        session_factory,
        roster,
        job,
        kind=RunKind.YEAR_END,
        period=str(year),
        concurrency=concurrency,
        cancel_event=cancel_event,
    )

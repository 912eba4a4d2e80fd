"""Tests for year-end carry forward.

Casual carries forward up to 8 days, sick lapses to 0 and LOP resets to 10,
once per employee per year.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from leave_ledger.models.balance import LeaveBalance
from leave_ledger.models.enums import AuditReason, LeaveType
from leave_ledger.services.balance import list_audit_entries
from leave_ledger.services.carryover import process_year_end, year_end_targets
from tests.helpers import ACCRUAL_ROSTER, EMPLOYEE_ID, SECOND_EMPLOYEE_ID, TERMINATED_ID, read_balance, set_balance

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from leave_ledger.services.employee import InMemoryEmployeeService


def _row(casual: str, sick: str, lop: str) -> LeaveBalance:
    return LeaveBalance(
        employee_id=EMPLOYEE_ID,
        casual_balance=Decimal(casual),
        sick_balance=Decimal(sick),
        lop_balance=Decimal(lop),
        created_by=EMPLOYEE_ID,
        updated_by=EMPLOYEE_ID,
    )


def test_targets_cap_casual_at_eight() -> None:
    targets = year_end_targets(_row("12.5", "3", "-2"))
    assert targets == {LeaveType.CASUAL: Decimal(8), LeaveType.SICK: Decimal(0), LeaveType.LOP: Decimal(10)}


def test_targets_keep_small_casual() -> None:
    assert year_end_targets(_row("5.5", "0", "10"))[LeaveType.CASUAL] == Decimal("5.5")


async def test_year_end_resets_balances(
    session_factory: async_sessionmaker[AsyncSession], employee_service: InMemoryEmployeeService
) -> None:
    await set_balance(session_factory, EMPLOYEE_ID, casual="12", sick="6.5", lop="-3")
    await set_balance(session_factory, SECOND_EMPLOYEE_ID, casual="4", sick="1", lop="7")

    result = await process_year_end(session_factory, 2025, employee_service=employee_service)

    first = await read_balance(session_factory, EMPLOYEE_ID)
    assert (first.casual, first.sick, first.lop) == (Decimal(8), Decimal(0), Decimal(10))
    second = await read_balance(session_factory, SECOND_EMPLOYEE_ID)
    assert (second.casual, second.sick, second.lop) == (Decimal(4), Decimal(0), Decimal(10))
    assert result.kind == "year_end"
    assert result.period == "2025"
    assert result.processed == len(ACCRUAL_ROSTER)
    assert result.errors == 0


async def test_year_end_audit(
    session_factory: async_sessionmaker[AsyncSession], employee_service: InMemoryEmployeeService
) -> None:
    await set_balance(session_factory, EMPLOYEE_ID, casual="12", sick="6.5", lop="-3")

    await process_year_end(session_factory, 2025, employee_service=employee_service)

    async with session_factory() as session:
        trail = await list_audit_entries(session, EMPLOYEE_ID)
    year_end = {item.field: item for item in trail.items if item.reason == AuditReason.YEAR_END}
    assert year_end[LeaveType.CASUAL].delta == Decimal(-4)
    assert year_end[LeaveType.SICK].delta == Decimal("-6.5")
    assert year_end[LeaveType.LOP].delta == Decimal(13)
    assert year_end[LeaveType.LOP].resulting_balance == Decimal(10)


async def test_year_end_runs_once_per_year(
    session_factory: async_sessionmaker[AsyncSession], employee_service: InMemoryEmployeeService
) -> None:
    await set_balance(session_factory, EMPLOYEE_ID, casual="12", sick="2", lop="0")
    await process_year_end(session_factory, 2025, employee_service=employee_service)

    # Balances move on after the reset; re-running the same year must not reset them again.
    await set_balance(session_factory, EMPLOYEE_ID, casual="9", sick="1", lop="4")
    second = await process_year_end(session_factory, 2025, employee_service=employee_service)

    assert second.credited == 0
    stored = await read_balance(session_factory, EMPLOYEE_ID)
    assert (stored.casual, stored.sick, stored.lop) == (Decimal(9), Decimal(1), Decimal(4))


async def test_already_reset_balance_is_skipped(
    session_factory: async_sessionmaker[AsyncSession], employee_service: InMemoryEmployeeService
) -> None:
    await set_balance(session_factory, EMPLOYEE_ID, casual="3", sick="0", lop="10")

    result = await process_year_end(session_factory, 2025, employee_service=employee_service)

    stored = await read_balance(session_factory, EMPLOYEE_ID)
    assert stored.version == 1
    # every other roster member had no balance and is reset to LOP 10
    assert result.skipped == 1
    assert result.credited == len(ACCRUAL_ROSTER) - 1


async def test_inactive_employees_untouched(
    session_factory: async_sessionmaker[AsyncSession], employee_service: InMemoryEmployeeService
) -> None:
    await set_balance(session_factory, TERMINATED_ID, casual="20", sick="5", lop="0")

    await process_year_end(session_factory, 2025, employee_service=employee_service)

    stored = await read_balance(session_factory, TERMINATED_ID)
    assert stored.casual == Decimal(20)
    assert stored.sick == Decimal(5)

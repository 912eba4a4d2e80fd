"""Shared test data and helpers: well-known employees, auth headers, balance shortcuts."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from leave_ledger.models.enums import AuditReason, EmployeeRole, EmployeeStatus, LeaveType
from leave_ledger.services.balance import get_balance, upsert_balance
from leave_ledger.services.employee import EmployeeInfo

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from leave_ledger.models.balance import LeaveBalance
    from leave_ledger.schemas.balance import BalanceResponse

SUPER_ADMIN_ID = uuid.UUID("00000000-0000-0000-0000-0000000000a1")
HR_ID = uuid.UUID("00000000-0000-0000-0000-0000000000a2")
OTHER_HR_ID = uuid.UUID("00000000-0000-0000-0000-0000000000a3")
MANAGER_ID = uuid.UUID("00000000-0000-0000-0000-0000000000a4")
EMPLOYEE_ID = uuid.UUID("00000000-0000-0000-0000-0000000000b1")
SECOND_EMPLOYEE_ID = uuid.UUID("00000000-0000-0000-0000-0000000000b2")
TERMINATED_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c1")
ON_NOTICE_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c2")
INTERN_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c3")

SEED_EMPLOYEES = [
    EmployeeInfo(
        id=SUPER_ADMIN_ID,
        first_name="Sam",
        last_name="Admin",
        email="sam@example.com",
        role=EmployeeRole.SUPER_ADMIN,
        date_of_joining=date(2018, 1, 1),
    ),
    EmployeeInfo(
        id=HR_ID,
        first_name="Hana",
        last_name="Reyes",
        email="hana@example.com",
        role=EmployeeRole.HR,
        date_of_joining=date(2021, 4, 12),
    ),
    EmployeeInfo(
        id=OTHER_HR_ID,
        first_name="Omar",
        last_name="Hale",
        email="omar@example.com",
        role=EmployeeRole.HR,
        date_of_joining=date(2022, 2, 1),
    ),
    EmployeeInfo(
        id=MANAGER_ID,
        first_name="Mia",
        last_name="Stone",
        email="mia@example.com",
        role=EmployeeRole.MANAGER,
        date_of_joining=date(2020, 6, 1),
    ),
    EmployeeInfo(
        id=EMPLOYEE_ID,
        first_name="Test",
        last_name="Employee",
        email="test@example.com",
        date_of_joining=date(2023, 1, 15),
    ),
    EmployeeInfo(
        id=SECOND_EMPLOYEE_ID,
        first_name="Second",
        last_name="Employee",
        email="second@example.com",
        date_of_joining=date(2024, 3, 10),
    ),
    EmployeeInfo(
        id=TERMINATED_ID,
        first_name="Gone",
        last_name="Away",
        email="gone@example.com",
        status=EmployeeStatus.TERMINATED,
        date_of_joining=date(2019, 5, 5),
    ),
    EmployeeInfo(
        id=ON_NOTICE_ID,
        first_name="Leaving",
        last_name="Soon",
        email="leaving@example.com",
        status=EmployeeStatus.ON_NOTICE,
        date_of_joining=date(2022, 9, 19),
    ),
    EmployeeInfo(
        id=INTERN_ID,
        first_name="Ivy",
        last_name="Intern",
        email="ivy@example.com",
        role=EmployeeRole.INTERN,
        date_of_joining=date(2025, 6, 1),
    ),
]

# Active employees in an accrual role: super admin, intern, terminated and on-notice are excluded.
ACCRUAL_ROSTER = {HR_ID, OTHER_HR_ID, MANAGER_ID, EMPLOYEE_ID, SECOND_EMPLOYEE_ID}


def headers_for(user_id: uuid.UUID, role: EmployeeRole) -> dict[str, str]:
    """Dev auth headers for a request."""
    return {"X-User-Id": str(user_id), "X-Role": role.value}


HR_HEADERS = headers_for(HR_ID, EmployeeRole.HR)
SUPER_ADMIN_HEADERS = headers_for(SUPER_ADMIN_ID, EmployeeRole.SUPER_ADMIN)
MANAGER_HEADERS = headers_for(MANAGER_ID, EmployeeRole.MANAGER)
EMPLOYEE_HEADERS = headers_for(EMPLOYEE_ID, EmployeeRole.EMPLOYEE)


async def read_balance(session_factory: async_sessionmaker[AsyncSession], employee_id: uuid.UUID) -> BalanceResponse:
    """Read a balance in its own short-lived session."""
    async with session_factory() as session:
        return await get_balance(session, employee_id)


async def set_balance(
    session_factory: async_sessionmaker[AsyncSession],
    employee_id: uuid.UUID,
    casual: str = "0",
    sick: str = "0",
    lop: str = "0",
) -> None:
    """Write absolute balances through the store, bypassing the validator."""
    targets = {LeaveType.CASUAL: Decimal(casual), LeaveType.SICK: Decimal(sick), LeaveType.LOP: Decimal(lop)}

    def plan(current: LeaveBalance) -> Mapping[LeaveType, Decimal]:
        return {leave_type: value - getattr(current, leave_type.column) for leave_type, value in targets.items()}

    async with session_factory() as session:
        await upsert_balance(
            session,
            employee_id,
            plan,
            actor_id=SUPER_ADMIN_ID,
            reason=AuditReason.MANUAL_ADJUSTMENT,
            note="test fixture",
        )

"""LOP to casual conversion."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from leave_ledger.models.enums import AuditReason, LeaveType, OperationKind
from leave_ledger.schemas.balance import ConversionResponse
from leave_ledger.services.balance import MutationResult, balance_of, upsert_balance
from leave_ledger.services.eligibility import LEDGER_ADMIN_ROLES, check_target, get_eligible_employee, require_role
from leave_ledger.services.validator import check_adjustment, check_delta, to_decimal

if TYPE_CHECKING:
    import uuid
    from collections.abc import Mapping
    from decimal import Decimal

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.models.balance import LeaveBalance
    from leave_ledger.schemas.auth import AuthContext
    from leave_ledger.services.employee import EmployeeService

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult(MutationResult):
    """Mutation result with the two balances a conversion touches."""

    @property
    def new_casual(self) -> Decimal:
        return self.balance.casual

    @property
    def new_lop(self) -> Decimal:
        return self.balance.lop

    def to_response(self) -> ConversionResponse:
        return ConversionResponse(
            balance=self.balance,
            entries=self.entries,
            new_casual=self.new_casual,
            new_lop=self.new_lop,
        )


async def convert_lop_to_casual(
    session: AsyncSession,
    *,
    employee_id: uuid.UUID,
    amount: Decimal | int | float | str,
    actor: AuthContext | None,
    employee_service: EmployeeService,
    note: str | None = None,
) -> ConversionResult:
    """Move ``amount`` days from LOP to casual in one transaction.

    Only the casual side is checked against the cap; LOP is allowed to go
    (further) negative. If the cap would be exceeded nothing is written.
    """
    actor = require_role(actor, LEDGER_ADMIN_ROLES, "convert LOP leave")
    employee = await get_eligible_employee(employee_service, employee_id)
    check_target(actor, employee)

    days = to_decimal(amount)
    check_delta(days, OperationKind.CONVERSION)

    def plan(current: LeaveBalance) -> Mapping[LeaveType, Decimal]:
        check_adjustment(balance_of(current, LeaveType.CASUAL), LeaveType.CASUAL, days, OperationKind.CONVERSION)
        return {LeaveType.CASUAL: days, LeaveType.LOP: -days}

    result = await upsert_balance(
        session,
        employee_id,
        plan,
        actor_id=actor.user_id,
        reason=AuditReason.CONVERSION,
        note=note or f"{days} LOP leave(s) converted to casual",
    )
    logger.info(
        "Converted %s LOP to casual for employee=%s actor=%s casual=%s lop=%s",
        days,
        employee_id,
        actor.user_id,
        result.balance.casual,
        result.balance.lop,
    )
    return ConversionResult(balance=result.balance, entries=result.entries)

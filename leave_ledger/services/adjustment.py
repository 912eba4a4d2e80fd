"""Manual HR adjustments and approved-leave consumption."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from leave_ledger.exceptions import Forbidden
from leave_ledger.models.enums import AuditReason, LeaveType, OperationKind, RunKind
from leave_ledger.services.balance import (
    AlreadyApplied,
    MutationResult,
    balance_of,
    find_audit_entry,
    get_balance,
    upsert_balance,
)
from leave_ledger.services.eligibility import (
    APPROVER_ROLES,
    LEDGER_ADMIN_ROLES,
    allowed_leave_types_for,
    check_target,
    get_eligible_employee,
    require_role,
)
from leave_ledger.services.validator import check_adjustment, check_delta, to_decimal

if TYPE_CHECKING:
    import uuid
    from collections.abc import Collection, Mapping
    from decimal import Decimal

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.models.balance import LeaveBalance
    from leave_ledger.schemas.auth import AuthContext
    from leave_ledger.services.employee import EmployeeService

logger = logging.getLogger(__name__)


async def manual_adjust(
    session: AsyncSession,
    *,
    employee_id: uuid.UUID,
    leave_type: LeaveType,
    delta: Decimal | int | float | str,
    actor: AuthContext | None,
    employee_service: EmployeeService,
    note: str | None = None,
    allowed_leave_types: Collection[LeaveType] | None = None,
) -> MutationResult:
    """Credit or debit one leave type on behalf of HR ("Add Leaves").

    Flow:
    1. Actor must be HR or Super Admin
    2. Leave type must be one the actor's role may adjust
    3. Target must exist, be adjustable by this actor, and not be inactive
    4. Validate the delta shape before touching the store
    5. Validate against the locked balance and write with audit
    """
    actor = require_role(actor, LEDGER_ADMIN_ROLES, "adjust leave balances")

    if allowed_leave_types is None:
        allowed_leave_types = allowed_leave_types_for(actor.role)
    if leave_type not in allowed_leave_types:
        raise Forbidden(f"Not permitted to adjust {leave_type} leave")

    employee = await get_eligible_employee(employee_service, employee_id)
    check_target(actor, employee)

    amount = to_decimal(delta)
    # is_signed() is defined for NaN and infinities; check_delta rejects them.
    kind = OperationKind.MANUAL_DEBIT if amount.is_signed() else OperationKind.CREDIT
    check_delta(amount, kind)

    def plan(current: LeaveBalance) -> Mapping[LeaveType, Decimal]:
        new_balance = check_adjustment(balance_of(current, leave_type), leave_type, amount, kind)
        return {leave_type: new_balance - balance_of(current, leave_type)}

    result = await upsert_balance(
        session,
        employee_id,
        plan,
        actor_id=actor.user_id,
        reason=AuditReason.MANUAL_ADJUSTMENT,
        note=note,
    )
    logger.info(
        "Manual adjustment employee=%s type=%s delta=%s actor=%s new_balance=%s",
        employee_id,
        leave_type,
        amount,
        actor.user_id,
        getattr(result.balance, leave_type.value),
    )
    return result


async def apply_consumption(
    session: AsyncSession,
    *,
    employee_id: uuid.UUID,
    leave_type: LeaveType,
    days: Decimal | int | float | str,
    actor: AuthContext | None,
    request_ref: str,
    employee_service: EmployeeService,
) -> MutationResult:
    """Debit approved leave from a balance, once per leave request.

    Called by the approval workflow. Casual and sick may not be overdrawn;
    LOP may go negative. Replaying the same ``request_ref`` returns the
    current balance without debiting again.
    """
    actor = require_role(actor, APPROVER_ROLES, "record leave consumption")
    await get_eligible_employee(employee_service, employee_id)

    note = f"leave request {request_ref}"
    amount = to_decimal(days).copy_negate()
    check_delta(amount, OperationKind.CONSUMPTION)

    def plan(current: LeaveBalance) -> Mapping[LeaveType, Decimal]:
        check_adjustment(balance_of(current, leave_type), leave_type, amount, OperationKind.CONSUMPTION)
        return {leave_type: amount}

    try:
        return await upsert_balance(
            session,
            employee_id,
            plan,
            actor_id=actor.user_id,
            reason=AuditReason.CONSUMPTION,
            note=note,
            marker=(RunKind.CONSUMPTION, request_ref),
        )
    except AlreadyApplied:
        logger.info("Consumption for request %s already applied to employee=%s", request_ref, employee_id)
        original = await find_audit_entry(session, employee_id, reason=AuditReason.CONSUMPTION, note=note)
        if original is None or original.field != leave_type or original.delta != amount:
            logger.warning(
                "Replay of request %s for employee=%s differs from the original debit: "
                "got type=%s delta=%s, recorded type=%s delta=%s",
                request_ref,
                employee_id,
                leave_type,
                amount,
                original.field if original else None,
                original.delta if original else None,
            )
        return MutationResult(balance=await get_balance(session, employee_id))


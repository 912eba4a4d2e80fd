from __future__ import annotations

from typing import TYPE_CHECKING

from leave_ledger.models.audit import LeaveBalanceAudit
from leave_ledger.models.enums import AuditReason, LeaveType
from leave_ledger.schemas.balance import AuditEntryResponse

if TYPE_CHECKING:
    import uuid
    from decimal import Decimal

    from sqlalchemy.ext.asyncio import AsyncSession


def build_audit_response(entry: LeaveBalanceAudit) -> AuditEntryResponse:
    """Map an audit row to its response schema."""
    return AuditEntryResponse(
        id=entry.id,
        employee_id=entry.employee_id,
        field=LeaveType(entry.field),
        delta=entry.delta,
        resulting_balance=entry.resulting_balance,
        actor_id=entry.actor_id,
        reason=AuditReason(entry.reason),
        note=entry.note,
        occurred_at=entry.occurred_at,
    )


def write_audit_entry(
    session: AsyncSession,
    *,
    employee_id: uuid.UUID,
    field: LeaveType,
    delta: Decimal,
    resulting_balance: Decimal,
    actor_id: uuid.UUID,
    reason: AuditReason,
    note: str | None = None,
) -> LeaveBalanceAudit:
    """Add an immutable audit row to the caller's transaction."""
    entry = LeaveBalanceAudit(
        employee_id=employee_id,
        field=field.value,
        delta=delta,
        resulting_balance=resulting_balance,
        actor_id=actor_id,
        reason=reason.value,
        note=note,
    )
    session.add(entry)
    return entry

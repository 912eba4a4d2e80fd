# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.balance import BALANCE_TYPE
from leave_ledger.models.base import UUIDBase, now_utc


class LeaveBalanceAudit(UUIDBase, table=True):
    """Immutable record of a single field change on a leave balance."""

    __tablename__ = "leave_balance_audit"
    __table_args__ = (sa.Index("ix_leave_balance_audit_employee_occurred", "employee_id", "occurred_at"),)

    employee_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("leave_balances.employee_id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    field: str = Field(max_length=10)
    delta: Decimal = Field(sa_type=BALANCE_TYPE)
    resulting_balance: Decimal = Field(sa_type=BALANCE_TYPE)
    actor_id: uuid.UUID
    reason: str = Field(max_length=30)
    note: str | None = Field(default=None, max_length=1000)
    occurred_at: datetime = Field(
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )

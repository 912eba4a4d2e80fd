# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UUIDBase


class LeaveAccrualRun(UUIDBase, TimestampMixin, table=True):
    """Marks a once-only ledger operation as applied for one employee."""

    __tablename__ = "leave_accrual_runs"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "run_kind", "period", name="uq_accrual_run_employee_kind_period"),
    )

    employee_id: uuid.UUID = Field(index=True)
    run_kind: str = Field(max_length=30)
    period: str = Field(max_length=255)

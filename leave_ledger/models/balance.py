# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from leave_ledger.models.base import now_utc

BALANCE_TYPE = sa.Numeric(6, 1)


class LeaveBalance(SQLModel, table=True):
    """Current casual/sick/LOP balances for one employee, updated in place."""

    __tablename__ = "leave_balances"
    __table_args__ = (
        sa.CheckConstraint("casual_balance <= 99", name="ck_leave_balances_casual_cap"),
        sa.CheckConstraint("sick_balance <= 99", name="ck_leave_balances_sick_cap"),
    )

    employee_id: uuid.UUID = Field(primary_key=True, sa_type=sa.Uuid)
    casual_balance: Decimal = Field(
        default=Decimal(0), sa_type=BALANCE_TYPE, sa_column_kwargs={"server_default": "0"}
    )
    sick_balance: Decimal = Field(default=Decimal(0), sa_type=BALANCE_TYPE, sa_column_kwargs={"server_default": "0"})
    lop_balance: Decimal = Field(default=Decimal(0), sa_type=BALANCE_TYPE, sa_column_kwargs={"server_default": "0"})
    last_updated: datetime = Field(
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
    created_by: uuid.UUID
    updated_by: uuid.UUID
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})

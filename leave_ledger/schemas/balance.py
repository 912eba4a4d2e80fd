# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from leave_ledger.models.enums import AuditReason, LeaveType

# ---------------------------------------------------------------------------
# Balance response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    """Current balances for one employee."""

    employee_id: uuid.UUID
    casual: Decimal
    sick: Decimal
    lop: Decimal
    last_updated: datetime | None = None  # None until the first mutation
    updated_by: uuid.UUID | None = None
    version: int = 0


# ---------------------------------------------------------------------------
# Audit response schemas
# ---------------------------------------------------------------------------


class AuditEntryResponse(BaseModel):
    """A single audit trail row."""

    id: uuid.UUID
    employee_id: uuid.UUID
    field: LeaveType
    delta: Decimal
    resulting_balance: Decimal
    actor_id: uuid.UUID
    reason: AuditReason
    note: str | None
    occurred_at: datetime


class AuditListResponse(BaseModel):
    """Paginated audit trail."""

    items: list[AuditEntryResponse]
    total: int


class MutationResponse(BaseModel):
    """Balance after a mutation together with the audit rows it produced."""

    balance: BalanceResponse
    entries: list[AuditEntryResponse]


class ConversionResponse(MutationResponse):
    """Result of an LOP to casual conversion."""

    new_casual: Decimal
    new_lop: Decimal


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ManualAdjustmentRequest(BaseModel):
    """Request body for an HR-issued balance adjustment."""

    leave_type: LeaveType
    delta: Decimal = Field(description="Signed days: positive to add, negative to deduct")
    note: str | None = Field(default=None, max_length=1000)


class ConversionRequest(BaseModel):
    """Request body for converting LOP into casual leave."""

    amount: Decimal = Field(description="Days moved from LOP to casual")
    note: str | None = Field(default=None, max_length=1000)


class ConsumptionRequest(BaseModel):
    """Request body posted by the approval workflow when leave is approved."""

    leave_type: LeaveType
    days: Decimal = Field(description="Positive number of days consumed")
    request_ref: str = Field(min_length=1, max_length=255)

# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from leave_ledger.api.deps import AuthDep, EmployeeServiceDep, LedgerAdminDep
from leave_ledger.db import SessionDep
from leave_ledger.exceptions import Forbidden
from leave_ledger.schemas.balance import (
    AuditListResponse,
    BalanceResponse,
    ConsumptionRequest,
    ConversionRequest,
    ConversionResponse,
    ManualAdjustmentRequest,
    MutationResponse,
)
from leave_ledger.services import balance as balance_service
from leave_ledger.services.adjustment import apply_consumption, manual_adjust
from leave_ledger.services.conversion import convert_lop_to_casual
from leave_ledger.services.eligibility import APPROVER_ROLES

employee_balance_router = APIRouter(
    prefix="/employees/{employee_id}/balance",
    tags=["balances"],
)


@employee_balance_router.get("", response_model=BalanceResponse)
async def get_employee_balance(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> BalanceResponse:
    """Get the current casual, sick and LOP balances for an employee."""
    if auth.user_id != employee_id and auth.role not in APPROVER_ROLES:
        raise Forbidden("Not permitted to view another employee's balance")
    return await balance_service.get_balance(session, employee_id)


@employee_balance_router.get("/audit", response_model=AuditListResponse)
async def get_employee_audit(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: LedgerAdminDep,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> AuditListResponse:
    """Get the paginated audit trail for an employee, newest first."""
    return await balance_service.list_audit_entries(session, employee_id, offset, limit)


@employee_balance_router.post("/adjustments", response_model=MutationResponse, status_code=status.HTTP_201_CREATED)
async def create_adjustment(
    employee_id: uuid.UUID,
    payload: ManualAdjustmentRequest,
    session: SessionDep,
    auth: LedgerAdminDep,
    employee_service: EmployeeServiceDep,
) -> MutationResponse:
    """Add or deduct leave for an employee (HR / Super Admin)."""
    result = await manual_adjust(
        session,
        employee_id=employee_id,
        leave_type=payload.leave_type,
        delta=payload.delta,
        actor=auth,
        employee_service=employee_service,
        note=payload.note,
    )
    return result.to_response()


@employee_balance_router.post("/conversions", response_model=ConversionResponse, status_code=status.HTTP_201_CREATED)
async def create_conversion(
    employee_id: uuid.UUID,
    payload: ConversionRequest,
    session: SessionDep,
    auth: LedgerAdminDep,
    employee_service: EmployeeServiceDep,
) -> ConversionResponse:
    """Convert LOP leave into casual leave."""
    result = await convert_lop_to_casual(
        session,
        employee_id=employee_id,
        amount=payload.amount,
        actor=auth,
        employee_service=employee_service,
        note=payload.note,
    )
    return result.to_response()


@employee_balance_router.post("/consumptions", response_model=MutationResponse, status_code=status.HTTP_201_CREATED)
async def create_consumption(
    employee_id: uuid.UUID,
    payload: ConsumptionRequest,
    session: SessionDep,
    auth: AuthDep,
    employee_service: EmployeeServiceDep,
) -> MutationResponse:
    """Debit approved leave from a balance.

    Idempotent per ``request_ref``: a replay returns the current balance and
    no audit entries.
    """
    result = await apply_consumption(
        session,
        employee_id=employee_id,
        leave_type=payload.leave_type,
        days=payload.days,
        actor=auth,
        request_ref=payload.request_ref,
        employee_service=employee_service,
    )
    return result.to_response()

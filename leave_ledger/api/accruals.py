# ruff: noqa: B008, TC001, TC003
"""API endpoints for manually (re-)running the scheduled ledger jobs."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query

from leave_ledger.api.deps import EmployeeServiceDep, LedgerAdminDep
from leave_ledger.db import SessionFactoryDep
from leave_ledger.schemas.accrual import BatchRunResponse
from leave_ledger.services.accrual import accrue_monthly, credit_anniversaries
from leave_ledger.services.carryover import process_year_end

accrual_trigger_router = APIRouter(
    prefix="/accruals",
    tags=["accruals"],
)


@accrual_trigger_router.post("/monthly", response_model=BatchRunResponse)
async def trigger_monthly_accrual(
    session_factory: SessionFactoryDep,
    auth: LedgerAdminDep,
    employee_service: EmployeeServiceDep,
    year: int | None = Query(default=None, ge=2000, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
) -> BatchRunResponse:
    """Run the monthly accrual for a month (defaults to the current one).

    Safe to repeat: employees already credited for the month are skipped.
    """
    result = await accrue_monthly(session_factory, year, month, employee_service=employee_service)
    return result.to_response()


@accrual_trigger_router.post("/anniversaries", response_model=BatchRunResponse)
async def trigger_anniversary_credits(
    session_factory: SessionFactoryDep,
    auth: LedgerAdminDep,
    employee_service: EmployeeServiceDep,
    target_date: date | None = Query(default=None),
) -> BatchRunResponse:
    """Grant anniversary bonuses for employees whose anniversary is ``target_date``."""
    result = await credit_anniversaries(session_factory, target_date, employee_service=employee_service)
    return result.to_response()


@accrual_trigger_router.post("/year-end", response_model=BatchRunResponse)
async def trigger_year_end(
    session_factory: SessionFactoryDep,
    auth: LedgerAdminDep,
    employee_service: EmployeeServiceDep,
    year: int | None = Query(default=None, ge=2000, le=9999),
) -> BatchRunResponse:
    """Apply the year-end carry forward for ``year`` (defaults to the current one)."""
    result = await process_year_end(session_factory, year, employee_service=employee_service)
    return result.to_response()

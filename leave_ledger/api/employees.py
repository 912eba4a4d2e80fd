# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter

from leave_ledger.api.deps import AuthDep, EmployeeServiceDep, SuperAdminDep
from leave_ledger.exceptions import AppError, EmployeeNotFound
from leave_ledger.schemas.employee import EmployeeListResponse, EmployeeResponse, UpsertEmployeeRequest
from leave_ledger.services.employee import EmployeeInfo, InMemoryEmployeeService

employees_router = APIRouter(
    prefix="/employees",
    tags=["employees"],
)


def _to_response(employee: EmployeeInfo) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        first_name=employee.first_name,
        last_name=employee.last_name,
        email=employee.email,
        role=employee.role,
        status=employee.status,
        date_of_joining=employee.date_of_joining,
    )


@employees_router.put(
    "/{employee_id}",
    response_model=EmployeeResponse,
)
async def upsert_employee(
    employee_id: uuid.UUID,
    payload: UpsertEmployeeRequest,
    auth: SuperAdminDep,
    svc: EmployeeServiceDep,
) -> EmployeeResponse:
    """Create or update an employee in the stub directory (Super Admin only)."""
    if not isinstance(svc, InMemoryEmployeeService):
        raise AppError("Employee directory is read-only", status_code=405)
    employee = EmployeeInfo(id=employee_id, **payload.model_dump())
    svc.seed(employee)
    return _to_response(employee)


@employees_router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
)
async def get_employee(
    employee_id: uuid.UUID,
    auth: AuthDep,
    svc: EmployeeServiceDep,
) -> EmployeeResponse:
    """Get employee info from the directory."""
    employee = await svc.get_employee(employee_id)
    if employee is None:
        raise EmployeeNotFound
    return _to_response(employee)


@employees_router.get(
    "",
    response_model=EmployeeListResponse,
)
async def list_employees(
    auth: AuthDep,
    svc: EmployeeServiceDep,
) -> EmployeeListResponse:
    """List all employees in the directory."""
    items = [_to_response(e) for e in await svc.list_employees()]
    return EmployeeListResponse(items=items, total=len(items))

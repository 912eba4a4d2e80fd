# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from leave_ledger.models.enums import EmployeeRole, EmployeeStatus

# Roles that receive scheduled credits (super admins and interns do not).
ACCRUAL_ROLES = frozenset({EmployeeRole.EMPLOYEE, EmployeeRole.MANAGER, EmployeeRole.HR})

# Statuses for which HR may still adjust or convert balances.
ADJUSTABLE_STATUSES = frozenset({EmployeeStatus.ACTIVE, EmployeeStatus.ON_NOTICE})


class EmployeeInfo(BaseModel):
    """Employee metadata from the user-management subsystem."""

    id: uuid.UUID
    first_name: str
    last_name: str = ""
    email: str
    role: EmployeeRole = EmployeeRole.EMPLOYEE
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    date_of_joining: date | None = None  # for anniversary credits

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def receives_accrual(self) -> bool:
        """Whether scheduled credits apply to this employee."""
        return self.status == EmployeeStatus.ACTIVE and self.role in ACCRUAL_ROLES


@runtime_checkable
class EmployeeService(Protocol):
    """Interface for the Employee Service."""

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch employee metadata. Returns None if not found."""
        ...

    async def list_employees(self) -> list[EmployeeInfo]:
        """List all employees."""
        ...


class InMemoryEmployeeService:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._employees: dict[uuid.UUID, EmployeeInfo] = {}

    def seed(self, employee: EmployeeInfo) -> None:
        """Seed an employee for testing."""
        self._employees[employee.id] = employee

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch employee metadata. Returns None if not found."""
        return self._employees.get(employee_id)

    async def list_employees(self) -> list[EmployeeInfo]:
        """List all employees."""
        return list(self._employees.values())


async def list_accrual_roster(service: EmployeeService) -> list[EmployeeInfo]:
    """Employees that scheduled credits apply to."""
    return [e for e in await service.list_employees() if e.receives_accrual]


_employee_service: EmployeeService = InMemoryEmployeeService()


def get_employee_service() -> EmployeeService:
    """FastAPI dependency for the Employee Service."""
    return _employee_service


def set_employee_service(service: EmployeeService) -> None:
    """Override the service (for testing or production wiring)."""
    global _employee_service
    _employee_service = service

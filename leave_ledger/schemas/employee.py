# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, Field

from leave_ledger.models.enums import EmployeeRole, EmployeeStatus


class UpsertEmployeeRequest(BaseModel):
    """Request body for creating or updating an employee in the stub directory."""

    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(default="", max_length=255)
    email: str = Field(min_length=1, max_length=255)
    role: EmployeeRole = EmployeeRole.EMPLOYEE
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    date_of_joining: date | None = None


class EmployeeResponse(BaseModel):
    """Employee metadata response."""

    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    role: EmployeeRole
    status: EmployeeStatus
    date_of_joining: date | None = None


class EmployeeListResponse(BaseModel):
    """List of employees."""

    items: list[EmployeeResponse]
    total: int

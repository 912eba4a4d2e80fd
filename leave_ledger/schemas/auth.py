# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from leave_ledger.models.enums import EmployeeRole


class AuthContext(BaseModel):
    """Dev auth context extracted from request headers."""

    user_id: uuid.UUID
    role: EmployeeRole = EmployeeRole.EMPLOYEE

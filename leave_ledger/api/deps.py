# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header

from leave_ledger.models.enums import EmployeeRole
from leave_ledger.schemas.auth import AuthContext
from leave_ledger.services.eligibility import LEDGER_ADMIN_ROLES, require_role
from leave_ledger.services.employee import EmployeeService, get_employee_service


async def get_auth_context(
    x_user_id: uuid.UUID = Header(),
    x_role: EmployeeRole = Header(default=EmployeeRole.EMPLOYEE),
) -> AuthContext:
    """Extract dev auth context from request headers."""
    return AuthContext(user_id=x_user_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_ledger_admin(
    auth: AuthDep,
) -> AuthContext:
    """Require HR or Super Admin for the request."""
    return require_role(auth, LEDGER_ADMIN_ROLES, "manage leave balances")


LedgerAdminDep = Annotated[AuthContext, Depends(require_ledger_admin)]


async def require_super_admin(
    auth: AuthDep,
) -> AuthContext:
    """Require Super Admin for the request."""
    return require_role(auth, {EmployeeRole.SUPER_ADMIN}, "manage employees")


SuperAdminDep = Annotated[AuthContext, Depends(require_super_admin)]

EmployeeServiceDep = Annotated[EmployeeService, Depends(get_employee_service)]

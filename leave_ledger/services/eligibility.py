"""Who may change whose balance, and which balances they may touch."""

from __future__ import annotations

from typing import TYPE_CHECKING

from leave_ledger.exceptions import EmployeeNotEligible, EmployeeNotFound, Forbidden
from leave_ledger.models.enums import EmployeeRole, LeaveType
from leave_ledger.services.employee import ADJUSTABLE_STATUSES

if TYPE_CHECKING:
    import uuid
    from collections.abc import Collection

    from leave_ledger.schemas.auth import AuthContext
    from leave_ledger.services.employee import EmployeeInfo, EmployeeService

LEDGER_ADMIN_ROLES = frozenset({EmployeeRole.HR, EmployeeRole.SUPER_ADMIN})
APPROVER_ROLES = frozenset({EmployeeRole.MANAGER, EmployeeRole.HR, EmployeeRole.SUPER_ADMIN})

# LOP may be adjusted by Super Admin only.
_ADJUSTABLE_LEAVE_TYPES: dict[EmployeeRole, frozenset[LeaveType]] = {
    EmployeeRole.HR: frozenset({LeaveType.CASUAL, LeaveType.SICK}),
    EmployeeRole.SUPER_ADMIN: frozenset(LeaveType),
}


def allowed_leave_types_for(role: EmployeeRole) -> frozenset[LeaveType]:
    """Leave types a role may adjust manually."""
    return _ADJUSTABLE_LEAVE_TYPES.get(role, frozenset())


def require_role(actor: AuthContext | None, roles: Collection[EmployeeRole], action: str) -> AuthContext:
    """Refuse to continue without an actor holding one of ``roles``."""
    if actor is None or actor.role not in roles:
        raise Forbidden(f"Not permitted to {action}")
    return actor


async def get_eligible_employee(service: EmployeeService, employee_id: uuid.UUID) -> EmployeeInfo:
    """Fetch an employee whose balance may still change."""
    employee = await service.get_employee(employee_id)
    if employee is None:
        raise EmployeeNotFound
    if employee.status not in ADJUSTABLE_STATUSES:
        raise EmployeeNotEligible(f"Employee is {employee.status}; leave balances are frozen")
    return employee


def check_target(actor: AuthContext, employee: EmployeeInfo) -> None:
    """Apply the target rules for HR-initiated balance changes."""
    if employee.role == EmployeeRole.SUPER_ADMIN:
        raise Forbidden("Cannot change leave balances of Super Admin users")
    if actor.role == EmployeeRole.HR and (employee.id == actor.user_id or employee.role == EmployeeRole.HR):
        raise Forbidden("HR cannot change leave balances for themselves or other HR users")

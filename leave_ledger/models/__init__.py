from sqlmodel import SQLModel

from leave_ledger.models.accrual_run import LeaveAccrualRun
from leave_ledger.models.audit import LeaveBalanceAudit
from leave_ledger.models.balance import LeaveBalance
from leave_ledger.models.base import TimestampMixin, UUIDBase
from leave_ledger.models.enums import (
    AuditReason,
    EmployeeRole,
    EmployeeStatus,
    LeaveType,
    OperationKind,
    RunKind,
)

__all__ = [
    "AuditReason",
    "EmployeeRole",
    "EmployeeStatus",
    "LeaveAccrualRun",
    "LeaveBalance",
    "LeaveBalanceAudit",
    "LeaveType",
    "OperationKind",
    "RunKind",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
]

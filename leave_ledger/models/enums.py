from __future__ import annotations

import enum


class LeaveType(enum.StrEnum):
    """Balance tracked by the ledger."""

    CASUAL = "casual"
    SICK = "sick"
    LOP = "lop"

    @property
    def column(self) -> str:
        """Name of the balance column on ``leave_balances``."""
        return f"{self.value}_balance"


class AuditReason(enum.StrEnum):
    """Why a balance changed."""

    ACCRUAL = "accrual"
    MANUAL_ADJUSTMENT = "manual_adjustment"
    CONVERSION = "conversion"
    CONSUMPTION = "consumption"
    ANNIVERSARY = "anniversary"
    YEAR_END = "year_end"


class OperationKind(enum.StrEnum):
    """Rule set the validator applies to a delta."""

    CREDIT = "credit"
    MANUAL_DEBIT = "manual_debit"
    CONVERSION = "conversion"
    CONSUMPTION = "consumption"


class RunKind(enum.StrEnum):
    """Idempotence marker namespace."""

    MONTHLY_ACCRUAL = "monthly_accrual"
    ANNIVERSARY = "anniversary"
    YEAR_END = "year_end"
    CONSUMPTION = "consumption"


class EmployeeRole(enum.StrEnum):
    """Role of an employee or actor in the HR system."""

    EMPLOYEE = "employee"
    MANAGER = "manager"
    HR = "hr"
    SUPER_ADMIN = "super_admin"
    INTERN = "intern"


class EmployeeStatus(enum.StrEnum):
    """Employment status as reported by the employee directory."""

    ACTIVE = "active"
    ON_NOTICE = "on_notice"
    INACTIVE = "inactive"
    TERMINATED = "terminated"

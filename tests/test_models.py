from __future__ import annotations

import uuid
from decimal import Decimal

from leave_ledger.models import LeaveAccrualRun, LeaveBalance, LeaveBalanceAudit, SQLModel
from leave_ledger.models.enums import AuditReason, LeaveType, RunKind

EXPECTED_TABLES = {
    "leave_balances",
    "leave_balance_audit",
    "leave_accrual_runs",
}


def test_all_tables_registered() -> None:
    table_names = set(SQLModel.metadata.tables.keys())
    assert EXPECTED_TABLES.issubset(table_names)


def test_leave_balance_defaults() -> None:
    employee_id = uuid.uuid4()
    balance = LeaveBalance(employee_id=employee_id, created_by=employee_id, updated_by=employee_id)
    assert balance.casual_balance == Decimal(0)
    assert balance.sick_balance == Decimal(0)
    assert balance.lop_balance == Decimal(0)
    assert balance.version == 1
    assert balance.last_updated is not None


def test_leave_balance_cap_constraints() -> None:
    constraints = {c.name for c in LeaveBalance.__table__.constraints}  # type: ignore[attr-defined]
    assert "ck_leave_balances_casual_cap" in constraints
    assert "ck_leave_balances_sick_cap" in constraints


def test_audit_entry_instantiation() -> None:
    entry = LeaveBalanceAudit(
        employee_id=uuid.uuid4(),
        field=LeaveType.SICK.value,
        delta=Decimal("0.5"),
        resulting_balance=Decimal("4.5"),
        actor_id=uuid.uuid4(),
        reason=AuditReason.ACCRUAL.value,
    )
    assert entry.id is not None
    assert entry.note is None
    assert entry.occurred_at is not None


def test_accrual_run_unique_per_period() -> None:
    run = LeaveAccrualRun(employee_id=uuid.uuid4(), run_kind=RunKind.YEAR_END.value, period="2025")
    assert run.id is not None
    unique = [c for c in LeaveAccrualRun.__table__.constraints if c.name == "uq_accrual_run_employee_kind_period"]  # type: ignore[attr-defined]
    assert len(unique) == 1
    assert [col.name for col in unique[0].columns] == ["employee_id", "run_kind", "period"]


def test_leave_type_column_names() -> None:
    assert LeaveType.CASUAL.column == "casual_balance"
    assert LeaveType.SICK.column == "sick_balance"
    assert LeaveType.LOP.column == "lop_balance"

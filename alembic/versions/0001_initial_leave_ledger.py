"""Initial leave ledger tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | None = None
depends_on: str | None = None


def upgrade() -> None:
    op.create_table(
        "leave_balances",
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("casual_balance", sa.Numeric(6, 1), server_default="0", nullable=False),
        sa.Column("sick_balance", sa.Numeric(6, 1), server_default="0", nullable=False),
        sa.Column("lop_balance", sa.Numeric(6, 1), server_default="0", nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("created_by", sa.Uuid(), nullable=False),
        sa.Column("updated_by", sa.Uuid(), nullable=False),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        sa.CheckConstraint("casual_balance <= 99", name="ck_leave_balances_casual_cap"),
        sa.CheckConstraint("sick_balance <= 99", name="ck_leave_balances_sick_cap"),
        sa.PrimaryKeyConstraint("employee_id"),
    )

    op.create_table(
        "leave_balance_audit",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("field", sa.String(length=10), nullable=False),
        sa.Column("delta", sa.Numeric(6, 1), nullable=False),
        sa.Column("resulting_balance", sa.Numeric(6, 1), nullable=False),
        sa.Column("actor_id", sa.Uuid(), nullable=False),
        sa.Column("reason", sa.String(length=30), nullable=False),
        sa.Column("note", sa.String(length=1000), nullable=True),
        sa.Column("occurred_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["employee_id"], ["leave_balances.employee_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_leave_balance_audit_employee_id", "leave_balance_audit", ["employee_id"])
    op.create_index("ix_leave_balance_audit_employee_occurred", "leave_balance_audit", ["employee_id", "occurred_at"])

    op.create_table(
        "leave_accrual_runs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("run_kind", sa.String(length=30), nullable=False),
        sa.Column("period", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_id", "run_kind", "period", name="uq_accrual_run_employee_kind_period"),
    )
    op.create_index("ix_leave_accrual_runs_employee_id", "leave_accrual_runs", ["employee_id"])


def downgrade() -> None:
    op.drop_index("ix_leave_accrual_runs_employee_id", table_name="leave_accrual_runs")
    op.drop_table("leave_accrual_runs")
    op.drop_index("ix_leave_balance_audit_employee_occurred", table_name="leave_balance_audit")
    op.drop_index("ix_leave_balance_audit_employee_id", table_name="leave_balance_audit")
    op.drop_table("leave_balance_audit")
    op.drop_table("leave_balances")

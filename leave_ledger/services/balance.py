"""Balance store: the only code that writes ``leave_balances``.

Writes follow one pattern. Inside a single transaction the row is read
(``SELECT ... FOR UPDATE`` where the database supports it), the caller's plan
turns the current balance into per-field deltas (running the validator), and
the new values are written with a compare-and-set on ``version``. A new row is
inserted with ``ON CONFLICT DO NOTHING``. When the write touches no row a
concurrent writer got there first, so the transaction is rolled back and the
whole read-plan-write sequence is retried.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlmodel import col

from leave_ledger.exceptions import AppError, StoreConflict, StoreError, StoreUnavailable
from leave_ledger.models.accrual_run import LeaveAccrualRun
from leave_ledger.models.audit import LeaveBalanceAudit
from leave_ledger.models.balance import LeaveBalance
from leave_ledger.models.base import now_utc
from leave_ledger.models.enums import AuditReason, LeaveType, RunKind
from leave_ledger.schemas.balance import (
    AuditEntryResponse,
    AuditListResponse,
    BalanceResponse,
    MutationResponse,
)
from leave_ledger.services.audit import build_audit_response, write_audit_entry

if TYPE_CHECKING:
    import uuid
    from datetime import datetime

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

MAX_CONFLICT_ATTEMPTS = 3
CONFLICT_BACKOFF_SECONDS = 0.05

# Receives the balance as read inside the transaction, returns signed deltas.
BalancePlan = Callable[[LeaveBalance], Mapping[LeaveType, Decimal]]

_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, OSError)


class AlreadyApplied(Exception):  # noqa: N818
    """The idempotence marker for this operation already exists."""

    def __init__(self, employee_id: uuid.UUID, run_kind: RunKind, period: str) -> None:
        self.employee_id = employee_id
        self.run_kind = run_kind
        self.period = period
        super().__init__(f"{run_kind} {period} already applied for employee {employee_id}")


@dataclass
class MutationResult:
    """Balance after a write plus the audit rows written with it."""

    balance: BalanceResponse
    entries: list[AuditEntryResponse] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.entries)

    def to_response(self) -> MutationResponse:
        return MutationResponse(balance=self.balance, entries=self.entries)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def balance_of(balance: LeaveBalance, leave_type: LeaveType) -> Decimal:
    """Read one leave type's balance from a row."""
    value: Decimal = getattr(balance, leave_type.column)
    return value


def _empty_balance(employee_id: uuid.UUID) -> LeaveBalance:
    """Transient all-zero row used when an employee has no balance yet."""
    return LeaveBalance(
        employee_id=employee_id,
        casual_balance=Decimal(0),
        sick_balance=Decimal(0),
        lop_balance=Decimal(0),
        created_by=employee_id,
        updated_by=employee_id,
        version=0,
    )


def build_balance_response(balance: LeaveBalance | None, employee_id: uuid.UUID) -> BalanceResponse:
    """Map a balance row (or its absence) to the response schema."""
    if balance is None:
        return BalanceResponse(employee_id=employee_id, casual=Decimal(0), sick=Decimal(0), lop=Decimal(0))
    return BalanceResponse(
        employee_id=balance.employee_id,
        casual=balance.casual_balance,
        sick=balance.sick_balance,
        lop=balance.lop_balance,
        last_updated=balance.last_updated,
        updated_by=balance.updated_by,
        version=balance.version,
    )


async def _load_for_update(session: AsyncSession, employee_id: uuid.UUID) -> LeaveBalance | None:
    result = await session.execute(
        select(LeaveBalance)
        .where(col(LeaveBalance.employee_id) == employee_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _marker_exists(session: AsyncSession, employee_id: uuid.UUID, run_kind: RunKind, period: str) -> bool:
    result = await session.execute(
        select(func.count())
        .select_from(LeaveAccrualRun)
        .where(
            col(LeaveAccrualRun.employee_id) == employee_id,
            col(LeaveAccrualRun.run_kind) == run_kind.value,
            col(LeaveAccrualRun.period) == period,
        )
    )
    return result.scalar_one() > 0


def _insert_ignoring_conflict(session: AsyncSession) -> Any:
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(LeaveBalance).on_conflict_do_nothing(index_elements=["employee_id"])
    if dialect == "sqlite":
        return sqlite.insert(LeaveBalance).on_conflict_do_nothing(index_elements=["employee_id"])
    return insert(LeaveBalance)


async def _compare_and_set(
    session: AsyncSession,
    seen: LeaveBalance,
    new_values: Mapping[LeaveType, Decimal],
    *,
    actor_id: uuid.UUID,
    now: datetime,
    exists: bool,
) -> bool:
    """Write ``new_values`` if the row is still at the version we read.

    Returns False when another transaction changed (or created) the row first.
    """
    columns = {leave_type.column: value for leave_type, value in new_values.items()}

    if exists:
        result = await session.execute(
            update(LeaveBalance)
            .where(
                col(LeaveBalance.employee_id) == seen.employee_id,
                col(LeaveBalance.version) == seen.version,
            )
            .values(**columns, version=seen.version + 1, last_updated=now, updated_by=actor_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]

    stmt = _insert_ignoring_conflict(session).values(
        employee_id=seen.employee_id,
        **columns,
        version=1,
        last_updated=now,
        created_by=actor_id,
        updated_by=actor_id,
    )
    try:
        result = await session.execute(stmt)
    except IntegrityError:
        return False
    return result.rowcount == 1  # type: ignore[attr-defined]


async def _attempt_mutation(
    session: AsyncSession,
    employee_id: uuid.UUID,
    plan: BalancePlan,
    *,
    actor_id: uuid.UUID,
    reason: AuditReason,
    note: str | None,
    marker: tuple[RunKind, str] | None,
) -> MutationResult | None:
    """One read-plan-write pass. Returns None on a lost compare-and-set."""
    current = await _load_for_update(session, employee_id)
    exists = current is not None
    seen = current if current is not None else _empty_balance(employee_id)

    if marker is not None and await _marker_exists(session, employee_id, *marker):
        raise AlreadyApplied(employee_id, *marker)

    deltas = {leave_type: delta for leave_type, delta in plan(seen).items() if delta != 0}
    if not deltas:
        unchanged = build_balance_response(current, employee_id)
        await session.rollback()
        return MutationResult(balance=unchanged)

    new_values = {leave_type: balance_of(seen, leave_type) for leave_type in LeaveType}
    for leave_type, delta in deltas.items():
        new_values[leave_type] += delta

    now = now_utc()
    if not await _compare_and_set(session, seen, new_values, actor_id=actor_id, now=now, exists=exists):
        return None

    entries: list[LeaveBalanceAudit] = [
        write_audit_entry(
            session,
            employee_id=employee_id,
            field=leave_type,
            delta=delta,
            resulting_balance=new_values[leave_type],
            actor_id=actor_id,
            reason=reason,
            note=note,
        )
        for leave_type, delta in deltas.items()
    ]
    if marker is not None:
        session.add(LeaveAccrualRun(employee_id=employee_id, run_kind=marker[0].value, period=marker[1]))

    try:
        await session.flush()
    except IntegrityError:
        if marker is None:
            raise
        raise AlreadyApplied(employee_id, *marker) from None

    result = MutationResult(
        balance=BalanceResponse(
            employee_id=employee_id,
            casual=new_values[LeaveType.CASUAL],
            sick=new_values[LeaveType.SICK],
            lop=new_values[LeaveType.LOP],
            last_updated=now,
            updated_by=actor_id,
            version=seen.version + 1,
        ),
        entries=[build_audit_response(entry) for entry in entries],
    )
    await session.commit()
    return result


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_balance(session: AsyncSession, employee_id: uuid.UUID) -> BalanceResponse:
    """Current balances for an employee; zeros when no row exists yet."""
    result = await session.execute(select(LeaveBalance).where(col(LeaveBalance.employee_id) == employee_id))
    return build_balance_response(result.scalar_one_or_none(), employee_id)


async def list_audit_entries(
    session: AsyncSession,
    employee_id: uuid.UUID,
    offset: int = 0,
    limit: int = 50,
) -> AuditListResponse:
    """Paginated audit trail for an employee, newest first."""
    base_filter = col(LeaveBalanceAudit.employee_id) == employee_id

    count_result = await session.execute(select(func.count()).select_from(LeaveBalanceAudit).where(base_filter))
    total = count_result.scalar_one()

    entries_result = await session.execute(
        select(LeaveBalanceAudit)
        .where(base_filter)
        .order_by(col(LeaveBalanceAudit.occurred_at).desc(), col(LeaveBalanceAudit.id))
        .offset(offset)
        .limit(limit)
    )
    entries = list(entries_result.scalars().all())

    return AuditListResponse(items=[build_audit_response(e) for e in entries], total=total)


async def find_audit_entry(
    session: AsyncSession,
    employee_id: uuid.UUID,
    *,
    reason: AuditReason,
    note: str,
) -> LeaveBalanceAudit | None:
    """Earliest audit row for an employee with this reason and note."""
    result = await session.execute(
        select(LeaveBalanceAudit)
        .where(
            col(LeaveBalanceAudit.employee_id) == employee_id,
            col(LeaveBalanceAudit.reason) == reason,
            col(LeaveBalanceAudit.note) == note,
        )
        .order_by(col(LeaveBalanceAudit.occurred_at), col(LeaveBalanceAudit.id))
        .limit(1)
    )
    return result.scalars().first()


# ---------------------------------------------------------------------------
# Write path
# ---------------------------------------------------------------------------


async def upsert_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    plan: BalancePlan,
    *,
    actor_id: uuid.UUID,
    reason: AuditReason,
    note: str | None = None,
    marker: tuple[RunKind, str] | None = None,
    max_attempts: int = MAX_CONFLICT_ATTEMPTS,
) -> MutationResult:
    """Apply ``plan`` to an employee's balance atomically and commit.

    Creates the row on first touch. Audit rows and the optional idempotence
    ``marker`` commit in the same transaction as the balance change. Raises
    the validator's errors unchanged, ``AlreadyApplied`` for a duplicate
    marker, ``StoreConflict`` once ``max_attempts`` compare-and-set rounds are
    lost, and ``StoreUnavailable`` / ``StoreError`` for database failures.
    """
    operation = reason.value

    for attempt in range(1, max_attempts + 1):
        try:
            result = await _attempt_mutation(
                session,
                employee_id,
                plan,
                actor_id=actor_id,
                reason=reason,
                note=note,
                marker=marker,
            )
        except (AppError, AlreadyApplied):
            await session.rollback()
            raise
        except _UNAVAILABLE_ERRORS as exc:
            logger.exception("Database unavailable during %s for employee=%s", operation, employee_id)
            await session.rollback()
            raise StoreUnavailable("database unavailable", employee_id=employee_id, operation=operation) from exc
        except SQLAlchemyError as exc:
            logger.exception("Database error during %s for employee=%s", operation, employee_id)
            await session.rollback()
            raise StoreError("database error", employee_id=employee_id, operation=operation) from exc

        if result is not None:
            return result

        await session.rollback()
        logger.warning(
            "Balance write conflict for employee=%s operation=%s attempt=%d/%d",
            employee_id,
            operation,
            attempt,
            max_attempts,
        )
        if attempt < max_attempts:
            await asyncio.sleep(CONFLICT_BACKOFF_SECONDS * 2 ** (attempt - 1))

    raise StoreConflict(
        f"balance changed concurrently {max_attempts} times, try again",
        employee_id=employee_id,
        operation=operation,
    )

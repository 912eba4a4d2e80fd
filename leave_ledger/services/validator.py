"""Adjustment validator: the single definition of the ledger's numeric rules.

Every function here is pure. Callers hand in the balance they read inside
their transaction and get back the balance they are allowed to write, or one
of the validation exceptions.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from leave_ledger.exceptions import (
    CapExceeded,
    InvalidGranularity,
    InvalidMagnitude,
    NegativeBalanceDisallowed,
)
from leave_ledger.models.enums import LeaveType, OperationKind

# ---------------------------------------------------------------------------
# Fixed policy
# ---------------------------------------------------------------------------

MONTHLY_CASUAL_ACCRUAL = Decimal("1.0")
MONTHLY_SICK_ACCRUAL = Decimal("0.5")
BALANCE_CAP = Decimal(99)
HALF_DAY = Decimal("0.5")
MAGNITUDE_LIMIT = Decimal(100)

# Years of service -> one-time casual bonus.
ANNIVERSARY_CREDITS: dict[int, Decimal] = {3: Decimal(3), 5: Decimal(5)}

CARRY_FORWARD_CASUAL_LIMIT = Decimal(8)
YEAR_END_SICK_BALANCE = Decimal(0)
YEAR_END_LOP_BALANCE = Decimal(10)

CAPPED_TYPES = frozenset({LeaveType.CASUAL, LeaveType.SICK})

_CREDIT_KINDS = frozenset({OperationKind.CREDIT, OperationKind.CONVERSION})


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert a user-supplied number to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    try:
        if isinstance(value, float):
            return Decimal(repr(value))
        return Decimal(value)
    except (InvalidOperation, ValueError) as exc:
        raise InvalidMagnitude(f"{value!r} is not a number") from exc


def _check_granularity(amount: Decimal, what: str) -> None:
    if amount % HALF_DAY != 0:
        raise InvalidGranularity(f"{what} {amount} is not a multiple of {HALF_DAY} days")


def check_delta(delta: Decimal, kind: OperationKind) -> None:
    """Validate the shape of a delta independent of any balance."""
    if not delta.is_finite() or abs(delta) >= MAGNITUDE_LIMIT:
        raise InvalidMagnitude(f"Delta {delta} must be smaller than {MAGNITUDE_LIMIT} days")

    _check_granularity(delta, "Delta")

    if delta == 0:
        raise InvalidMagnitude("Delta must not be zero")

    if kind in _CREDIT_KINDS and delta <= 0:
        raise InvalidMagnitude(f"A {kind} must be a positive number of days, got {delta}")
    if kind not in _CREDIT_KINDS and delta >= 0:
        raise InvalidMagnitude(f"A {kind} must be a negative number of days, got {delta}")


def check_adjustment(
    current: Decimal,
    leave_type: LeaveType,
    delta: Decimal,
    kind: OperationKind,
) -> Decimal:
    """Return the balance after applying ``delta``, or raise why it is not allowed.

    Credits and conversions may not lift casual or sick above the cap. Debits
    and consumptions may not take casual or sick below zero. LOP is neither
    capped nor floored here.
    """
    check_delta(delta, kind)

    if kind == OperationKind.CONVERSION and leave_type != LeaveType.CASUAL:
        raise InvalidMagnitude(f"Conversion credits casual leave, not {leave_type}")

    new_balance = current + delta

    if leave_type in CAPPED_TYPES:
        if new_balance > BALANCE_CAP:
            raise CapExceeded(
                f"Cannot add {delta} {leave_type} leave(s). Current balance: {current}, "
                f"maximum: {BALANCE_CAP}, total would be: {new_balance}"
            )
        if new_balance < 0 and kind not in _CREDIT_KINDS:
            raise NegativeBalanceDisallowed(
                f"Cannot deduct {-delta} {leave_type} leave(s). Current balance: {current}"
            )

    return new_balance


def check_reset(leave_type: LeaveType, target: Decimal) -> Decimal:
    """Validate an absolute balance written by a reset such as year-end."""
    _check_granularity(target, "Balance")
    if leave_type in CAPPED_TYPES and target > BALANCE_CAP:
        raise CapExceeded(f"{leave_type} balance {target} exceeds maximum of {BALANCE_CAP}")
    return target

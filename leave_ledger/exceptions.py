from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

if TYPE_CHECKING:
    import uuid

    from leave_ledger.services.batch import BatchRunResult


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int


class AppError(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Validation rejections (never reach the store)
# ---------------------------------------------------------------------------


class LedgerValidationError(AppError):
    """A balance change was rejected by the adjustment validator."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST)


class InvalidGranularity(LedgerValidationError):
    """Delta is not a multiple of a half day."""


class InvalidMagnitude(LedgerValidationError):
    """Delta is zero, has the wrong sign, is not finite, or is implausibly large."""


class CapExceeded(LedgerValidationError):
    """Resulting casual or sick balance would exceed the cap."""


class NegativeBalanceDisallowed(LedgerValidationError):
    """Resulting casual or sick balance would drop below zero."""


# ---------------------------------------------------------------------------
# Business and authorization rules
# ---------------------------------------------------------------------------


class EmployeeNotFound(AppError):
    def __init__(self, message: str = "Employee not found") -> None:
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class EmployeeNotEligible(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


class Forbidden(AppError):
    def __init__(self, message: str = "Not permitted") -> None:
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN)


# ---------------------------------------------------------------------------
# Store errors
# ---------------------------------------------------------------------------


class StoreError(AppError):
    """A database failure while mutating an employee's balance."""

    def __init__(
        self,
        message: str,
        *,
        employee_id: uuid.UUID | None = None,
        operation: str | None = None,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    ) -> None:
        self.employee_id = employee_id
        self.operation = operation
        if employee_id is not None or operation is not None:
            message = f"{operation or 'operation'} for employee {employee_id}: {message}"
        super().__init__(message, status_code=status_code)


class StoreConflict(StoreError):
    """Optimistic concurrency retries exhausted."""

    def __init__(
        self, message: str, *, employee_id: uuid.UUID | None = None, operation: str | None = None
    ) -> None:
        super().__init__(
            message, employee_id=employee_id, operation=operation, status_code=status.HTTP_409_CONFLICT
        )


class StoreUnavailable(StoreError):
    """The database cannot be reached."""

    def __init__(
        self, message: str, *, employee_id: uuid.UUID | None = None, operation: str | None = None
    ) -> None:
        super().__init__(
            message, employee_id=employee_id, operation=operation, status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )


class AccrualRunAborted(StoreUnavailable):
    """A batch run stopped because the store became unavailable."""

    def __init__(self, result: BatchRunResult) -> None:
        self.result = result
        super().__init__(
            f"{result.kind} run for {result.period} aborted: store unavailable "
            f"(credited={result.credited} skipped={result.skipped} errors={result.errors})"
        )


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]

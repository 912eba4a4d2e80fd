from __future__ import annotations

from pydantic import BaseModel


class BatchRunResponse(BaseModel):
    """Summary of a monthly accrual, anniversary or year-end run."""

    kind: str
    period: str
    processed: int
    credited: int
    skipped: int
    errors: int
    cancelled: bool

"""HTTP tests for the manual accrual, anniversary and year-end triggers."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from tests.helpers import (
    ACCRUAL_ROSTER,
    EMPLOYEE_ID,
    HR_HEADERS,
    MANAGER_HEADERS,
    SUPER_ADMIN_HEADERS,
    read_balance,
    set_balance,
)

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

MONTHLY_URL = "/accruals/monthly"
ANNIVERSARIES_URL = "/accruals/anniversaries"
YEAR_END_URL = "/accruals/year-end"


async def test_monthly_trigger(async_client: AsyncClient, session_factory: async_sessionmaker[AsyncSession]) -> None:
    await set_balance(session_factory, EMPLOYEE_ID, casual="4", sick="4", lop="4")

    resp = await async_client.post(MONTHLY_URL, params={"year": 2025, "month": 6}, headers=HR_HEADERS)

    assert resp.status_code == 200
    data = resp.json()
    assert data == {
        "kind": "monthly_accrual",
        "period": "2025-06",
        "processed": len(ACCRUAL_ROSTER),
        "credited": len(ACCRUAL_ROSTER),
        "skipped": 0,
        "errors": 0,
        "cancelled": False,
    }
    stored = await read_balance(session_factory, EMPLOYEE_ID)
    assert (stored.casual, stored.sick, stored.lop) == (Decimal(5), Decimal("4.5"), Decimal(4))


async def test_monthly_trigger_replay(async_client: AsyncClient) -> None:
    params = {"year": 2025, "month": 6}
    await async_client.post(MONTHLY_URL, params=params, headers=SUPER_ADMIN_HEADERS)
    resp = await async_client.post(MONTHLY_URL, params=params, headers=SUPER_ADMIN_HEADERS)

    assert resp.status_code == 200
    assert resp.json()["credited"] == 0
    assert resp.json()["skipped"] == len(ACCRUAL_ROSTER)


async def test_monthly_trigger_rejects_bad_month(async_client: AsyncClient) -> None:
    resp = await async_client.post(MONTHLY_URL, params={"year": 2025, "month": 13}, headers=HR_HEADERS)
    assert resp.status_code == 422


async def test_monthly_trigger_requires_ledger_admin(async_client: AsyncClient) -> None:
    resp = await async_client.post(MONTHLY_URL, params={"year": 2025, "month": 6}, headers=MANAGER_HEADERS)
    assert resp.status_code == 403


async def test_anniversary_trigger(
    async_client: AsyncClient, session_factory: async_sessionmaker[AsyncSession]
) -> None:
    # EMPLOYEE_ID joined 2023-01-15
    resp = await async_client.post(ANNIVERSARIES_URL, params={"target_date": "2026-01-15"}, headers=HR_HEADERS)

    assert resp.status_code == 200
    assert resp.json()["credited"] == 1
    assert resp.json()["period"] == "2026-01-15"
    assert (await read_balance(session_factory, EMPLOYEE_ID)).casual == Decimal(3)


async def test_year_end_trigger(async_client: AsyncClient, session_factory: async_sessionmaker[AsyncSession]) -> None:
    await set_balance(session_factory, EMPLOYEE_ID, casual="20", sick="3", lop="1")

    resp = await async_client.post(YEAR_END_URL, params={"year": 2025}, headers=HR_HEADERS)

    assert resp.status_code == 200
    assert resp.json()["kind"] == "year_end"
    stored = await read_balance(session_factory, EMPLOYEE_ID)
    assert (stored.casual, stored.sick, stored.lop) == (Decimal(8), Decimal(0), Decimal(10))


async def test_year_end_requires_ledger_admin(async_client: AsyncClient) -> None:
    resp = await async_client.post(YEAR_END_URL, params={"year": 2025}, headers=MANAGER_HEADERS)
    assert resp.status_code == 403

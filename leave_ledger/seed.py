"""Seed script for development data.

Run with:  python -m leave_ledger.seed
Requires the API to be running on BASE_URL.
"""

from __future__ import annotations

import asyncio
import sys

import httpx

BASE_URL = "http://localhost:8000"
SUPER_ADMIN_ID = "00000000-0000-0000-0000-000000000001"

SUPER_ADMIN_HEADERS = {
    "Content-Type": "application/json",
    "X-User-Id": SUPER_ADMIN_ID,
    "X-Role": "super_admin",
}

# Well-known employee UUIDs
HR_ID = "00000000-0000-0000-0000-000000000002"
ALICE_ID = "00000000-0000-0000-0000-000000000003"
BOB_ID = "00000000-0000-0000-0000-000000000004"
CAROL_ID = "00000000-0000-0000-0000-000000000005"

EMPLOYEES = [
    {
        "id": SUPER_ADMIN_ID,
        "first_name": "Sam",
        "last_name": "Admin",
        "email": "sam.admin@example.com",
        "role": "super_admin",
        "date_of_joining": "2018-01-01",
    },
    {
        "id": HR_ID,
        "first_name": "Hana",
        "last_name": "Reyes",
        "email": "hana.reyes@example.com",
        "role": "hr",
        "date_of_joining": "2021-04-12",
    },
    {
        "id": ALICE_ID,
        "first_name": "Alice",
        "last_name": "Johnson",
        "email": "alice.johnson@example.com",
        "role": "manager",
        "date_of_joining": "2020-06-01",
    },
    {
        "id": BOB_ID,
        "first_name": "Bob",
        "last_name": "Smith",
        "email": "bob.smith@example.com",
        "date_of_joining": "2023-01-15",
    },
    {
        "id": CAROL_ID,
        "first_name": "Carol",
        "last_name": "Williams",
        "email": "carol.williams@example.com",
        "status": "on_notice",
        "date_of_joining": "2022-09-19",
    },
]

# (employee_id, leave_type, delta, note)
OPENING_BALANCES = [
    (HR_ID, "casual", "6", "Opening balance"),
    (ALICE_ID, "casual", "12", "Opening balance"),
    (ALICE_ID, "sick", "4.5", "Opening balance"),
    (BOB_ID, "casual", "3", "Opening balance"),
    (BOB_ID, "lop", "-2", "Unpaid leave carried over"),
    (CAROL_ID, "casual", "7.5", "Opening balance"),
]


def _check(response: httpx.Response, what: str) -> None:
    if response.status_code >= 400:
        print(f"  FAILED {what}: {response.status_code} {response.text}")
        sys.exit(1)
    print(f"  {what}: {response.status_code}")


async def seed() -> None:
    async with httpx.AsyncClient(base_url=BASE_URL, headers=SUPER_ADMIN_HEADERS, timeout=30) as client:
        print("Seeding employees...")
        for employee in EMPLOYEES:
            body = {k: v for k, v in employee.items() if k != "id"}
            _check(await client.put(f"/employees/{employee['id']}", json=body), employee["first_name"])

        print("Seeding opening balances...")
        for employee_id, leave_type, delta, note in OPENING_BALANCES:
            response = await client.post(
                f"/employees/{employee_id}/balance/adjustments",
                json={"leave_type": leave_type, "delta": delta, "note": note},
            )
            _check(response, f"{employee_id} {leave_type} {delta}")

        print("Converting 1 LOP day to casual for Bob...")
        _check(
            await client.post(f"/employees/{BOB_ID}/balance/conversions", json={"amount": "1"}),
            "conversion",
        )

        print("Running monthly accrual for the current month...")
        response = await client.post("/accruals/monthly")
        _check(response, "monthly accrual")
        print(f"  {response.json()}")

    print("Done.")


if __name__ == "__main__":
    asyncio.run(seed())

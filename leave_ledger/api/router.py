from fastapi import APIRouter

from leave_ledger.api.accruals import accrual_trigger_router
from leave_ledger.api.balances import employee_balance_router
from leave_ledger.api.employees import employees_router

api_router = APIRouter()
api_router.include_router(employee_balance_router)
api_router.include_router(accrual_trigger_router)
api_router.include_router(employees_router)

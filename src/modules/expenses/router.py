"""API endpoints for the expense ledger."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database.session import get_db
from src.modules.expenses.schemas import (
    ExpenseCategoryResponse,
    ExpenseEntryCreate,
    ExpenseEntryResponse,
)
from src.modules.expenses.service import ExpenseService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/expenses", tags=["Expenses"])


@router.get("/categories", response_model=ApiResponse[list[ExpenseCategoryResponse]])
async def list_categories(db: AsyncSession = Depends(get_db)):
    service = ExpenseService(db)
    categories = await service.list_categories()
    return ApiResponse(
        success=True, data=[ExpenseCategoryResponse.model_validate(c) for c in categories]
    )


@router.post(
    "",
    response_model=ApiResponse[ExpenseEntryResponse],
    status_code=status.HTTP_201_CREATED,
)
async def record_expense(data: ExpenseEntryCreate, db: AsyncSession = Depends(get_db)):
    """Record a manual ledger entry."""
    service = ExpenseService(db)
    entry = await service.record_expense(data)
    return ApiResponse(
        success=True,
        message="Expense recorded",
        data=ExpenseEntryResponse.model_validate(entry),
    )


@router.get("", response_model=ApiResponse[list[ExpenseEntryResponse]])
async def list_expenses(
    category_id: int | None = Query(None),
    payroll_run_id: int | None = Query(None),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List ledger entries, newest first."""
    service = ExpenseService(db)
    entries = await service.list_entries(
        category_id=category_id,
        payroll_run_id=payroll_run_id,
        date_from=date_from,
        date_to=date_to,
    )
    return ApiResponse(success=True, data=[ExpenseEntryResponse.model_validate(e) for e in entries])

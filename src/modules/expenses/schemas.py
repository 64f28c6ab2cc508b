"""Schemas for Expenses module."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field

from src.modules.expenses.models import CategoryType
from src.shared.schemas.base import BaseSchema


class ExpenseCategoryResponse(BaseSchema):
    id: int
    name: str
    category_type: CategoryType


class ExpenseEntryCreate(BaseSchema):
    category_name: str = Field(..., min_length=1, max_length=200)
    category_type: CategoryType = CategoryType.EXPENSE
    amount: Decimal = Field(..., gt=0)
    description: str = Field(..., min_length=1)
    entry_date: date | None = None


class ExpenseEntryResponse(BaseSchema):
    id: int
    category_id: int
    category_name: str
    amount: Decimal
    description: str
    entry_date: date
    payroll_run_id: int | None
    created_at: datetime

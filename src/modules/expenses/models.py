"""Expense ledger models."""

from datetime import date
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import BigInteger, Date, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import BaseModel, MoneyAmount


class CategoryType(StrEnum):
    EXPENSE = "expense"
    INCOME = "income"


class ExpenseCategory(BaseModel):
    """Ledger category. Name is unique per type."""

    __tablename__ = "expense_categories"

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    category_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CategoryType.EXPENSE.value
    )

    __table_args__ = (
        UniqueConstraint("name", "category_type", name="uq_expense_category_name_type"),
    )


class ExpenseEntry(BaseModel):
    """One ledger line."""

    __tablename__ = "expense_entries"

    category_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("expense_categories.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(MoneyAmount, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    payroll_run_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("payroll_runs.id"), nullable=True, index=True
    )

    category: Mapped["ExpenseCategory"] = relationship("ExpenseCategory", lazy="selectin")

    @property
    def category_name(self) -> str:
        return self.category.name

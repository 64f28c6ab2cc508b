"""Service for the expense ledger."""

from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import NotFoundError
from src.modules.expenses.models import CategoryType, ExpenseCategory, ExpenseEntry
from src.modules.expenses.schemas import ExpenseEntryCreate


class ExpenseService:
    """Expense categories and ledger entries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_or_create_category(
        self, name: str, category_type: CategoryType = CategoryType.EXPENSE
    ) -> ExpenseCategory:
        """Category by name and type, created on first use."""
        category = await self.db.scalar(
            select(ExpenseCategory).where(
                ExpenseCategory.name == name,
                ExpenseCategory.category_type == category_type.value,
            )
        )
        if category:
            return category

        category = ExpenseCategory(name=name, category_type=category_type.value)
        self.db.add(category)
        await self.db.flush()
        return category

    async def list_categories(self) -> list[ExpenseCategory]:
        result = await self.db.execute(
            select(ExpenseCategory).order_by(ExpenseCategory.category_type, ExpenseCategory.name)
        )
        return list(result.scalars().all())

    async def add_entry(
        self,
        category: ExpenseCategory,
        amount: Decimal,
        description: str,
        entry_date: date,
        payroll_run_id: int | None = None,
    ) -> ExpenseEntry:
        """Stage a ledger entry; the caller owns the transaction."""
        entry = ExpenseEntry(
            category_id=category.id,
            amount=amount,
            description=description,
            entry_date=entry_date,
            payroll_run_id=payroll_run_id,
        )
        self.db.add(entry)
        return entry

    async def record_expense(self, data: ExpenseEntryCreate) -> ExpenseEntry:
        """Record a manual expense under the named category."""
        category = await self.get_or_create_category(data.category_name, data.category_type)
        entry = await self.add_entry(
            category,
            data.amount,
            data.description,
            data.entry_date or date.today(),
        )
        await self.db.flush()
        return await self.get_entry(entry.id)

    async def get_entry(self, entry_id: int) -> ExpenseEntry:
        entry = await self.db.scalar(select(ExpenseEntry).where(ExpenseEntry.id == entry_id))
        if not entry:
            raise NotFoundError("ExpenseEntry", entry_id)
        return entry

    async def list_entries(
        self,
        *,
        category_id: int | None = None,
        payroll_run_id: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[ExpenseEntry]:
        query = select(ExpenseEntry).order_by(ExpenseEntry.entry_date.desc(), ExpenseEntry.id.desc())
        if category_id is not None:
            query = query.where(ExpenseEntry.category_id == category_id)
        if payroll_run_id is not None:
            query = query.where(ExpenseEntry.payroll_run_id == payroll_run_id)
        if date_from is not None:
            query = query.where(ExpenseEntry.entry_date >= date_from)
        if date_to is not None:
            query = query.where(ExpenseEntry.entry_date <= date_to)
        result = await self.db.execute(query)
        return list(result.scalars().all())

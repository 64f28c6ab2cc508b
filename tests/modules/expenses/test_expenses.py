from datetime import date
from decimal import Decimal

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.modules.expenses.models import CategoryType
from src.modules.expenses.schemas import ExpenseEntryCreate
from src.modules.expenses.service import ExpenseService


class TestExpenseService:
    """Tests for ExpenseService."""

    async def test_category_created_once(self, db_session: AsyncSession):
        service = ExpenseService(db_session)

        first = await service.get_or_create_category("Utilities")
        second = await service.get_or_create_category("Utilities")
        income = await service.get_or_create_category("Utilities", CategoryType.INCOME)

        assert first.id == second.id
        assert income.id != first.id
        assert len(await service.list_categories()) == 2

    async def test_record_and_filter(self, db_session: AsyncSession):
        service = ExpenseService(db_session)
        january = await service.record_expense(
            ExpenseEntryCreate(
                category_name="Utilities",
                amount=Decimal("120.50"),
                description="ECG prepaid",
                entry_date=date(2025, 1, 20),
            )
        )
        await service.record_expense(
            ExpenseEntryCreate(
                category_name="Maintenance",
                amount=Decimal("300"),
                description="Roof repair",
                entry_date=date(2025, 3, 2),
            )
        )

        assert january.category_name == "Utilities"
        in_january = await service.list_entries(date_from=date(2025, 1, 1), date_to=date(2025, 1, 31))
        assert [e.description for e in in_january] == ["ECG prepaid"]
        by_category = await service.list_entries(category_id=january.category_id)
        assert len(by_category) == 1


class TestExpensesAPI:
    async def test_record_expense(self, client: AsyncClient):
        created = await client.post(
            "/api/v1/expenses",
            json={
                "category_name": "Utilities",
                "amount": "75.00",
                "description": "Water bill",
                "entry_date": "2025-02-01",
            },
        )
        assert created.status_code == 201
        assert created.json()["data"]["category_name"] == "Utilities"
        assert created.json()["data"]["payroll_run_id"] is None

        categories = await client.get("/api/v1/expenses/categories")
        assert [c["name"] for c in categories.json()["data"]] == ["Utilities"]

    async def test_amount_must_be_positive(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/expenses",
            json={"category_name": "Utilities", "amount": "0", "description": "Nothing"},
        )
        assert response.status_code == 422

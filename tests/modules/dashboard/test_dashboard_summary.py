import logging
from datetime import date
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.modules.dashboard.service import DashboardService
from src.modules.expenses.schemas import ExpenseEntryCreate
from src.modules.expenses.service import ExpenseService
from src.modules.fees.models import AppliesTo
from src.modules.fees.schemas import FeeItemCreate, FeeStructureItemInput, FeeStructureUpsert
from src.modules.fees.service import FeeService
from src.modules.payments.models import PaymentStatus
from src.modules.payments.schemas import PaymentCreate
from src.modules.payments.service import PaymentService
from src.modules.students.models import SchoolClass


@pytest.fixture
async def school(db_session: AsyncSession, current_term, basic_one, make_student):
    """Basic 1 billed 800 a term with one part payment; Basic 2 has no fee structure."""
    fees = FeeService(db_session)
    tuition = await fees.create_fee_item(
        FeeItemCreate(name="School Fees", applies_to=[AppliesTo.TERM1, AppliesTo.TERM2_3])
    )
    await fees.upsert_structure(
        FeeStructureUpsert(
            class_id=basic_one.id,
            academic_term_id=current_term.id,
            items=[FeeStructureItemInput(fee_item_id=tuition.id, amount=Decimal("800"))],
        )
    )
    basic_two = SchoolClass(code="B2", name="Basic 2", display_order=6)
    db_session.add(basic_two)
    await db_session.commit()

    payer = await make_student(basic_one, admission_term="1st Term")
    await make_student(basic_two, admission_term="1st Term", first_name="Kojo")
    await PaymentService(db_session).record_payment(
        PaymentCreate(student_id=payer.id, amount=Decimal("200"))
    )
    await ExpenseService(db_session).record_expense(
        ExpenseEntryCreate(
            category_name="Utilities",
            amount=Decimal("150"),
            description="ECG prepaid",
            entry_date=date(2025, 2, 3),
        )
    )
    await db_session.commit()
    return basic_two


class TestDashboardService:
    async def test_summary(self, db_session: AsyncSession, school, caplog):
        with caplog.at_level(logging.WARNING):
            summary = await DashboardService(db_session).get_summary(year=2025)

        assert summary["active_students_count"] == 2
        assert summary["this_term_invoiced"] == Decimal("800.00")
        assert summary["this_term_revenue"] == Decimal("200.00")
        assert summary["collection_rate_percent"] == 25.0
        assert summary["outstanding_invoices_count"] == 1
        assert summary["outstanding_total"] == Decimal("600.00")
        assert summary["unconfigured_class_ids"] == [school.id]
        assert summary["total_expenses_this_year"] == Decimal("150.00")
        assert summary["payroll_total_this_year"] == Decimal("0.00")
        assert "no fee structure" in caplog.text

    async def test_revenue_includes_students_who_left(
        self, db_session: AsyncSession, school, basic_one, make_student
    ):
        graduate = await make_student(basic_one, first_name="Esi", status="Graduated")
        payments = PaymentService(db_session)
        await payments.record_payment(PaymentCreate(student_id=graduate.id, amount=Decimal("300")))
        await payments.record_payment(
            PaymentCreate(student_id=graduate.id, amount=Decimal("50"), status=PaymentStatus.PENDING)
        )
        await db_session.commit()

        summary = await DashboardService(db_session).get_summary(year=2025)

        assert summary["active_students_count"] == 2
        assert summary["this_term_invoiced"] == Decimal("800.00")
        assert summary["this_term_revenue"] == Decimal("500.00")
        assert summary["collection_rate_percent"] == 62.5
        assert summary["outstanding_total"] == Decimal("600.00")

    async def test_other_year_has_no_spending(self, db_session: AsyncSession, school):
        summary = await DashboardService(db_session).get_summary(year=2024)

        assert summary["total_expenses_this_year"] == Decimal("0.00")

    async def test_nothing_invoiced(self, db_session: AsyncSession, current_term):
        summary = await DashboardService(db_session).get_summary()

        assert summary["active_students_count"] == 0
        assert summary["collection_rate_percent"] is None


class TestDashboardAPI:
    async def test_dashboard(self, client: AsyncClient, school):
        response = await client.get("/api/v1/dashboard", params={"year": 2025})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["academic_term_display_name"] == "2nd Term 2024-2025"
        assert data["outstanding_invoices_count"] == 1

    async def test_requires_current_term(self, client: AsyncClient):
        response = await client.get("/api/v1/dashboard")
        assert response.status_code == 422

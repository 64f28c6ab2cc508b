import logging
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import NotFoundError
from src.modules.fees.models import AppliesTo
from src.modules.fees.schemas import FeeItemCreate, FeeStructureItemInput, FeeStructureUpsert
from src.modules.fees.service import FeeService
from src.modules.invoices.calculator import InvoiceStatus
from src.modules.invoices.service import InvoiceService
from src.modules.payments.models import PaymentStatus
from src.modules.payments.schemas import PaymentCreate, PaymentItemInput
from src.modules.payments.service import PaymentService


@pytest.fixture
async def basic_one_fees(db_session: AsyncSession, current_term, basic_one):
    """Admission 200 (new), School Fees 800 (every term), Canteen 50 (optional)."""
    fees = FeeService(db_session)
    admission = await fees.create_fee_item(FeeItemCreate(name="Admission Fees", applies_to=[AppliesTo.NEW]))
    tuition = await fees.create_fee_item(
        FeeItemCreate(name="School Fees", applies_to=[AppliesTo.TERM1, AppliesTo.TERM2_3])
    )
    canteen = await fees.create_fee_item(FeeItemCreate(name="Canteen Fees", is_optional=True))
    await fees.upsert_structure(
        FeeStructureUpsert(
            class_id=basic_one.id,
            academic_term_id=current_term.id,
            items=[
                FeeStructureItemInput(fee_item_id=admission.id, amount=Decimal("200")),
                FeeStructureItemInput(fee_item_id=tuition.id, amount=Decimal("800")),
                FeeStructureItemInput(fee_item_id=canteen.id, amount=Decimal("50")),
            ],
        )
    )
    await db_session.commit()


class TestInvoiceService:
    """Tests for InvoiceService."""

    async def test_new_student_pays_admission(
        self, db_session: AsyncSession, basic_one, basic_one_fees, make_student
    ):
        student = await make_student(basic_one, admission_term="2nd Term")

        invoice = await InvoiceService(db_session).get_student_invoice(student.id)

        assert invoice.is_new_student is True
        assert [i.name for i in invoice.items] == ["Admission Fees", "School Fees"]
        assert invoice.total_due == Decimal("1000")
        assert invoice.status == InvoiceStatus.UNPAID
        assert invoice.structure_found is True
        assert invoice.due_date is not None

    async def test_continuing_student(
        self, db_session: AsyncSession, basic_one, basic_one_fees, make_student
    ):
        student = await make_student(basic_one, admission_term="1st Term")

        invoice = await InvoiceService(db_session).get_student_invoice(student.id)

        assert invoice.is_new_student is False
        assert [i.name for i in invoice.items] == ["School Fees"]
        assert invoice.total_due == Decimal("800")

    async def test_optional_item_appears_once_paid(
        self, db_session: AsyncSession, basic_one, basic_one_fees, make_student
    ):
        student = await make_student(basic_one, admission_term="1st Term")
        await PaymentService(db_session).record_payment(
            PaymentCreate(
                student_id=student.id,
                amount=Decimal("350"),
                items=[
                    PaymentItemInput(name="School Fees", amount=Decimal("300")),
                    PaymentItemInput(name="Canteen Fees", amount=Decimal("50")),
                ],
            )
        )

        invoice = await InvoiceService(db_session).get_student_invoice(student.id)

        assert [i.name for i in invoice.items] == ["School Fees", "Canteen Fees"]
        assert invoice.total_due == Decimal("850")
        assert invoice.total_paid == Decimal("350")
        assert invoice.balance == Decimal("500")
        assert invoice.status == InvoiceStatus.PART_PAYMENT

    async def test_pending_payments_do_not_count(
        self, db_session: AsyncSession, basic_one, basic_one_fees, make_student
    ):
        student = await make_student(basic_one, admission_term="1st Term")
        await PaymentService(db_session).record_payment(
            PaymentCreate(student_id=student.id, amount=Decimal("800"), status=PaymentStatus.PENDING)
        )

        invoice = await InvoiceService(db_session).get_student_invoice(student.id)

        assert invoice.total_paid == Decimal("0")
        assert invoice.status == InvoiceStatus.UNPAID

    async def test_missing_structure_is_flagged(
        self, db_session: AsyncSession, current_term, basic_one, make_student, caplog
    ):
        student = await make_student(basic_one)

        with caplog.at_level(logging.WARNING):
            invoice = await InvoiceService(db_session).get_student_invoice(student.id)

        assert invoice.structure_found is False
        assert invoice.items == ()
        assert invoice.status == InvoiceStatus.PAID
        assert "No fee structure" in caplog.text

    async def test_unknown_term(self, db_session: AsyncSession, basic_one, make_student):
        student = await make_student(basic_one)

        with pytest.raises(NotFoundError):
            await InvoiceService(db_session).get_student_invoice(student.id, term_id=999)

    async def test_outstanding_excludes_settled_and_inactive(
        self, db_session: AsyncSession, basic_one, basic_one_fees, make_student
    ):
        owing = await make_student(basic_one, admission_term="1st Term", first_name="Owing")
        settled = await make_student(basic_one, admission_term="1st Term", first_name="Settled")
        await make_student(basic_one, admission_term="1st Term", first_name="Left", status="Inactive")
        await PaymentService(db_session).record_payment(
            PaymentCreate(student_id=settled.id, amount=Decimal("800"))
        )

        outstanding = await InvoiceService(db_session).list_outstanding_invoices()

        assert [i.student_id for i in outstanding] == [owing.id]


class TestInvoicesAPI:
    async def test_student_invoice(self, client: AsyncClient, basic_one, basic_one_fees, make_student):
        student = await make_student(basic_one)

        response = await client.get(f"/api/v1/invoices/students/{student.id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert Decimal(data["total_amount"]) == Decimal("1000.00")
        assert Decimal(data["amount"]) == Decimal("1000.00")
        assert data["status"] == "Unpaid"

    async def test_outstanding_list(self, client: AsyncClient, basic_one, basic_one_fees, make_student):
        await make_student(basic_one, admission_term="1st Term")

        response = await client.get("/api/v1/invoices/outstanding", params={"class_id": basic_one.id})

        assert response.status_code == 200
        assert len(response.json()["data"]) == 1

    async def test_no_current_term(self, client: AsyncClient, basic_one, make_student):
        student = await make_student(basic_one)

        response = await client.get(f"/api/v1/invoices/students/{student.id}")

        assert response.status_code == 422

from datetime import date
from decimal import Decimal

import pytest
from httpx import AsyncClient
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import NoCurrentTermError, NotFoundError, ValidationError
from src.modules.payments.models import PaymentStatus
from src.modules.payments.schemas import PaymentCreate, PaymentItemInput
from src.modules.payments.service import PaymentService


class TestPaymentSchemas:
    def test_items_must_add_up(self):
        with pytest.raises(PydanticValidationError):
            PaymentCreate(
                student_id=1,
                amount=Decimal("300"),
                items=[PaymentItemInput(name="School Fees", amount=Decimal("200"))],
            )

    def test_year_and_term_together(self):
        with pytest.raises(PydanticValidationError):
            PaymentCreate(student_id=1, amount=Decimal("10"), academic_year="2024-2025")

    def test_amount_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            PaymentCreate(student_id=1, amount=Decimal("0"))


class TestPaymentService:
    """Tests for PaymentService."""

    async def test_defaults_to_current_term(
        self, db_session: AsyncSession, current_term, basic_one, make_student
    ):
        student = await make_student(basic_one)
        service = PaymentService(db_session)

        payment = await service.record_payment(
            PaymentCreate(
                student_id=student.id,
                amount=Decimal("350"),
                payment_date=date(2025, 1, 15),
                items=[
                    PaymentItemInput(name="School Fees", amount=Decimal("300")),
                    PaymentItemInput(name="Canteen Fees", amount=Decimal("50")),
                ],
            )
        )

        assert payment.academic_year == "2024-2025"
        assert payment.term == "2nd Term"
        assert payment.status == PaymentStatus.PAID
        assert [i.name for i in payment.items] == ["School Fees", "Canteen Fees"]

    async def test_explicit_term_needs_no_current_term(
        self, db_session: AsyncSession, basic_one, make_student
    ):
        student = await make_student(basic_one)
        service = PaymentService(db_session)

        payment = await service.record_payment(
            PaymentCreate(
                student_id=student.id,
                amount=Decimal("100"),
                academic_year="2023-2024",
                term="3rd Term",
            )
        )

        assert payment.term == "3rd Term"

    async def test_no_current_term(self, db_session: AsyncSession, basic_one, make_student):
        student = await make_student(basic_one)
        service = PaymentService(db_session)

        with pytest.raises(NoCurrentTermError):
            await service.record_payment(PaymentCreate(student_id=student.id, amount=Decimal("100")))

    async def test_duplicate_item_names(
        self, db_session: AsyncSession, current_term, basic_one, make_student
    ):
        student = await make_student(basic_one)
        service = PaymentService(db_session)

        with pytest.raises(ValidationError):
            await service.record_payment(
                PaymentCreate(
                    student_id=student.id,
                    amount=Decimal("100"),
                    items=[
                        PaymentItemInput(name="Books Fee", amount=Decimal("50")),
                        PaymentItemInput(name="Books Fee", amount=Decimal("50")),
                    ],
                )
            )

    async def test_unknown_student(self, db_session: AsyncSession, current_term):
        service = PaymentService(db_session)

        with pytest.raises(NotFoundError):
            await service.record_payment(PaymentCreate(student_id=404, amount=Decimal("10")))

    async def test_list_by_status_and_grouping(
        self, db_session: AsyncSession, current_term, basic_one, make_student
    ):
        ama = await make_student(basic_one)
        kofi = await make_student(basic_one, first_name="Kofi")
        service = PaymentService(db_session)
        await service.record_payment(PaymentCreate(student_id=ama.id, amount=Decimal("100")))
        await service.record_payment(
            PaymentCreate(student_id=ama.id, amount=Decimal("40"), status=PaymentStatus.PENDING)
        )
        await service.record_payment(PaymentCreate(student_id=kofi.id, amount=Decimal("60")))

        pending = await service.list_payments(status=PaymentStatus.PENDING)
        grouped = await service.payments_by_student("2024-2025", "2nd Term")

        assert [p.amount for p in pending] == [Decimal("40")]
        assert len(grouped[ama.id]) == 2
        assert len(grouped[kofi.id]) == 1
        assert await service.payments_by_student("2024-2025", "3rd Term") == {}


class TestPaymentsAPI:
    async def test_record_and_list(self, client: AsyncClient, current_term, basic_one, make_student):
        student = await make_student(basic_one)

        created = await client.post(
            "/api/v1/payments",
            json={
                "student_id": student.id,
                "amount": "250.00",
                "payment_method": "mobile_money",
                "items": [{"name": "School Fees", "amount": "250.00"}],
            },
        )
        assert created.status_code == 201
        assert created.json()["data"]["term"] == "2nd Term"

        listed = await client.get("/api/v1/payments", params={"student_id": student.id})
        assert len(listed.json()["data"]) == 1

    async def test_items_mismatch(self, client: AsyncClient, current_term, basic_one, make_student):
        student = await make_student(basic_one)

        response = await client.post(
            "/api/v1/payments",
            json={
                "student_id": student.id,
                "amount": "250.00",
                "items": [{"name": "School Fees", "amount": "200.00"}],
            },
        )
        assert response.status_code == 422

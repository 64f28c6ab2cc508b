"""Service for recording and querying payments."""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.exceptions import NotFoundError, ValidationError
from src.modules.payments.models import Payment, PaymentItem, PaymentStatus
from src.modules.payments.schemas import PaymentCreate
from src.modules.students.models import Student
from src.modules.terms.service import TermService

logger = logging.getLogger(__name__)


class PaymentService:
    """Payments are created and read, never edited."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_payment(self, data: PaymentCreate) -> Payment:
        """Record a payment against the given (or current) term."""
        student = await self.db.get(Student, data.student_id)
        if not student:
            raise NotFoundError("Student", data.student_id)

        if data.academic_year and data.term:
            academic_year, term = data.academic_year, data.term
        else:
            current = await TermService(self.db).require_current_term()
            academic_year, term = current.academic_year, current.session

        names = [i.name for i in data.items]
        if len(names) != len(set(names)):
            raise ValidationError("Each fee item may appear only once in a payment", field="items")

        payment = Payment(
            student_id=data.student_id,
            amount=data.amount,
            payment_method=data.payment_method.value,
            payment_date=data.payment_date or date.today(),
            academic_year=academic_year,
            term=term,
            status=data.status.value,
            reference=data.reference,
            notes=data.notes,
            items=[
                PaymentItem(name=i.name, amount=i.amount, position=position)
                for position, i in enumerate(data.items)
            ],
        )
        self.db.add(payment)
        await self.db.flush()

        logger.info(
            "Recorded %s payment %s for student %s (%s %s)",
            payment.status,
            payment.amount,
            student.admission_id,
            term,
            academic_year,
        )
        return await self.get_payment_by_id(payment.id)

    async def get_payment_by_id(self, payment_id: int) -> Payment:
        result = await self.db.execute(
            select(Payment).where(Payment.id == payment_id).options(selectinload(Payment.items))
        )
        payment = result.scalar_one_or_none()
        if not payment:
            raise NotFoundError("Payment", payment_id)
        return payment

    async def list_payments(
        self,
        *,
        student_id: int | None = None,
        academic_year: str | None = None,
        term: str | None = None,
        status: PaymentStatus | None = None,
    ) -> list[Payment]:
        query = (
            select(Payment)
            .options(selectinload(Payment.items))
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
        )
        if student_id is not None:
            query = query.where(Payment.student_id == student_id)
        if academic_year is not None:
            query = query.where(Payment.academic_year == academic_year)
        if term is not None:
            query = query.where(Payment.term == term)
        if status is not None:
            query = query.where(Payment.status == status.value)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def payments_by_student(self, academic_year: str, term: str) -> dict[int, list[Payment]]:
        """All payments for a term grouped by student id."""
        grouped: dict[int, list[Payment]] = {}
        for payment in await self.list_payments(academic_year=academic_year, term=term):
            grouped.setdefault(payment.student_id, []).append(payment)
        return grouped

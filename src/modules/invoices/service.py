"""Term invoices computed from fee structures and payments. Nothing here is persisted."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import NotFoundError
from src.modules.fees.applicability import ApplicableItem, FeeItemRule, resolve_applicable_items
from src.modules.fees.models import FeeStructure
from src.modules.fees.service import FeeService, to_lines
from src.modules.invoices.calculator import (
    InvoiceStatus,
    PaymentRecord,
    calculate_invoice_balance,
    paid_item_names,
    term_payments,
)
from src.modules.payments.models import Payment
from src.modules.payments.service import PaymentService
from src.modules.students.models import Student
from src.modules.students.service import StudentService
from src.modules.terms.models import AcademicTerm
from src.modules.terms.service import TermService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudentInvoice:
    """
    A student's invoice for one term, snapshotting the structure amounts
    used at computation time.

    ``structure_found`` is False when no fee structure exists for the
    student's class and term; the invoice is then empty and Paid, which
    callers should surface as misconfiguration rather than "nothing owed".
    """

    student_id: int
    admission_id: str
    student_name: str
    class_id: int
    academic_term_id: int
    academic_year: str
    term: str
    is_new_student: bool
    structure_found: bool
    items: tuple[ApplicableItem, ...]
    total_due: Decimal
    total_paid: Decimal
    balance: Decimal
    status: InvoiceStatus
    due_date: date | None
    computed_at: datetime

    @property
    def is_outstanding(self) -> bool:
        return self.balance > 0


def to_payment_record(payment: Payment) -> PaymentRecord:
    return PaymentRecord(
        amount=payment.amount,
        academic_year=payment.academic_year,
        term=payment.term,
        status=payment.status,
        item_names=tuple(item.name for item in payment.items),
    )


def compose_invoice(
    student: Student,
    term: AcademicTerm,
    structure: FeeStructure | None,
    rules: Mapping[int, FeeItemRule],
    payments: Iterable[Payment],
) -> StudentInvoice:
    """Resolve what the student owes for ``term`` and balance it against their payments."""
    records = term_payments(
        (to_payment_record(p) for p in payments), term.academic_year, term.session
    )
    is_new = student.is_new_for(term.academic_year, term.session)

    if structure is None:
        logger.warning(
            "No fee structure for class_id=%s in %s; student %s shows nothing due",
            student.class_id,
            term.display_name,
            student.admission_id,
        )

    items = resolve_applicable_items(
        to_lines(structure),
        rules,
        is_new_student=is_new,
        term_number=term.term_number,
        paid_item_names=paid_item_names(records),
    )
    balance = calculate_invoice_balance(items, records)

    return StudentInvoice(
        student_id=student.id,
        admission_id=student.admission_id,
        student_name=student.full_name,
        class_id=student.class_id,
        academic_term_id=term.id,
        academic_year=term.academic_year,
        term=term.session,
        is_new_student=is_new,
        structure_found=structure is not None,
        items=tuple(items),
        total_due=balance.total_due,
        total_paid=balance.total_paid,
        balance=balance.balance,
        status=balance.status,
        due_date=term.end_date,
        computed_at=datetime.now(timezone.utc),
    )


class InvoiceService:
    """Builds term invoices for one student or the whole school."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.fees = FeeService(db)

    async def _resolve_term(self, term_id: int | None) -> AcademicTerm:
        terms = TermService(self.db)
        if term_id is None:
            return await terms.require_current_term()
        term = await terms.get_term_by_id(term_id)
        if not term:
            raise NotFoundError("AcademicTerm", term_id)
        return term

    async def get_student_invoice(self, student_id: int, term_id: int | None = None) -> StudentInvoice:
        """Invoice for one student in the given (or current) term."""
        term = await self._resolve_term(term_id)
        student = await StudentService(self.db).get_student_by_id(student_id)
        structure = await self.fees.get_structure(student.class_id, term.id)
        rules = await self.fees.get_rules()
        payments = await PaymentService(self.db).list_payments(
            student_id=student.id, academic_year=term.academic_year, term=term.session
        )
        return compose_invoice(student, term, structure, rules, payments)

    async def list_term_invoices(
        self, term_id: int | None = None, class_id: int | None = None
    ) -> tuple[AcademicTerm, list[StudentInvoice]]:
        """Invoices for every active student, loading each table once."""
        term = await self._resolve_term(term_id)
        students = await StudentService(self.db).list_active_students(class_id=class_id)
        structures = {s.class_id: s for s in await self.fees.list_structures(term.id)}
        rules = await self.fees.get_rules()
        payments = await PaymentService(self.db).payments_by_student(term.academic_year, term.session)

        invoices = [
            compose_invoice(
                student,
                term,
                structures.get(student.class_id),
                rules,
                payments.get(student.id, []),
            )
            for student in students
        ]
        return term, invoices

    async def list_outstanding_invoices(
        self, term_id: int | None = None, class_id: int | None = None
    ) -> list[StudentInvoice]:
        """Invoices that still have a balance to pay."""
        _, invoices = await self.list_term_invoices(term_id=term_id, class_id=class_id)
        return [invoice for invoice in invoices if invoice.is_outstanding]

"""Schemas for Invoices module."""

from datetime import date, datetime
from decimal import Decimal

from src.modules.invoices.calculator import InvoiceStatus
from src.modules.invoices.service import StudentInvoice
from src.shared.schemas.base import BaseSchema
from src.shared.utils.money import round_money


class InvoiceItemResponse(BaseSchema):
    name: str
    amount: Decimal


class InvoiceResponse(BaseSchema):
    """
    A computed term invoice.

    ``amount`` is the balance still owed; ``total_amount`` and
    ``amount_paid`` are what it is made of.
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
    items: list[InvoiceItemResponse]
    total_amount: Decimal
    amount_paid: Decimal
    amount: Decimal
    status: InvoiceStatus
    due_date: date | None
    computed_at: datetime

    @classmethod
    def from_invoice(cls, invoice: StudentInvoice) -> "InvoiceResponse":
        return cls(
            student_id=invoice.student_id,
            admission_id=invoice.admission_id,
            student_name=invoice.student_name,
            class_id=invoice.class_id,
            academic_term_id=invoice.academic_term_id,
            academic_year=invoice.academic_year,
            term=invoice.term,
            is_new_student=invoice.is_new_student,
            structure_found=invoice.structure_found,
            items=[
                InvoiceItemResponse(name=i.name, amount=round_money(i.amount)) for i in invoice.items
            ],
            total_amount=round_money(invoice.total_due),
            amount_paid=round_money(invoice.total_paid),
            amount=round_money(invoice.balance),
            status=invoice.status,
            due_date=invoice.due_date,
            computed_at=invoice.computed_at,
        )

"""
Outstanding balance for a student's term invoice.

Pure functions: the same inputs always give the same result, so the
dashboard and the invoice list can never disagree.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum

from src.modules.fees.applicability import ApplicableItem
from src.modules.payments.models import PaymentStatus

ZERO = Decimal("0")


class InvoiceStatus(StrEnum):
    PAID = "Paid"
    PART_PAYMENT = "Part-Payment"
    UNPAID = "Unpaid"


@dataclass(frozen=True)
class PaymentRecord:
    amount: Decimal
    academic_year: str
    term: str
    status: str = PaymentStatus.PAID.value
    item_names: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class InvoiceBalance:
    total_due: Decimal
    total_paid: Decimal
    balance: Decimal
    status: InvoiceStatus

    @property
    def is_outstanding(self) -> bool:
        """Only invoices with something left to pay are listed."""
        return self.balance > 0


def term_payments(
    payments: Iterable[PaymentRecord], academic_year: str, term: str
) -> list[PaymentRecord]:
    """Paid payments made for the given academic year and term."""
    return [
        p
        for p in payments
        if p.academic_year == academic_year
        and p.term == term
        and p.status == PaymentStatus.PAID.value
    ]


def paid_item_names(payments: Iterable[PaymentRecord]) -> frozenset[str]:
    return frozenset(name for p in payments for name in p.item_names)


def calculate_invoice_balance(
    items: Iterable[ApplicableItem], payments: Iterable[PaymentRecord]
) -> InvoiceBalance:
    """
    Total due, total paid, balance and status.

    ``payments`` must already be restricted to the term being billed. With
    nothing due the invoice is Paid whatever was paid.
    """
    total_due = sum((item.amount for item in items), ZERO)
    total_paid = sum((p.amount for p in payments), ZERO)
    balance = total_due - total_paid

    if total_due == 0 or total_paid >= total_due:
        status = InvoiceStatus.PAID
    elif total_paid > 0:
        status = InvoiceStatus.PART_PAYMENT
    else:
        status = InvoiceStatus.UNPAID

    return InvoiceBalance(
        total_due=total_due,
        total_paid=total_paid,
        balance=balance,
        status=status,
    )

"""Payment and PaymentItem models."""

from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import (
    BigInteger,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import Base, BigIntPK, MoneyAmount


class PaymentMethod(StrEnum):
    """Payment method options."""

    CASH = "cash"
    MOBILE_MONEY = "mobile_money"
    BANK_TRANSFER = "bank_transfer"
    CHEQUE = "cheque"


class PaymentStatus(StrEnum):
    """Payment status options. Only Paid payments count toward what a student has paid."""

    PAID = "Paid"
    PENDING = "Pending"
    FAILED = "Failed"


class Payment(Base):
    """
    Fee payment by a student for one academic term.

    Payments are never edited after creation. The line items record which
    fee items the money was for; optional fee items become billable for the
    term once they appear here.
    """

    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    student_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("students.id"), nullable=False, index=True
    )

    amount: Mapped[Decimal] = mapped_column(MoneyAmount, nullable=False)
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)

    academic_year: Mapped[str] = mapped_column(String(9), nullable=False, index=True)
    term: Mapped[str] = mapped_column(String(50), nullable=False)  # session label, "1st Term"

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.PAID.value, index=True
    )
    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    items: Mapped[list["PaymentItem"]] = relationship(
        "PaymentItem",
        back_populates="payment",
        cascade="all, delete-orphan",
        order_by="PaymentItem.position",
    )

    @property
    def is_paid(self) -> bool:
        return self.status == PaymentStatus.PAID.value


class PaymentItem(Base):
    """Which fee item (by name) a part of a payment was for."""

    __tablename__ = "payment_items"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    payment_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("payments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyAmount, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    payment: Mapped["Payment"] = relationship("Payment", back_populates="items")

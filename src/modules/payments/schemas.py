"""Pydantic schemas for Payments module."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field, model_validator

from src.shared.schemas.base import BaseSchema
from src.modules.payments.models import PaymentMethod, PaymentStatus


class PaymentItemInput(BaseSchema):
    name: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(ge=0)


class PaymentCreate(BaseSchema):
    """
    Schema for recording a payment.

    The term defaults to the current term. When items are given they must
    add up to the amount.
    """

    student_id: int
    amount: Decimal = Field(gt=0, description="Payment amount (must be positive)")
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_date: date | None = None
    academic_year: str | None = None
    term: str | None = None
    status: PaymentStatus = PaymentStatus.PAID
    reference: str | None = Field(None, max_length=100)
    notes: str | None = None
    items: list[PaymentItemInput] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_items_total(self):
        if self.items and sum(i.amount for i in self.items) != self.amount:
            raise ValueError("Payment items must add up to the payment amount")
        if (self.academic_year is None) != (self.term is None):
            raise ValueError("academic_year and term must be given together")
        return self


class PaymentItemResponse(BaseSchema):
    name: str
    amount: Decimal


class PaymentResponse(BaseSchema):
    """Schema for payment response."""

    id: int
    student_id: int
    amount: Decimal
    payment_method: str
    payment_date: date
    academic_year: str
    term: str
    status: str
    reference: str | None
    notes: str | None
    items: list[PaymentItemResponse]
    created_at: datetime

"""Schemas for dashboard API (term summary)."""

from decimal import Decimal

from src.shared.schemas.base import BaseSchema


class DashboardResponse(BaseSchema):
    """Summary for the main page: term billing, collections and spending."""

    # Context
    academic_term_id: int
    academic_term_display_name: str
    currency: str
    current_year: int

    # Billing for the term
    active_students_count: int = 0
    this_term_invoiced: Decimal = Decimal("0")
    this_term_revenue: Decimal = Decimal("0")
    collection_rate_percent: float | None = None  # 0-100, None if nothing invoiced
    outstanding_invoices_count: int = 0
    outstanding_total: Decimal = Decimal("0")

    # Classes with active students but no fee structure for the term
    unconfigured_class_ids: list[int] = []

    # Spending this calendar year
    total_expenses_this_year: Decimal = Decimal("0")
    payroll_total_this_year: Decimal = Decimal("0")

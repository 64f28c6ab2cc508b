"""Service for dashboard summary."""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.modules.expenses.models import ExpenseEntry
from src.modules.invoices.service import InvoiceService
from src.modules.payments.models import PaymentStatus
from src.modules.payments.service import PaymentService
from src.modules.payroll.models import PayrollRun
from src.shared.utils.money import ZERO, round_money

logger = logging.getLogger(__name__)


class DashboardService:
    """Aggregates data for main page: cards, key metrics."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_summary(self, *, term_id: int | None = None, year: int | None = None) -> dict:
        """
        Build dashboard summary for a term (the current one by default).

        Revenue is every Paid payment recorded against the term, including
        payments from students who have since left. Invoiced and outstanding
        figures cover active students only.
        """
        current_year = year or date.today().year
        year_start = date(current_year, 1, 1)
        year_end = date(current_year, 12, 31)

        term, invoices = await InvoiceService(self.db).list_term_invoices(term_id=term_id)

        invoiced = sum((i.total_due for i in invoices), ZERO)
        paid = await PaymentService(self.db).list_payments(
            academic_year=term.academic_year, term=term.session, status=PaymentStatus.PAID
        )
        revenue = sum((p.amount for p in paid), ZERO)
        outstanding = [i for i in invoices if i.is_outstanding]
        unconfigured = sorted({i.class_id for i in invoices if not i.structure_found})
        if unconfigured:
            logger.warning(
                "%s: no fee structure for class ids %s", term.display_name, unconfigured
            )

        collection_rate = None
        if invoiced > 0:
            collection_rate = round(float(revenue / invoiced * 100), 1)

        expenses_total = await self.db.scalar(
            select(func.coalesce(func.sum(ExpenseEntry.amount), 0)).where(
                ExpenseEntry.entry_date >= year_start,
                ExpenseEntry.entry_date <= year_end,
            )
        )
        payroll_total = await self.db.scalar(
            select(func.coalesce(func.sum(PayrollRun.total_amount), 0)).where(
                PayrollRun.year == current_year
            )
        )

        return {
            "academic_term_id": term.id,
            "academic_term_display_name": term.display_name,
            "currency": settings.currency,
            "current_year": current_year,
            "active_students_count": len(invoices),
            "this_term_invoiced": round_money(invoiced),
            "this_term_revenue": round_money(revenue),
            "collection_rate_percent": collection_rate,
            "outstanding_invoices_count": len(outstanding),
            "outstanding_total": round_money(sum((i.balance for i in outstanding), ZERO)),
            "unconfigured_class_ids": unconfigured,
            "total_expenses_this_year": round_money(Decimal(str(expenses_total or 0))),
            "payroll_total_this_year": round_money(Decimal(str(payroll_total or 0))),
        }

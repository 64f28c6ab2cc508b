"""Service for staff, payroll settings and payroll runs."""

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.config import settings as app_settings
from src.core.exceptions import (
    DuplicatePayrollPeriodError,
    EmptyRosterError,
    NotFoundError,
    PayrollCommitError,
)
from src.modules.expenses.models import CategoryType
from src.modules.expenses.service import ExpenseService
from src.modules.payroll.deductions import (
    DEFAULT_SSNIT_EMPLOYEE_RATE,
    DEFAULT_SSNIT_EMPLOYER_RATE,
    ArrearLine,
    DeductionLine,
    StatutoryBreakdown,
    calculate_statutory_deductions,
)
from src.modules.payroll.models import (
    PayrollRun,
    PayrollSettings,
    Payslip,
    StaffArrear,
    StaffDeduction,
    StaffMember,
    StaffStatus,
    TaxBracket,
)
from src.modules.payroll.schemas import PayrollSettingsUpdate, StaffCreate, StaffUpdate
from src.modules.payroll.tax import DEFAULT_TAX_BANDS, TaxBand
from src.shared.utils.money import ZERO, round_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EffectivePayrollSettings:
    employee_rate: Decimal
    employer_rate: Decimal
    bands: tuple[TaxBand, ...]
    is_default: bool = False


DEFAULT_PAYROLL_SETTINGS = EffectivePayrollSettings(
    employee_rate=DEFAULT_SSNIT_EMPLOYEE_RATE,
    employer_rate=DEFAULT_SSNIT_EMPLOYER_RATE,
    bands=DEFAULT_TAX_BANDS,
    is_default=True,
)


def period_label(month: int, year: int) -> str:
    return f"{year}-{month:02d}"


def period_end(month: int, year: int) -> date:
    """Last day of the payroll month; payroll expenses are dated to it."""
    return date(year, month, calendar.monthrange(year, month)[1])


class PayrollSettingsService:
    """SSNIT rates and the PAYE table. One row, defaults until first saved."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_row(self) -> PayrollSettings | None:
        return await self.db.scalar(select(PayrollSettings).order_by(PayrollSettings.id).limit(1))

    async def get_settings(self) -> EffectivePayrollSettings:
        row = await self._get_row()
        if row is None:
            return DEFAULT_PAYROLL_SETTINGS
        return EffectivePayrollSettings(
            employee_rate=row.ssnit_employee_rate,
            employer_rate=row.ssnit_employer_rate,
            bands=tuple(TaxBand(b.lower_bound, b.upper_bound, b.rate) for b in row.tax_brackets),
        )

    async def update_settings(self, data: PayrollSettingsUpdate) -> EffectivePayrollSettings:
        """Replace rates and brackets. Brackets were validated by the schema."""
        row = await self._get_row()
        if row is None:
            row = PayrollSettings(
                ssnit_employee_rate=data.ssnit_employee_rate,
                ssnit_employer_rate=data.ssnit_employer_rate,
            )
            self.db.add(row)
        else:
            row.ssnit_employee_rate = data.ssnit_employee_rate
            row.ssnit_employer_rate = data.ssnit_employer_rate

        row.tax_brackets = [
            TaxBracket(lower_bound=b.lower_bound, upper_bound=b.upper_bound, rate=b.rate)
            for b in sorted(data.tax_brackets, key=lambda b: b.lower_bound)
        ]
        await self.db.flush()
        logger.info(
            "Payroll settings updated: SSNIT %s%%/%s%%, %d tax brackets",
            data.ssnit_employee_rate,
            data.ssnit_employer_rate,
            len(data.tax_brackets),
        )
        return await self.get_settings()


class StaffService:
    """Service for staff records."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_staff(self, data: StaffCreate) -> StaffMember:
        staff = StaffMember(
            first_name=data.first_name,
            last_name=data.last_name,
            position=data.position,
            phone=data.phone,
            email=data.email,
            ssnit_number=data.ssnit_number,
            gross_salary=data.gross_salary,
            arrears=[StaffArrear(amount=a.amount, description=a.description) for a in data.arrears],
            deductions=[StaffDeduction(name=d.name, amount=d.amount) for d in data.deductions],
        )
        self.db.add(staff)
        await self.db.flush()
        return await self.get_staff(staff.id)

    async def get_staff(self, staff_id: int) -> StaffMember:
        staff = await self.db.scalar(
            select(StaffMember)
            .where(StaffMember.id == staff_id)
            .execution_options(populate_existing=True)
        )
        if not staff:
            raise NotFoundError("StaffMember", staff_id)
        return staff

    async def list_staff(self, status: StaffStatus | None = None) -> list[StaffMember]:
        query = select(StaffMember).order_by(StaffMember.last_name, StaffMember.first_name)
        if status is not None:
            query = query.where(StaffMember.status == status.value)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_active_staff(self) -> list[StaffMember]:
        return await self.list_staff(StaffStatus.ACTIVE)

    async def update_staff(self, staff_id: int, data: StaffUpdate) -> StaffMember:
        staff = await self.get_staff(staff_id)
        updates = data.model_dump(exclude_unset=True, exclude={"arrears", "deductions"})
        for field, value in updates.items():
            if value is not None:
                setattr(staff, field, value)

        if data.arrears is not None:
            staff.arrears = [
                StaffArrear(amount=a.amount, description=a.description) for a in data.arrears
            ]
        if data.deductions is not None:
            staff.deductions = [StaffDeduction(name=d.name, amount=d.amount) for d in data.deductions]

        await self.db.flush()
        return await self.get_staff(staff.id)


class PayrollRunState(StrEnum):
    NOT_STARTED = "NotStarted"
    VALIDATING = "Validating"
    PROCESSING = "Processing"
    COMMITTED = "Committed"
    REJECTED = "Rejected"


def breakdown_for(staff: StaffMember, payroll_settings: EffectivePayrollSettings) -> StatutoryBreakdown:
    return calculate_statutory_deductions(
        staff.gross_salary,
        employee_rate=payroll_settings.employee_rate,
        employer_rate=payroll_settings.employer_rate,
        tax_bands=payroll_settings.bands,
        arrears=[ArrearLine(a.amount, a.description) for a in staff.arrears],
        deductions=[DeductionLine(d.name, d.amount) for d in staff.deductions],
    )


def build_payslip(
    staff: StaffMember, breakdown: StatutoryBreakdown, period: str
) -> Payslip:
    """Payslip with amounts rounded for storage, plus snapshots of deductions and arrears."""
    return Payslip(
        staff_id=staff.id,
        staff_name=staff.full_name,
        period=period,
        gross_salary=round_money(breakdown.gross_salary),
        ssnit_employee=round_money(breakdown.ssnit_employee),
        ssnit_employer=round_money(breakdown.ssnit_employer),
        taxable_income=round_money(breakdown.taxable_income),
        income_tax=round_money(breakdown.income_tax),
        net_salary=round_money(breakdown.net_salary),
        deductions=[{"name": d.name, "amount": str(d.amount)} for d in staff.deductions],
        arrears=[{"amount": str(a.amount), "description": a.description} for a in staff.arrears],
    )


class PayrollRunProcessor:
    """
    Runs payroll for one period.

    NotStarted -> Validating -> Processing -> Committed, or Rejected.
    Preconditions are checked before anything is written. The commit
    writes the run, its payslips, one expense entry per custom deduction
    and clears consumed arrears in a single transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.state = PayrollRunState.NOT_STARTED
        self.rejection_reason: str | None = None

    def _reject(self, reason: str) -> None:
        self.state = PayrollRunState.REJECTED
        self.rejection_reason = reason

    async def _period_exists(self, month: int, year: int) -> bool:
        count = await self.db.scalar(
            select(func.count(PayrollRun.id)).where(PayrollRun.month == month, PayrollRun.year == year)
        )
        return bool(count)

    async def run(self, month: int, year: int, notes: str | None = None) -> PayrollRun:
        self.state = PayrollRunState.VALIDATING
        period = period_label(month, year)

        if await self._period_exists(month, year):
            self._reject("duplicate period")
            logger.info("Payroll for %s rejected: already processed", period)
            raise DuplicatePayrollPeriodError(month, year)

        roster = await StaffService(self.db).list_active_staff()
        if not roster:
            self._reject("no active staff")
            logger.info("Payroll for %s rejected: no active staff", period)
            raise EmptyRosterError()

        self.state = PayrollRunState.PROCESSING
        payroll_settings = await PayrollSettingsService(self.db).get_settings()
        computed = [(staff, breakdown_for(staff, payroll_settings)) for staff in roster]
        total = sum((b.net_salary for _, b in computed), ZERO)

        try:
            run_id = await self._commit(month, year, notes, computed, total)
        except IntegrityError as exc:
            await self.db.rollback()
            if await self._period_exists(month, year):
                self._reject("duplicate period")
                logger.info("Payroll for %s rejected: processed concurrently", period)
                raise DuplicatePayrollPeriodError(month, year) from exc
            self._reject("commit failed")
            logger.exception("Payroll commit for %s failed; rolled back", period)
            raise PayrollCommitError(month, year) from exc
        except SQLAlchemyError as exc:
            await self.db.rollback()
            self._reject("commit failed")
            logger.exception("Payroll commit for %s failed; rolled back", period)
            raise PayrollCommitError(month, year) from exc

        self.state = PayrollRunState.COMMITTED
        logger.info(
            "Payroll for %s committed: %d staff, total net %s",
            period,
            len(computed),
            round_money(total),
        )
        return await PayrollRunService(self.db).get_run(run_id)

    async def _commit(
        self,
        month: int,
        year: int,
        notes: str | None,
        computed: list[tuple[StaffMember, StatutoryBreakdown]],
        total: Decimal,
    ) -> int:
        period = period_label(month, year)
        payroll_run = PayrollRun(
            month=month,
            year=year,
            total_amount=round_money(total),
            employee_count=len(computed),
            processed_at=datetime.now(timezone.utc),
            notes=notes,
            payslips=[build_payslip(staff, breakdown, period) for staff, breakdown in computed],
        )
        self.db.add(payroll_run)
        await self.db.flush()

        expenses = ExpenseService(self.db)
        with_deductions = [staff for staff, _ in computed if staff.deductions]
        if with_deductions:
            category = await expenses.get_or_create_category(
                app_settings.staff_deductions_category, CategoryType.EXPENSE
            )
            for staff in with_deductions:
                for deduction in staff.deductions:
                    await expenses.add_entry(
                        category,
                        deduction.amount,
                        f"{deduction.name} - {staff.full_name} ({period})",
                        period_end(month, year),
                        payroll_run_id=payroll_run.id,
                    )

        for staff, _ in computed:
            if staff.arrears:
                staff.arrears.clear()

        await self.db.flush()
        run_id = payroll_run.id
        await self.db.commit()
        return run_id


class PayrollRunService:
    """Read access to committed payroll runs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_run(self, run_id: int) -> PayrollRun:
        payroll_run = await self.db.scalar(
            select(PayrollRun)
            .where(PayrollRun.id == run_id)
            .options(selectinload(PayrollRun.payslips))
        )
        if not payroll_run:
            raise NotFoundError("PayrollRun", run_id)
        return payroll_run

    async def list_runs(self, year: int | None = None) -> list[PayrollRun]:
        query = select(PayrollRun).order_by(PayrollRun.year.desc(), PayrollRun.month.desc())
        if year is not None:
            query = query.where(PayrollRun.year == year)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_staff_payslips(self, staff_id: int) -> list[Payslip]:
        result = await self.db.execute(
            select(Payslip).where(Payslip.staff_id == staff_id).order_by(Payslip.period.desc())
        )
        return list(result.scalars().all())

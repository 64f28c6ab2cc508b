"""Staff, payroll settings, payroll runs and payslips."""

from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import (
    JSON,
    BigInteger,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import BaseModel, MoneyAmount, Percent


class StaffStatus(StrEnum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class StaffMember(BaseModel):
    """Salaried staff member."""

    __tablename__ = "staff_members"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    ssnit_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    gross_salary: Mapped[Decimal] = mapped_column(MoneyAmount, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=StaffStatus.ACTIVE.value, index=True
    )

    arrears: Mapped[list["StaffArrear"]] = relationship(
        "StaffArrear",
        cascade="all, delete-orphan",
        order_by="StaffArrear.id",
        lazy="selectin",
    )
    deductions: Mapped[list["StaffDeduction"]] = relationship(
        "StaffDeduction",
        cascade="all, delete-orphan",
        order_by="StaffDeduction.id",
        lazy="selectin",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_active(self) -> bool:
        return self.status == StaffStatus.ACTIVE.value


class StaffArrear(BaseModel):
    """Back pay owed with the next payroll run, then cleared."""

    __tablename__ = "staff_arrears"

    staff_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("staff_members.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(MoneyAmount, nullable=False)
    description: Mapped[str | None] = mapped_column(String(200), nullable=True)


class StaffDeduction(BaseModel):
    """Recurring custom deduction, e.g. a staff loan repayment."""

    __tablename__ = "staff_deductions"

    staff_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("staff_members.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyAmount, nullable=False)


class PayrollSettings(BaseModel):
    """SSNIT rates in percent. A single row; defaults apply until it is saved."""

    __tablename__ = "payroll_settings"

    ssnit_employee_rate: Mapped[Decimal] = mapped_column(Percent, nullable=False)
    ssnit_employer_rate: Mapped[Decimal] = mapped_column(Percent, nullable=False)

    tax_brackets: Mapped[list["TaxBracket"]] = relationship(
        "TaxBracket",
        cascade="all, delete-orphan",
        order_by="TaxBracket.lower_bound",
        lazy="selectin",
    )


class TaxBracket(BaseModel):
    """PAYE bracket. upper_bound NULL means "and above"."""

    __tablename__ = "tax_brackets"

    settings_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("payroll_settings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    lower_bound: Mapped[Decimal] = mapped_column(MoneyAmount, nullable=False)
    upper_bound: Mapped[Decimal | None] = mapped_column(MoneyAmount, nullable=True)
    rate: Mapped[Decimal] = mapped_column(Percent, nullable=False)


class PayrollRun(BaseModel):
    """All payslips for one month. At most one run per period."""

    __tablename__ = "payroll_runs"

    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(MoneyAmount, nullable=False)
    employee_count: Mapped[int] = mapped_column(Integer, nullable=False)
    processed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    payslips: Mapped[list["Payslip"]] = relationship(
        "Payslip",
        back_populates="payroll_run",
        cascade="all, delete-orphan",
        order_by="Payslip.id",
    )

    __table_args__ = (UniqueConstraint("month", "year", name="uq_payroll_run_period"),)

    @property
    def period(self) -> str:
        return f"{self.year}-{self.month:02d}"


class Payslip(BaseModel):
    """One staff member's pay for a run, with the deductions and arrears used."""

    __tablename__ = "payslips"

    payroll_run_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("payroll_runs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    staff_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("staff_members.id"), nullable=False, index=True
    )
    staff_name: Mapped[str] = mapped_column(String(200), nullable=False)
    period: Mapped[str] = mapped_column(String(7), nullable=False, index=True)  # "2025-03"

    gross_salary: Mapped[Decimal] = mapped_column(MoneyAmount, nullable=False)
    ssnit_employee: Mapped[Decimal] = mapped_column(MoneyAmount, nullable=False)
    ssnit_employer: Mapped[Decimal] = mapped_column(MoneyAmount, nullable=False)
    taxable_income: Mapped[Decimal] = mapped_column(MoneyAmount, nullable=False)
    income_tax: Mapped[Decimal] = mapped_column(MoneyAmount, nullable=False)
    net_salary: Mapped[Decimal] = mapped_column(MoneyAmount, nullable=False)

    # [{"name": ..., "amount": "..."}] and [{"amount": "...", "description": ...}]
    deductions: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    arrears: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)

    payroll_run: Mapped["PayrollRun"] = relationship("PayrollRun", back_populates="payslips")

"""Statutory deductions (SSNIT and PAYE) and net pay for one staff member."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from src.modules.payroll.tax import TaxBand, calculate_income_tax
from src.shared.utils.money import ZERO, as_decimal, percent_to_rate

DEFAULT_SSNIT_EMPLOYEE_RATE = Decimal("5.5")
DEFAULT_SSNIT_EMPLOYER_RATE = Decimal("13")


@dataclass(frozen=True)
class ArrearLine:
    amount: Decimal
    description: str | None = None


@dataclass(frozen=True)
class DeductionLine:
    name: str
    amount: Decimal


@dataclass(frozen=True)
class StatutoryBreakdown:
    gross_salary: Decimal
    ssnit_employee: Decimal
    ssnit_employer: Decimal
    taxable_income: Decimal
    income_tax: Decimal
    arrears_total: Decimal
    deductions_total: Decimal
    net_salary: Decimal


def calculate_statutory_deductions(
    gross_salary: Decimal,
    *,
    employee_rate: Decimal,
    employer_rate: Decimal,
    tax_bands: Sequence[TaxBand],
    arrears: Iterable[ArrearLine] = (),
    deductions: Iterable[DeductionLine] = (),
) -> StatutoryBreakdown:
    """
    SSNIT contributions, income tax and net salary.

    Rates are percentages. Arrears are added to net pay but are not part
    of the taxable base. Nothing is rounded here.
    """
    gross = as_decimal(gross_salary)
    ssnit_employee = gross * percent_to_rate(employee_rate)
    ssnit_employer = gross * percent_to_rate(employer_rate)
    taxable_income = gross - ssnit_employee
    income_tax = calculate_income_tax(taxable_income, tax_bands)

    arrears_total = sum((as_decimal(a.amount) for a in arrears), ZERO)
    deductions_total = sum((as_decimal(d.amount) for d in deductions), ZERO)

    net_salary = gross + arrears_total - ssnit_employee - income_tax - deductions_total

    return StatutoryBreakdown(
        gross_salary=gross,
        ssnit_employee=ssnit_employee,
        ssnit_employer=ssnit_employer,
        taxable_income=taxable_income,
        income_tax=income_tax,
        arrears_total=arrears_total,
        deductions_total=deductions_total,
        net_salary=net_salary,
    )

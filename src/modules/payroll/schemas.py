"""Schemas for Payroll module."""

from datetime import datetime
from decimal import Decimal

from pydantic import Field, model_validator

from src.modules.payroll.models import StaffStatus
from src.modules.payroll.tax import TaxBand, validate_tax_bands
from src.shared.schemas.base import BaseSchema


# --- Staff ---


class StaffArrearInput(BaseSchema):
    amount: Decimal = Field(..., gt=0)
    description: str | None = Field(None, max_length=200)


class StaffDeductionInput(BaseSchema):
    name: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., gt=0)


class StaffCreate(BaseSchema):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    position: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=20)
    email: str | None = Field(None, max_length=255)
    ssnit_number: str | None = Field(None, max_length=50)
    gross_salary: Decimal = Field(..., ge=0)
    arrears: list[StaffArrearInput] = Field(default_factory=list)
    deductions: list[StaffDeductionInput] = Field(default_factory=list)


class StaffUpdate(BaseSchema):
    """Lists given here replace the stored ones."""

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    position: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=20)
    email: str | None = Field(None, max_length=255)
    ssnit_number: str | None = Field(None, max_length=50)
    gross_salary: Decimal | None = Field(None, ge=0)
    status: StaffStatus | None = None
    arrears: list[StaffArrearInput] | None = None
    deductions: list[StaffDeductionInput] | None = None


class StaffArrearResponse(BaseSchema):
    id: int
    amount: Decimal
    description: str | None


class StaffDeductionResponse(BaseSchema):
    id: int
    name: str
    amount: Decimal


class StaffResponse(BaseSchema):
    id: int
    first_name: str
    last_name: str
    full_name: str
    position: str | None
    phone: str | None
    email: str | None
    ssnit_number: str | None
    gross_salary: Decimal
    status: str
    arrears: list[StaffArrearResponse]
    deductions: list[StaffDeductionResponse]
    created_at: datetime


# --- Settings ---


class TaxBracketInput(BaseSchema):
    lower_bound: Decimal = Field(..., ge=0)
    upper_bound: Decimal | None = None
    rate: Decimal = Field(..., ge=0, le=100)


class PayrollSettingsUpdate(BaseSchema):
    ssnit_employee_rate: Decimal = Field(..., ge=0, le=100)
    ssnit_employer_rate: Decimal = Field(..., ge=0, le=100)
    tax_brackets: list[TaxBracketInput] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_brackets(self):
        problems = validate_tax_bands(self.bands())
        if problems:
            raise ValueError("; ".join(problems))
        return self

    def bands(self) -> list[TaxBand]:
        return [TaxBand(b.lower_bound, b.upper_bound, b.rate) for b in self.tax_brackets]


class TaxBracketResponse(BaseSchema):
    lower_bound: Decimal
    upper_bound: Decimal | None
    rate: Decimal


class PayrollSettingsResponse(BaseSchema):
    ssnit_employee_rate: Decimal
    ssnit_employer_rate: Decimal
    tax_brackets: list[TaxBracketResponse]
    is_default: bool


# --- Payslips and runs ---


class PayslipResponse(BaseSchema):
    """Amounts rounded to 2 dp."""

    staff_id: int
    staff_name: str
    period: str
    gross_salary: Decimal
    ssnit_employee: Decimal
    ssnit_employer: Decimal
    taxable_income: Decimal
    income_tax: Decimal
    net_salary: Decimal
    deductions: list[dict]
    arrears: list[dict]


class PayrollRunCreate(BaseSchema):
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    notes: str | None = None


class PayrollRunSummary(BaseSchema):
    id: int
    month: int
    year: int
    period: str
    total_amount: Decimal
    employee_count: int
    processed_at: datetime


class PayrollRunResponse(PayrollRunSummary):
    notes: str | None
    payslips: list[PayslipResponse]

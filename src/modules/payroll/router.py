"""API endpoints for Payroll module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database.session import get_db
from src.modules.payroll.models import StaffStatus
from src.modules.payroll.schemas import (
    PayrollRunCreate,
    PayrollRunResponse,
    PayrollRunSummary,
    PayrollSettingsResponse,
    PayrollSettingsUpdate,
    PayslipResponse,
    StaffCreate,
    StaffResponse,
    StaffUpdate,
    TaxBracketResponse,
)
from src.modules.payroll.service import (
    EffectivePayrollSettings,
    PayrollRunProcessor,
    PayrollRunService,
    PayrollSettingsService,
    StaffService,
    breakdown_for,
    build_payslip,
    period_label,
)
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/payroll", tags=["Payroll"])


def _settings_response(effective: EffectivePayrollSettings) -> PayrollSettingsResponse:
    return PayrollSettingsResponse(
        ssnit_employee_rate=effective.employee_rate,
        ssnit_employer_rate=effective.employer_rate,
        tax_brackets=[
            TaxBracketResponse(lower_bound=b.lower, upper_bound=b.upper, rate=b.rate)
            for b in effective.bands
        ],
        is_default=effective.is_default,
    )


# --- Settings ---


@router.get("/settings", response_model=ApiResponse[PayrollSettingsResponse])
async def get_payroll_settings(db: AsyncSession = Depends(get_db)):
    """SSNIT rates and PAYE brackets in effect."""
    effective = await PayrollSettingsService(db).get_settings()
    return ApiResponse(success=True, data=_settings_response(effective))


@router.put("/settings", response_model=ApiResponse[PayrollSettingsResponse])
async def update_payroll_settings(
    data: PayrollSettingsUpdate, db: AsyncSession = Depends(get_db)
):
    """Replace SSNIT rates and PAYE brackets. Brackets must cover 0 upwards without gaps."""
    effective = await PayrollSettingsService(db).update_settings(data)
    return ApiResponse(success=True, message="Payroll settings saved", data=_settings_response(effective))


# --- Staff ---


@router.post(
    "/staff",
    response_model=ApiResponse[StaffResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_staff(data: StaffCreate, db: AsyncSession = Depends(get_db)):
    staff = await StaffService(db).create_staff(data)
    return ApiResponse(success=True, message="Staff member created", data=StaffResponse.model_validate(staff))


@router.get("/staff", response_model=ApiResponse[list[StaffResponse]])
async def list_staff(
    status_filter: StaffStatus | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    staff = await StaffService(db).list_staff(status_filter)
    return ApiResponse(success=True, data=[StaffResponse.model_validate(s) for s in staff])


@router.get("/staff/{staff_id}", response_model=ApiResponse[StaffResponse])
async def get_staff(staff_id: int, db: AsyncSession = Depends(get_db)):
    staff = await StaffService(db).get_staff(staff_id)
    return ApiResponse(success=True, data=StaffResponse.model_validate(staff))


@router.put("/staff/{staff_id}", response_model=ApiResponse[StaffResponse])
async def update_staff(staff_id: int, data: StaffUpdate, db: AsyncSession = Depends(get_db)):
    staff = await StaffService(db).update_staff(staff_id, data)
    return ApiResponse(success=True, message="Staff member updated", data=StaffResponse.model_validate(staff))


@router.get("/staff/{staff_id}/payslip-preview", response_model=ApiResponse[PayslipResponse])
async def preview_payslip(
    staff_id: int,
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000, le=2100),
    db: AsyncSession = Depends(get_db),
):
    """What this staff member would be paid for the period. Nothing is saved."""
    staff = await StaffService(db).get_staff(staff_id)
    effective = await PayrollSettingsService(db).get_settings()
    payslip = build_payslip(staff, breakdown_for(staff, effective), period_label(month, year))
    return ApiResponse(success=True, data=PayslipResponse.model_validate(payslip))


@router.get("/staff/{staff_id}/payslips", response_model=ApiResponse[list[PayslipResponse]])
async def list_staff_payslips(staff_id: int, db: AsyncSession = Depends(get_db)):
    await StaffService(db).get_staff(staff_id)
    payslips = await PayrollRunService(db).list_staff_payslips(staff_id)
    return ApiResponse(success=True, data=[PayslipResponse.model_validate(p) for p in payslips])


# --- Runs ---


@router.post(
    "/runs",
    response_model=ApiResponse[PayrollRunResponse],
    status_code=status.HTTP_201_CREATED,
)
async def run_payroll(data: PayrollRunCreate, db: AsyncSession = Depends(get_db)):
    """
    Process payroll for a month.

    Rejected with reason "duplicate period" when the month was already
    processed and "no active staff" when there is nobody to pay.
    """
    payroll_run = await PayrollRunProcessor(db).run(data.month, data.year, notes=data.notes)
    return ApiResponse(
        success=True,
        message=f"Payroll for {payroll_run.period} processed",
        data=PayrollRunResponse.model_validate(payroll_run),
    )


@router.get("/runs", response_model=ApiResponse[list[PayrollRunSummary]])
async def list_runs(year: int | None = Query(None), db: AsyncSession = Depends(get_db)):
    runs = await PayrollRunService(db).list_runs(year)
    return ApiResponse(success=True, data=[PayrollRunSummary.model_validate(r) for r in runs])


@router.get("/runs/{run_id}", response_model=ApiResponse[PayrollRunResponse])
async def get_run(run_id: int, db: AsyncSession = Depends(get_db)):
    payroll_run = await PayrollRunService(db).get_run(run_id)
    return ApiResponse(success=True, data=PayrollRunResponse.model_validate(payroll_run))

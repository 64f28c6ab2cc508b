"""API endpoints for Payments module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database.session import get_db
from src.modules.payments.models import PaymentStatus
from src.modules.payments.schemas import PaymentCreate, PaymentResponse
from src.modules.payments.service import PaymentService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post(
    "",
    response_model=ApiResponse[PaymentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def record_payment(data: PaymentCreate, db: AsyncSession = Depends(get_db)):
    """Record a payment. Payments cannot be edited afterwards."""
    service = PaymentService(db)
    payment = await service.record_payment(data)
    return ApiResponse(
        success=True,
        message="Payment recorded",
        data=PaymentResponse.model_validate(payment),
    )


@router.get("", response_model=ApiResponse[list[PaymentResponse]])
async def list_payments(
    student_id: int | None = Query(None),
    academic_year: str | None = Query(None),
    term: str | None = Query(None),
    status_filter: PaymentStatus | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    """List payments with optional filters."""
    service = PaymentService(db)
    payments = await service.list_payments(
        student_id=student_id,
        academic_year=academic_year,
        term=term,
        status=status_filter,
    )
    return ApiResponse(success=True, data=[PaymentResponse.model_validate(p) for p in payments])


@router.get("/{payment_id}", response_model=ApiResponse[PaymentResponse])
async def get_payment(payment_id: int, db: AsyncSession = Depends(get_db)):
    """Get payment by ID."""
    service = PaymentService(db)
    payment = await service.get_payment_by_id(payment_id)
    return ApiResponse(success=True, data=PaymentResponse.model_validate(payment))

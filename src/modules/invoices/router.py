from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database.session import get_db
from src.modules.invoices.schemas import InvoiceResponse
from src.modules.invoices.service import InvoiceService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.get("/outstanding", response_model=ApiResponse[list[InvoiceResponse]])
async def list_outstanding_invoices(
    term_id: int | None = Query(None, description="Defaults to the current term"),
    class_id: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Invoices of active students that still have a balance to pay."""
    service = InvoiceService(db)
    invoices = await service.list_outstanding_invoices(term_id=term_id, class_id=class_id)
    return ApiResponse(success=True, data=[InvoiceResponse.from_invoice(i) for i in invoices])


@router.get("/students/{student_id}", response_model=ApiResponse[InvoiceResponse])
async def get_student_invoice(
    student_id: int,
    term_id: int | None = Query(None, description="Defaults to the current term"),
    db: AsyncSession = Depends(get_db),
):
    """A student's invoice for a term, computed from the fee structure and payments."""
    service = InvoiceService(db)
    invoice = await service.get_student_invoice(student_id, term_id=term_id)
    return ApiResponse(success=True, data=InvoiceResponse.from_invoice(invoice))

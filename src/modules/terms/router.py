from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import get_db
from src.core.exceptions import NotFoundError
from src.modules.terms.schemas import TermCreate, TermResponse, TermUpdate
from src.modules.terms.service import TermService
from src.shared.schemas import SuccessResponse

router = APIRouter(prefix="/terms", tags=["Academic Terms"])


@router.get("", response_model=SuccessResponse[list[TermResponse]])
async def list_terms(
    academic_year: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List all academic terms."""
    service = TermService(db)
    terms = await service.list_terms(academic_year=academic_year)
    return SuccessResponse(
        data=[TermResponse.model_validate(t) for t in terms],
        message="Terms retrieved",
    )


@router.get("/current", response_model=SuccessResponse[TermResponse | None])
async def get_current_term(db: AsyncSession = Depends(get_db)):
    """Get the current academic term."""
    service = TermService(db)
    term = await service.get_current_term()
    if not term:
        return SuccessResponse(data=None, message="No current term")
    return SuccessResponse(data=TermResponse.model_validate(term), message="Current term retrieved")


@router.post("", response_model=SuccessResponse[TermResponse], status_code=201)
async def create_term(data: TermCreate, db: AsyncSession = Depends(get_db)):
    """Create a new academic term. It is not made current automatically."""
    service = TermService(db)
    term = await service.create_term(data)
    return SuccessResponse(data=TermResponse.model_validate(term), message="Term created")


@router.put("/{term_id}", response_model=SuccessResponse[TermResponse])
async def update_term(term_id: int, data: TermUpdate, db: AsyncSession = Depends(get_db)):
    """Update term dates."""
    service = TermService(db)
    term = await service.update_term(term_id, data)
    return SuccessResponse(data=TermResponse.model_validate(term), message="Term updated")


@router.post("/{term_id}/set-current", response_model=SuccessResponse[TermResponse])
async def set_current_term(term_id: int, db: AsyncSession = Depends(get_db)):
    """
    Make a term the current term.

    Every other term loses its current flag in the same transaction.
    """
    service = TermService(db)
    term = await service.set_current_term(term_id)
    return SuccessResponse(data=TermResponse.model_validate(term), message="Current term updated")


@router.get("/{term_id}", response_model=SuccessResponse[TermResponse])
async def get_term(term_id: int, db: AsyncSession = Depends(get_db)):
    """Get term by ID."""
    service = TermService(db)
    term = await service.get_term_by_id(term_id)
    if not term:
        raise NotFoundError("AcademicTerm", term_id)
    return SuccessResponse(data=TermResponse.model_validate(term), message="Term retrieved")

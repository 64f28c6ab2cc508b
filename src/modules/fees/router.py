from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import get_db
from src.core.exceptions import NotFoundError
from src.modules.fees.models import FeeStructure
from src.modules.fees.schemas import (
    FeeItemCreate,
    FeeItemResponse,
    FeeItemUpdate,
    FeeStructureItemResponse,
    FeeStructureResponse,
    FeeStructureUpsert,
)
from src.modules.fees.service import FeeService
from src.shared.schemas import SuccessResponse

router = APIRouter(prefix="/fees", tags=["Fees"])


def _structure_to_response(structure: FeeStructure, names: dict[int, str]) -> FeeStructureResponse:
    return FeeStructureResponse(
        id=structure.id,
        class_id=structure.class_id,
        academic_term_id=structure.academic_term_id,
        items=[
            FeeStructureItemResponse(
                fee_item_id=item.fee_item_id,
                fee_item_name=names.get(item.fee_item_id),
                amount=item.amount,
            )
            for item in structure.items
        ],
        total_amount=structure.total_amount,
    )


# --- Fee Item Endpoints ---


@router.get("/items", response_model=SuccessResponse[list[FeeItemResponse]])
async def list_fee_items(db: AsyncSession = Depends(get_db)):
    """List fee item definitions."""
    service = FeeService(db)
    items = await service.list_fee_items()
    return SuccessResponse(data=[FeeItemResponse.model_validate(i) for i in items])


@router.post("/items", response_model=SuccessResponse[FeeItemResponse], status_code=status.HTTP_201_CREATED)
async def create_fee_item(data: FeeItemCreate, db: AsyncSession = Depends(get_db)):
    """Create a fee item definition."""
    service = FeeService(db)
    item = await service.create_fee_item(data)
    return SuccessResponse(data=FeeItemResponse.model_validate(item), message="Fee item created")


@router.put("/items/{fee_item_id}", response_model=SuccessResponse[FeeItemResponse])
async def update_fee_item(fee_item_id: int, data: FeeItemUpdate, db: AsyncSession = Depends(get_db)):
    """Update a fee item definition."""
    service = FeeService(db)
    item = await service.update_fee_item(fee_item_id, data)
    return SuccessResponse(data=FeeItemResponse.model_validate(item), message="Fee item updated")


@router.delete("/items/{fee_item_id}", response_model=SuccessResponse[None])
async def delete_fee_item(fee_item_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a fee item definition. Structure lines referencing it stop being billed."""
    service = FeeService(db)
    await service.delete_fee_item(fee_item_id)
    return SuccessResponse(data=None, message="Fee item deleted")


# --- Fee Structure Endpoints ---


@router.get("/structures", response_model=SuccessResponse[list[FeeStructureResponse]])
async def list_structures(
    academic_term_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """List fee structures configured for a term."""
    service = FeeService(db)
    names = {i.id: i.name for i in await service.list_fee_items()}
    structures = await service.list_structures(academic_term_id)
    return SuccessResponse(data=[_structure_to_response(s, names) for s in structures])


@router.get("/structures/lookup", response_model=SuccessResponse[FeeStructureResponse])
async def get_structure(
    class_id: int = Query(...),
    academic_term_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Get the fee structure for a class and term."""
    service = FeeService(db)
    structure = await service.get_structure(class_id, academic_term_id)
    if not structure:
        raise NotFoundError("FeeStructure")
    names = {i.id: i.name for i in await service.list_fee_items()}
    return SuccessResponse(data=_structure_to_response(structure, names))


@router.put("/structures", response_model=SuccessResponse[FeeStructureResponse])
async def upsert_structure(data: FeeStructureUpsert, db: AsyncSession = Depends(get_db)):
    """Create or replace the fee structure for a class and term."""
    service = FeeService(db)
    structure = await service.upsert_structure(data)
    names = {i.id: i.name for i in await service.list_fee_items()}
    return SuccessResponse(data=_structure_to_response(structure, names), message="Fee structure saved")

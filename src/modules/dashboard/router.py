"""API for dashboard summary."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database.session import get_db
from src.modules.dashboard.schemas import DashboardResponse
from src.modules.dashboard.service import DashboardService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("", response_model=ApiResponse[DashboardResponse])
async def get_dashboard(
    term_id: int | None = Query(None, description="Defaults to the current term"),
    year: int | None = Query(None, description="Calendar year for spending totals"),
    db: AsyncSession = Depends(get_db),
):
    """Term billing and collections, plus this year's spending."""
    service = DashboardService(db)
    data = await service.get_summary(term_id=term_id, year=year)
    return ApiResponse(data=DashboardResponse(**data))

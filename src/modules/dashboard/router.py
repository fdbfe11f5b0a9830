"""API for dashboard summary (main page)."""

from fastapi import APIRouter

from src.modules.collections.service import resolve_bag
from src.modules.dashboard.schemas import DashboardRequest, DashboardResponse
from src.modules.dashboard.service import DashboardService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.post(
    "/summary",
    response_model=ApiResponse[DashboardResponse],
)
async def get_dashboard(body: DashboardRequest):
    """
    Get dashboard summary for main page cards.

    Uses the posted data bag, or loads it from the configured data source.
    """
    loaded = await resolve_bag(body.data)
    data = DashboardService(loaded.bag).get_summary(as_of=body.as_of)
    return ApiResponse(data=DashboardResponse(**data, notices=loaded.notices))

from fastapi import APIRouter, Depends

from tutorhub.dependencies.auth import require_admin
from tutorhub.dependencies.services import get_dashboard_service
from tutorhub.model.user_models import User
from tutorhub.schemas.dashboard import DashboardStats
from tutorhub.schemas.generic import ApiResponse
from tutorhub.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get(
    "/stats",
    response_model=ApiResponse[DashboardStats],
    summary="Admin dashboard statistics",
    description="Totals with month-over-month growth, users by role and recent activity.",
)
async def get_stats(
        _: User = Depends(require_admin),
        dashboard_service: DashboardService = Depends(get_dashboard_service),
) -> ApiResponse[DashboardStats]:
    return ApiResponse[DashboardStats].ok(data=await dashboard_service.get_stats())

"""
Dashboard router.

Read-only summary of the caller's organization; every role may view it.
"""

from fastapi import APIRouter, Depends

from crm_api.auth.dependencies import get_current_user
from crm_api.auth.schemas import CurrentUser
from crm_api.dashboard.schemas import DashboardData
from crm_api.dashboard.service import DashboardService
from crm_api.db.database import MongoDatabase, get_database
from crm_api.schemas import ApiResponse

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


def get_dashboard_service(database: MongoDatabase = Depends(get_database)) -> DashboardService:
    return DashboardService(database)


@router.get("", response_model=ApiResponse[DashboardData])
def get_dashboard(
    current_user: CurrentUser = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> ApiResponse[DashboardData]:
    """
    Get the dashboard for the caller's organization.

    Returns:
        ApiResponse[DashboardData]: Stats, recent activity, top deals and charts
    """
    return ApiResponse(data=service.get_dashboard(current_user.organization_id))

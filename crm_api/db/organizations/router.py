"""Router for the caller's organization."""

from fastapi import APIRouter, Depends

from crm_api.auth.dependencies import get_current_user, require_admin
from crm_api.auth.schemas import CurrentUser
from crm_api.db.dependencies import get_organization_service
from crm_api.db.organizations.schemas import OrganizationData, OrganizationSettingsUpdate
from crm_api.db.organizations.service import OrganizationService
from crm_api.schemas import ApiResponse

router = APIRouter(prefix="/organization", tags=["Organization"])


@router.get("", response_model=ApiResponse[OrganizationData])
def get_organization(
    current_user: CurrentUser = Depends(get_current_user),
    service: OrganizationService = Depends(get_organization_service),
) -> ApiResponse[OrganizationData]:
    organization = service.get_organization(current_user.organization_id)
    return ApiResponse(data=OrganizationData(organization=organization))


@router.put("/settings", response_model=ApiResponse[OrganizationData])
def update_organization_settings(
    body: OrganizationSettingsUpdate,
    current_user: CurrentUser = Depends(require_admin),
    service: OrganizationService = Depends(get_organization_service),
) -> ApiResponse[OrganizationData]:
    """Merge new settings into the organization. Admins only."""
    organization = service.update_settings(current_user.organization_id, body)
    return ApiResponse(
        message="Organization settings updated",
        data=OrganizationData(organization=organization),
    )

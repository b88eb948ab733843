"""Router for managing team members of the caller's organization."""

from http import HTTPStatus

from fastapi import APIRouter, Depends

from crm_api.auth.dependencies import require_admin, require_manager
from crm_api.auth.schemas import CurrentUser
from crm_api.db.dependencies import get_user_service
from crm_api.db.users.schemas import UserCreateRequest, UserData, UserListData, UserUpdateRequest
from crm_api.db.users.service import UserService
from crm_api.schemas import ApiResponse

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=ApiResponse[UserListData])
def list_users(
    current_user: CurrentUser = Depends(require_manager),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserListData]:
    """List users of the caller's organization. Managers and admins only."""
    return ApiResponse(data=UserListData(users=service.list_users(current_user)))


@router.post("", response_model=ApiResponse[UserData], status_code=HTTPStatus.CREATED)
def create_user(
    body: UserCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserData]:
    user = service.create_user(current_user, body)
    return ApiResponse(message="User created successfully", data=UserData(user=user))


@router.patch("/{user_id}", response_model=ApiResponse[UserData])
def update_user(
    user_id: str,
    body: UserUpdateRequest,
    current_user: CurrentUser = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserData]:
    """Change a member's role or deactivate them. Admins only."""
    user = service.update_user(current_user, user_id, body)
    return ApiResponse(message="User updated successfully", data=UserData(user=user))

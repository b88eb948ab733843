"""
Authentication router.

Registration and login are rate limited per client address; the remaining
endpoints operate on the authenticated caller.
"""

from http import HTTPStatus

from fastapi import APIRouter, Depends, Request

from crm_api.auth.dependencies import get_auth_service, get_bearer_token, get_current_user
from crm_api.auth.schemas import (
    AuthData,
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    SessionData,
)
from crm_api.auth.service import AuthService
from crm_api.db.users.schemas import UserData
from crm_api.middleware import auth_rate_limit, limiter
from crm_api.schemas import ApiResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=ApiResponse[AuthData],
    status_code=HTTPStatus.CREATED,
)
@limiter.limit(auth_rate_limit)
def register(
    request: Request,
    body: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[AuthData]:
    """
    Register a new organization and its admin user.

    Returns:
        ApiResponse[AuthData]: Access token, user and organization
    """
    data = auth_service.register(body)
    return ApiResponse(message="Registration successful", data=data)


@router.post("/login", response_model=ApiResponse[AuthData])
@limiter.limit(auth_rate_limit)
def login(
    request: Request,
    body: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[AuthData]:
    """Exchange email and password for an access token."""
    data = auth_service.login(body.email, body.password)
    return ApiResponse(message="Login successful", data=data)


@router.get("/verify", response_model=ApiResponse[SessionData])
def verify(
    token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[SessionData]:
    """Return the current user and organization for a valid token."""
    return ApiResponse(data=auth_service.verify_token(token))


@router.get("/profile", response_model=ApiResponse[SessionData])
def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[SessionData]:
    return ApiResponse(data=auth_service.get_profile(current_user))


@router.put("/profile", response_model=ApiResponse[UserData])
def update_profile(
    body: ProfileUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[UserData]:
    user = auth_service.update_profile(current_user, body)
    return ApiResponse(message="Profile updated successfully", data=UserData(user=user))


@router.post("/change-password", response_model=ApiResponse[None])
def change_password(
    body: ChangePasswordRequest,
    current_user: CurrentUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[None]:
    auth_service.change_password(current_user, body)
    return ApiResponse(message="Password changed successfully")

"""
Authentication and authorization dependencies.

This module provides FastAPI dependencies for resolving the bearer token to
the current user and for enforcing roles.
"""

from collections.abc import Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from crm_api.auth.config import AuthSettings
from crm_api.auth.constants import MANAGEMENT_ROLES, WRITE_ROLES, Role
from crm_api.auth.schemas import CurrentUser
from crm_api.auth.service import AuthService
from crm_api.db.database import MongoDatabase, get_database
from crm_api.exceptions import AuthError, ForbiddenError

# Missing headers are reported by get_current_user with the API's error envelope
security = HTTPBearer(auto_error=False)


def get_auth_settings_dependency(request: Request) -> AuthSettings:
    """Auth settings the application was created with."""
    return request.app.state.auth_settings


def get_auth_service(
    database: MongoDatabase = Depends(get_database),
    settings: AuthSettings = Depends(get_auth_settings_dependency),
) -> AuthService:
    return AuthService(database, settings)


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    """
    Extract the bearer token from the Authorization header.

    Raises:
        AuthError: If no bearer token was sent
    """
    if not credentials or not credentials.credentials:
        raise AuthError("Access token required")
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> CurrentUser:
    """
    Get the current user for the request.

    The user is read from storage rather than trusted from the token, so a
    deactivated user or changed role takes effect on the next request.

    Args:
        token: Bearer token from the Authorization header
        auth_service: The auth service

    Returns:
        CurrentUser: The authenticated caller

    Raises:
        AuthError: If the token is invalid or the user is missing or inactive
    """
    return CurrentUser.from_document(auth_service.authenticate(token))


def require_roles(*roles: Role) -> Callable[..., CurrentUser]:
    """
    Build a dependency that admits only the given roles.

    Args:
        roles: Roles allowed through

    Returns:
        A FastAPI dependency returning the current user
    """

    def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            raise ForbiddenError("Insufficient permissions")
        return user

    return dependency


# Convenience dependencies for common role sets
require_admin = require_roles(Role.ADMIN)
require_manager = require_roles(*MANAGEMENT_ROLES)
require_writer = require_roles(*WRITE_ROLES)

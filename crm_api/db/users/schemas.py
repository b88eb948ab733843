"""Pydantic schemas for users."""

from enum import Enum
from typing import Annotated

from pydantic import Field, StringConstraints

from crm_api.auth.constants import (
    MAX_NAME_LENGTH,
    MAX_PASSWORD_LENGTH,
    MIN_NAME_LENGTH,
    MIN_PASSWORD_LENGTH,
    Role,
)
from crm_api.schemas import (
    CamelModel,
    DocumentModel,
    Email,
    RequestModel,
    UpdateRequest,
    UTCDateTime,
)

PersonName = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True, min_length=MIN_NAME_LENGTH, max_length=MAX_NAME_LENGTH
    ),
]
Password = Annotated[
    str, StringConstraints(min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH)
]


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class UserPreferences(CamelModel):
    theme: Theme = Theme.LIGHT
    notifications: bool = True
    timezone: str = "UTC"


class SafeUser(DocumentModel):
    """User fields that may leave the server; never includes the password hash."""

    email: str = Field(..., description="Login email, lowercased")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    role: Role = Field(..., description="Role within the organization")
    organization_id: str = Field(..., description="Owning organization")
    is_active: bool = Field(default=True, description="Inactive users cannot sign in")
    last_login_at: UTCDateTime | None = Field(default=None, description="Last login")
    preferences: UserPreferences = Field(default_factory=UserPreferences)


class UserCreateRequest(RequestModel):
    """Admin request to add a team member to the organization."""

    first_name: PersonName
    last_name: PersonName
    email: Email
    password: Password
    role: Role = Role.SALES_REP


class UserUpdateRequest(UpdateRequest):
    """Admin request to change a team member's role or active flag."""

    required_fields = frozenset({"role", "isActive"})

    role: Role | None = None
    is_active: bool | None = None


class UserData(CamelModel):
    user: SafeUser


class UserListData(CamelModel):
    users: list[SafeUser]

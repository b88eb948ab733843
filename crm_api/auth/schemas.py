"""
Pydantic schemas for authentication.

Request bodies are validated here before they reach the auth service.
"""

from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints

from crm_api.auth.constants import (
    MAX_ORGANIZATION_NAME_LENGTH,
    MAX_PASSWORD_LENGTH,
    MIN_NAME_LENGTH,
    Role,
    WRITE_ROLES,
)
from crm_api.db.organizations.schemas import OrganizationResponse
from crm_api.db.users.schemas import Password, PersonName, SafeUser
from crm_api.schemas import CamelModel, Email
from crm_api.utils.sanitizer import sanitize_text

OrganizationName = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True,
        min_length=MIN_NAME_LENGTH,
        max_length=MAX_ORGANIZATION_NAME_LENGTH,
    ),
    AfterValidator(lambda value: sanitize_text(value, max_length=None)),
]


class RegisterRequest(CamelModel):
    """Sign-up of a new organization and its first admin."""

    first_name: PersonName
    last_name: PersonName
    email: Email
    password: Password
    organization_name: OrganizationName


class LoginRequest(CamelModel):
    email: Email
    password: Annotated[str, StringConstraints(min_length=1, max_length=MAX_PASSWORD_LENGTH)]


class ProfileUpdateRequest(CamelModel):
    first_name: PersonName | None = None
    last_name: PersonName | None = None
    email: Email | None = None


class ChangePasswordRequest(CamelModel):
    current_password: Annotated[
        str, StringConstraints(min_length=1, max_length=MAX_PASSWORD_LENGTH)
    ]
    new_password: Password


class SessionData(CamelModel):
    """Fresh user and organization as currently stored."""

    user: SafeUser
    organization: OrganizationResponse


class AuthData(SessionData):
    token: str = Field(..., description="Bearer access token")


class TokenPayload(BaseModel):
    """Claims carried by an access token."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sub: str
    email: str
    organization_id: str = Field(alias="organizationId")
    role: Role
    iat: int
    exp: int


class CurrentUser(BaseModel):
    """Authenticated caller, loaded from storage on every request."""

    id: str
    email: str
    first_name: str
    last_name: str
    role: Role
    organization_id: str

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "CurrentUser":
        return cls(
            id=str(document["_id"]),
            email=document["email"],
            first_name=document.get("firstName", ""),
            last_name=document.get("lastName", ""),
            role=document["role"],
            organization_id=document["organizationId"],
        )

    @property
    def can_write(self) -> bool:
        return self.role in WRITE_ROLES

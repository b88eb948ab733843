"""
Authentication service.

Registers organizations together with their first admin, checks
credentials, and issues and verifies access tokens. Every verification
re-reads the user so deactivation and role changes apply immediately.
"""

from crm_api.auth.config import AuthSettings
from crm_api.auth.constants import INVALID_CREDENTIALS_MESSAGE, INVALID_TOKEN_MESSAGE, Role
from crm_api.auth.schemas import (
    AuthData,
    ChangePasswordRequest,
    CurrentUser,
    ProfileUpdateRequest,
    RegisterRequest,
    SessionData,
)
from crm_api.auth.security import (
    create_access_token,
    decode_access_token,
    dummy_verify,
    hash_password,
    verify_password,
)
from crm_api.db.database import MongoDatabase
from crm_api.db.organizations.repository import OrganizationRepository
from crm_api.db.organizations.schemas import OrganizationResponse
from crm_api.db.organizations.service import new_organization_document, slugify
from crm_api.db.repository import Document
from crm_api.db.users.repository import UserRepository
from crm_api.db.users.schemas import SafeUser, UserPreferences
from crm_api.exceptions import AuthError, ConflictError, NotFoundError, ValidationError
from crm_api.utils.logger import logger


class AuthService:
    """Credential and token handling backed by the users and organizations collections."""

    def __init__(self, database: MongoDatabase, settings: AuthSettings):
        """
        Initialize the service.

        Args:
            database: Shared MongoDB adapter
            settings: Token signing and password hashing configuration
        """
        self.settings = settings
        self.users = UserRepository(database)
        self.organizations = OrganizationRepository(database)

    def register(self, request: RegisterRequest) -> AuthData:
        """
        Create an organization and its admin user, then sign them in.

        The organization id is generated before either insert. If the user
        insert fails, the organization is removed again before the error
        propagates, so a failed registration leaves nothing behind.

        Args:
            request: Validated sign-up details

        Returns:
            AuthData: Token plus the new user and organization

        Raises:
            ValidationError: If the organization name yields an empty slug
            ConflictError: If the email or organization slug is taken
        """
        slug = slugify(request.organization_name)
        if not slug:
            raise ValidationError("Organization name must contain letters or numbers")

        if self.users.find_by_email(request.email):
            raise ConflictError("User with this email already exists")
        if self.organizations.find_by_slug(slug):
            raise ConflictError("Organization with this name already exists")

        password_hash = hash_password(request.password, self.settings)
        organization = self.organizations.create(
            new_organization_document(request.organization_name, slug)
        )
        organization_id = str(organization["_id"])

        try:
            user = self.users.create(
                {
                    "email": request.email,
                    "password": password_hash,
                    "firstName": request.first_name,
                    "lastName": request.last_name,
                    "role": Role.ADMIN.value,
                    "organizationId": organization_id,
                    "isActive": True,
                    "lastLoginAt": None,
                    "preferences": UserPreferences().model_dump(mode="json", by_alias=True),
                }
            )
        except Exception:
            self.organizations.delete_by_id(organization_id)
            logger.warning(
                "Registration rolled back after user insert failed",
                organization_id=organization_id,
                email=request.email,
            )
            raise

        logger.info(
            "Organization registered",
            organization_id=organization_id,
            user_id=str(user["_id"]),
            slug=slug,
        )
        return self._auth_data(user, organization)

    def login(self, email: str, password: str) -> AuthData:
        """
        Check credentials and issue a token.

        Unknown email, inactive account and wrong password all fail the same
        way.

        Raises:
            AuthError: If the credentials are not accepted
            NotFoundError: If the user's organization no longer exists
        """
        user = self.users.find_by_email(email)
        if user is None:
            dummy_verify(self.settings)
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)

        password_ok = verify_password(password, user.get("password", ""), self.settings)
        if not password_ok or not user.get("isActive", False):
            logger.info("Login rejected", user_id=str(user["_id"]))
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)

        user = self.users.update_last_login(str(user["_id"])) or user
        organization = self._get_organization(user)

        logger.info(
            "User logged in",
            user_id=str(user["_id"]),
            organization_id=user["organizationId"],
        )
        return self._auth_data(user, organization)

    def authenticate(self, token: str) -> Document:
        """
        Resolve a bearer token to the stored, active user it names.

        Raises:
            AuthError: If the token is invalid or the user is missing or inactive
        """
        payload = decode_access_token(token, self.settings)
        user = self.users.find_by_id(payload.sub)
        if user is None or not user.get("isActive", False):
            raise AuthError(INVALID_TOKEN_MESSAGE)
        return user

    def verify_token(self, token: str) -> SessionData:
        """
        Return the token holder's current user and organization.

        Raises:
            AuthError: If the token or its user is no longer valid
            NotFoundError: If the organization no longer exists
        """
        user = self.authenticate(token)
        organization = self._get_organization(user)
        return SessionData(
            user=SafeUser.from_document(user),
            organization=OrganizationResponse.from_document(organization),
        )

    def get_profile(self, current_user: CurrentUser) -> SessionData:
        user = self.users.find_by_id(current_user.id)
        if user is None:
            raise NotFoundError("User not found")
        return SessionData(
            user=SafeUser.from_document(user),
            organization=OrganizationResponse.from_document(self._get_organization(user)),
        )

    def update_profile(
        self, current_user: CurrentUser, request: ProfileUpdateRequest
    ) -> SafeUser:
        """
        Update the caller's own name or email.

        Raises:
            ConflictError: If the new email belongs to another user
        """
        changes = request.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
        email = changes.get("email")
        if email and email != current_user.email:
            existing = self.users.find_by_email(email)
            if existing and str(existing["_id"]) != current_user.id:
                raise ConflictError("Email is already in use")

        user = (
            self.users.update_by_id(current_user.id, changes)
            if changes
            else self.users.find_by_id(current_user.id)
        )
        if user is None:
            raise NotFoundError("User not found")

        logger.info("Profile updated", user_id=current_user.id, fields=sorted(changes))
        return SafeUser.from_document(user)

    def change_password(
        self, current_user: CurrentUser, request: ChangePasswordRequest
    ) -> None:
        """
        Replace the caller's password after checking the current one.

        Raises:
            ValidationError: If the current password is wrong
        """
        user = self.users.find_by_id(current_user.id)
        if user is None:
            raise NotFoundError("User not found")
        if not verify_password(request.current_password, user["password"], self.settings):
            raise ValidationError("Current password is incorrect")

        self.users.update_password(
            current_user.id, hash_password(request.new_password, self.settings)
        )
        logger.info("Password changed", user_id=current_user.id)

    def _get_organization(self, user: Document) -> Document:
        organization = self.organizations.find_by_id(user["organizationId"])
        if organization is None:
            raise NotFoundError("Organization not found")
        return organization

    def _auth_data(self, user: Document, organization: Document) -> AuthData:
        return AuthData(
            token=create_access_token(user, self.settings),
            user=SafeUser.from_document(user),
            organization=OrganizationResponse.from_document(organization),
        )

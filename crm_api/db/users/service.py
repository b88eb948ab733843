"""Service layer for managing an organization's team members."""

from crm_api.auth.config import AuthSettings
from crm_api.auth.constants import Role
from crm_api.auth.schemas import CurrentUser
from crm_api.auth.security import hash_password
from crm_api.db.database import MongoDatabase
from crm_api.db.users.repository import UserRepository
from crm_api.db.users.schemas import (
    SafeUser,
    UserCreateRequest,
    UserPreferences,
    UserUpdateRequest,
)
from crm_api.exceptions import ConflictError, ForbiddenError, NotFoundError
from crm_api.utils.logger import logger
from crm_api.utils.sanitizer import require_object_id, to_object_id


class UserService:
    """Service for listing, adding and updating users within one organization."""

    def __init__(self, database: MongoDatabase, auth_settings: AuthSettings):
        """
        Initialize the service.

        Args:
            database: Shared MongoDB adapter
            auth_settings: Password hashing configuration
        """
        self.repository = UserRepository(database)
        self.auth_settings = auth_settings

    def list_users(self, current_user: CurrentUser) -> list[SafeUser]:
        users = self.repository.find_by_organization(current_user.organization_id)
        return [SafeUser.from_document(user) for user in users]

    def create_user(self, current_user: CurrentUser, request: UserCreateRequest) -> SafeUser:
        """
        Add a team member to the caller's organization.

        Args:
            current_user: The authenticated admin
            request: New user's details

        Returns:
            SafeUser: The created user

        Raises:
            ConflictError: If the email is already registered
        """
        if self.repository.find_by_email(request.email):
            raise ConflictError("User with this email already exists")

        user = self.repository.create(
            {
                "email": request.email,
                "password": hash_password(request.password, self.auth_settings),
                "firstName": request.first_name,
                "lastName": request.last_name,
                "role": request.role,
                "organizationId": current_user.organization_id,
                "isActive": True,
                "lastLoginAt": None,
                "preferences": UserPreferences().model_dump(mode="json", by_alias=True),
            }
        )
        logger.info(
            "User added to organization",
            user_id=str(user["_id"]),
            organization_id=current_user.organization_id,
            created_by=current_user.id,
            role=request.role,
        )
        return SafeUser.from_document(user)

    def update_user(
        self, current_user: CurrentUser, user_id: str, request: UserUpdateRequest
    ) -> SafeUser:
        """
        Change a member's role or active flag.

        Deactivation takes effect immediately: existing tokens of the member
        stop authenticating on their next request.

        Raises:
            ValidationError: If the id is malformed
            NotFoundError: If the user is not in the caller's organization
            ForbiddenError: If admins try to demote or deactivate themselves
        """
        require_object_id(user_id, "user")
        member = self.repository.require_member(current_user.organization_id, user_id)

        changes = request.to_changes()
        if to_object_id(user_id) == to_object_id(current_user.id) and (
            changes.get("isActive") is False
            or changes.get("role", Role.ADMIN) != Role.ADMIN
        ):
            raise ForbiddenError("You cannot deactivate or demote your own account")

        if not changes:
            return SafeUser.from_document(member)

        user = self.repository.update_by_id(user_id, changes)
        if user is None:
            raise NotFoundError("User not found")
        logger.info(
            "User updated",
            user_id=user_id,
            organization_id=current_user.organization_id,
            updated_by=current_user.id,
            fields=sorted(changes),
        )
        return SafeUser.from_document(user)

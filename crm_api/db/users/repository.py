"""Repository for user documents."""

from crm_api.db.database import CollectionName
from crm_api.db.repository import BaseRepository, Document
from crm_api.exceptions import NotFoundError
from crm_api.utils.dates import utc_now
from crm_api.utils.sanitizer import sanitize_email, to_object_id


class UserRepository(BaseRepository):
    """Repository for managing users in the database.

    Emails are unique across all organizations because login is by email
    alone.
    """

    collection_name = CollectionName.USERS
    duplicate_message = "User with this email already exists"

    def find_by_email(self, email: str) -> Document | None:
        return self.find_one({"email": sanitize_email(email)})

    def find_by_organization(self, organization_id: str) -> list[Document]:
        return self.find(
            {"organizationId": organization_id},
            sort=[("lastName", 1), ("firstName", 1)],
        )

    def find_member(self, organization_id: str, user_id: str) -> Document | None:
        """
        Get a user only if they belong to the given organization.

        Args:
            organization_id: Caller's organization
            user_id: User ID

        Returns:
            User document or None if absent or in another organization
        """
        object_id = to_object_id(user_id)
        if object_id is None:
            return None
        return self.find_one({"_id": object_id, "organizationId": organization_id})

    def require_member(self, organization_id: str, user_id: str) -> Document:
        """
        Raises:
            NotFoundError: If the user is not a member of the organization
        """
        user = self.find_member(organization_id, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_last_login(self, user_id: str) -> Document | None:
        return self.update_by_id(user_id, {"lastLoginAt": utc_now()})

    def update_password(self, user_id: str, password_hash: str) -> Document | None:
        return self.update_by_id(user_id, {"password": password_hash})

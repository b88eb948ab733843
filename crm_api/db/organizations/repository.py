"""Repository for organization documents."""

from typing import Any

from crm_api.db.database import CollectionName
from crm_api.db.repository import BaseRepository, Document


class OrganizationRepository(BaseRepository):
    """Repository for managing organizations in the database."""

    collection_name = CollectionName.ORGANIZATIONS
    duplicate_message = "Organization with this name already exists"

    def find_by_slug(self, slug: str) -> Document | None:
        """
        Get an organization by its unique slug.

        Args:
            slug: Normalized slug

        Returns:
            Organization document or None if not found
        """
        return self.find_one({"slug": slug})

    def update_settings(
        self, organization_id: str, settings: dict[str, Any]
    ) -> Document | None:
        """
        Merge individual settings keys without replacing the whole sub-document.

        Args:
            organization_id: Organization ID
            settings: camelCase settings keys to overwrite

        Returns:
            Updated organization or None if not found
        """
        changes = {f"settings.{key}": value for key, value in settings.items()}
        return self.update_by_id(organization_id, changes)

"""Service layer for organization management."""

import re
from datetime import timedelta

from bson import ObjectId

from crm_api.db.database import MongoDatabase
from crm_api.db.organizations.repository import OrganizationRepository
from crm_api.db.organizations.schemas import (
    OrganizationPlan,
    OrganizationResponse,
    OrganizationSettings,
    OrganizationSettingsUpdate,
    OrganizationStatus,
)
from crm_api.db.repository import Document
from crm_api.exceptions import NotFoundError
from crm_api.utils.dates import utc_now
from crm_api.utils.logger import logger

BILLING_PERIOD_DAYS = 30

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """
    Derive the organization slug from its display name.

    Examples:
        "Acme Inc" -> "acme-inc"
        "  Foo & Bar, LLC " -> "foo-bar-llc"
    """
    return _NON_ALPHANUMERIC.sub("-", name.lower()).strip("-")


def new_organization_document(name: str, slug: str) -> Document:
    """
    Build a new starter-plan organization with a pre-generated id.

    The id is assigned up front so the owning user can reference it before
    the organization is inserted.
    """
    now = utc_now()
    return {
        "_id": ObjectId(),
        "name": name,
        "slug": slug,
        "plan": OrganizationPlan.STARTER.value,
        "status": OrganizationStatus.ACTIVE.value,
        "settings": OrganizationSettings().model_dump(by_alias=True),
        "billing": {
            "currentPeriodStart": now,
            "currentPeriodEnd": now + timedelta(days=BILLING_PERIOD_DAYS),
        },
    }


class OrganizationService:
    """Service for reading and configuring the caller's organization."""

    def __init__(self, database: MongoDatabase):
        """
        Initialize the service.

        Args:
            database: Shared MongoDB adapter
        """
        self.repository = OrganizationRepository(database)

    def get_organization(self, organization_id: str) -> OrganizationResponse:
        organization = self.repository.find_by_id(organization_id)
        if organization is None:
            raise NotFoundError("Organization not found")
        return OrganizationResponse.from_document(organization)

    def update_settings(
        self, organization_id: str, update: OrganizationSettingsUpdate
    ) -> OrganizationResponse:
        """
        Merge the provided settings into the organization.

        Args:
            organization_id: Caller's organization
            update: Settings to change; unset fields are left untouched

        Returns:
            OrganizationResponse: The updated organization

        Raises:
            NotFoundError: If the organization no longer exists
        """
        changes = update.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
        if not changes:
            return self.get_organization(organization_id)

        organization = self.repository.update_settings(organization_id, changes)
        if organization is None:
            raise NotFoundError("Organization not found")

        logger.info(
            "Organization settings updated",
            organization_id=organization_id,
            fields=sorted(changes),
        )
        return OrganizationResponse.from_document(organization)

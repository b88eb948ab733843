"""
Cross-collection reference checks.

Contacts, deals and activities point at other records by id. Those ids must
resolve inside the writer's own organization, otherwise one tenant could
link (and later read names from) another tenant's records.
"""

from crm_api.db.companies.repository import CompanyRepository
from crm_api.db.contacts.repository import ContactRepository
from crm_api.db.database import MongoDatabase
from crm_api.db.deals.repository import DealRepository
from crm_api.db.repository import Document
from crm_api.db.users.repository import UserRepository


class ReferenceValidator:
    """Validates companyId, contactId, dealId and assignedTo on write payloads."""

    def __init__(self, database: MongoDatabase):
        self.users = UserRepository(database)
        self.references = {
            "companyId": CompanyRepository(database),
            "contactId": ContactRepository(database),
            "dealId": DealRepository(database),
        }

    def check(self, organization_id: str, document: Document) -> None:
        """
        Ensure every reference present in ``document`` exists in the tenant.

        Args:
            organization_id: Caller's organization
            document: camelCase create payload or update changes

        Raises:
            NotFoundError: If a referenced record is not in the organization
        """
        for field, repository in self.references.items():
            if document.get(field):
                repository.get(organization_id, document[field])

        if document.get("assignedTo"):
            self.users.require_member(organization_id, document["assignedTo"])

"""Repository for contact documents."""

from crm_api.db.database import CollectionName
from crm_api.db.repository import Document, TenantRepository
from crm_api.utils.sanitizer import sanitize_email


class ContactRepository(TenantRepository):
    """Tenant-scoped access to contacts."""

    collection_name = CollectionName.CONTACTS
    entity_label = "Contact"
    duplicate_message = "Contact with this email already exists"
    search_fields = ("firstName", "lastName", "email", "jobTitle")

    def find_by_email(self, organization_id: str, email: str) -> Document | None:
        return self.find_one(organization_id, {"email": sanitize_email(email)})

    def find_by_company(self, organization_id: str, company_id: str) -> list[Document]:
        return self.find(organization_id, {"companyId": company_id}, sort=[("lastName", 1)])

    def find_by_status(self, organization_id: str, status: str) -> list[Document]:
        return self.find(organization_id, {"status": status}, sort=[("createdAt", -1)])

    def find_by_assignee(self, organization_id: str, user_id: str) -> list[Document]:
        return self.find(organization_id, {"assignedTo": user_id}, sort=[("createdAt", -1)])

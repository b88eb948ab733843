"""Service layer for contacts."""

from crm_api.auth.schemas import CurrentUser
from crm_api.db.companies.repository import CompanyRepository
from crm_api.db.contacts.repository import ContactRepository
from crm_api.db.contacts.schemas import (
    ContactCreateRequest,
    ContactResponse,
    ContactStatus,
    ContactUpdateRequest,
)
from crm_api.db.database import MongoDatabase
from crm_api.db.references import ReferenceValidator
from crm_api.db.repository import Document
from crm_api.exceptions import ConflictError, NotFoundError
from crm_api.utils.logger import logger
from crm_api.utils.sanitizer import Pagination, require_object_id, sanitize_search_query


class ContactService:
    """Contact CRUD within the caller's organization."""

    def __init__(self, database: MongoDatabase):
        """
        Initialize the service.

        Args:
            database: Shared MongoDB adapter
        """
        self.repository = ContactRepository(database)
        self.companies = CompanyRepository(database)
        self.references = ReferenceValidator(database)

    def list_contacts(
        self,
        current_user: CurrentUser,
        pagination: Pagination,
        search: str | None = None,
        status: ContactStatus | None = None,
        company_id: str | None = None,
    ) -> tuple[list[ContactResponse], int]:
        """
        Page through the organization's contacts, newest first.

        Args:
            current_user: The authenticated caller
            pagination: Sanitized page window
            search: Raw search text matched against name, email and job title
            status: Optional status filter
            company_id: Optional company filter

        Returns:
            tuple: (contacts on the page, total matching contacts)
        """
        query = self.repository.search_filter(sanitize_search_query(search))
        if status:
            query["status"] = ContactStatus(status).value
        if company_id:
            query["companyId"] = require_object_id(company_id, "company")

        documents, total = self.repository.paginate(
            current_user.organization_id, query, pagination, sort=[("createdAt", -1)]
        )
        return self._to_responses(current_user.organization_id, documents), total

    def get_contact(self, current_user: CurrentUser, contact_id: str) -> ContactResponse:
        require_object_id(contact_id, "contact")
        contact = self.repository.get(current_user.organization_id, contact_id)
        return self._to_responses(current_user.organization_id, [contact])[0]

    def create_contact(
        self, current_user: CurrentUser, request: ContactCreateRequest
    ) -> ContactResponse:
        """
        Create a contact owned by the caller's organization.

        Raises:
            NotFoundError: If the company or assignee is not in the organization
            ConflictError: If another contact in the organization has the email
        """
        organization_id = current_user.organization_id
        document = request.to_document()
        document["assignedTo"] = document.get("assignedTo") or current_user.id
        self.references.check(organization_id, document)

        if document.get("email") and self.repository.find_by_email(
            organization_id, document["email"]
        ):
            raise ConflictError("Contact with this email already exists")

        contact = self.repository.create(
            organization_id, {**document, "createdBy": current_user.id}
        )
        logger.info(
            "Contact created",
            contact_id=str(contact["_id"]),
            organization_id=organization_id,
            user_id=current_user.id,
        )
        return self._to_responses(organization_id, [contact])[0]

    def update_contact(
        self, current_user: CurrentUser, contact_id: str, request: ContactUpdateRequest
    ) -> ContactResponse:
        organization_id = current_user.organization_id
        require_object_id(contact_id, "contact")
        existing = self.repository.get(organization_id, contact_id)

        changes = request.to_changes()
        self.references.check(organization_id, changes)
        if changes.get("email") and self.repository.exists(
            organization_id, {"email": changes["email"], "_id": {"$ne": existing["_id"]}}
        ):
            raise ConflictError("Contact with this email already exists")

        contact = self.repository.update_by_id(organization_id, contact_id, changes)
        if contact is None:
            raise NotFoundError("Contact not found")

        logger.info(
            "Contact updated",
            contact_id=contact_id,
            organization_id=organization_id,
            fields=sorted(changes),
        )
        return self._to_responses(organization_id, [contact])[0]

    def delete_contact(self, current_user: CurrentUser, contact_id: str) -> None:
        require_object_id(contact_id, "contact")
        if not self.repository.delete_by_id(current_user.organization_id, contact_id):
            raise NotFoundError("Contact not found")
        logger.info(
            "Contact deleted",
            contact_id=contact_id,
            organization_id=current_user.organization_id,
        )

    def _to_responses(
        self, organization_id: str, documents: list[Document]
    ) -> list[ContactResponse]:
        company_ids = {doc["companyId"] for doc in documents if doc.get("companyId")}
        companies = self.companies.find_by_ids(organization_id, company_ids, ("name",))
        return [
            ContactResponse.from_document(
                doc,
                name=f"{doc.get('firstName', '')} {doc.get('lastName', '')}".strip(),
                company_name=companies.get(doc.get("companyId") or "", {}).get("name"),
            )
            for doc in documents
        ]

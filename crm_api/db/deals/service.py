"""Service layer for deals."""

from crm_api.auth.schemas import CurrentUser
from crm_api.db.companies.repository import CompanyRepository
from crm_api.db.contacts.repository import ContactRepository
from crm_api.db.database import MongoDatabase
from crm_api.db.deals.repository import ACTIVE_DEALS_FILTER, DealRepository
from crm_api.db.deals.schemas import (
    CLOSED_STAGES,
    DealCreateRequest,
    DealResponse,
    DealStage,
    DealUpdateRequest,
)
from crm_api.db.references import ReferenceValidator
from crm_api.db.repository import Document
from crm_api.exceptions import NotFoundError
from crm_api.utils.dates import utc_now
from crm_api.utils.logger import logger
from crm_api.utils.sanitizer import Pagination, require_object_id, sanitize_search_query


class DealService:
    """Deal CRUD within the caller's organization."""

    def __init__(self, database: MongoDatabase):
        """
        Initialize the service.

        Args:
            database: Shared MongoDB adapter
        """
        self.repository = DealRepository(database)
        self.companies = CompanyRepository(database)
        self.contacts = ContactRepository(database)
        self.references = ReferenceValidator(database)

    def list_deals(
        self,
        current_user: CurrentUser,
        pagination: Pagination,
        search: str | None = None,
        stage: DealStage | None = None,
        active_only: bool = False,
    ) -> tuple[list[DealResponse], int]:
        """
        Page through the organization's deals, newest first.

        Args:
            current_user: The authenticated caller
            pagination: Sanitized page window
            search: Raw search text matched against title, description and notes
            stage: Optional stage filter
            active_only: Exclude closed_won and closed_lost deals

        Returns:
            tuple: (deals on the page, total matching deals)
        """
        query = self.repository.search_filter(sanitize_search_query(search))
        if stage:
            query["stage"] = DealStage(stage).value
        elif active_only:
            query.update(ACTIVE_DEALS_FILTER)

        documents, total = self.repository.paginate(
            current_user.organization_id, query, pagination, sort=[("createdAt", -1)]
        )
        return self._to_responses(current_user.organization_id, documents), total

    def get_deal(self, current_user: CurrentUser, deal_id: str) -> DealResponse:
        require_object_id(deal_id, "deal")
        deal = self.repository.get(current_user.organization_id, deal_id)
        return self._to_responses(current_user.organization_id, [deal])[0]

    def create_deal(self, current_user: CurrentUser, request: DealCreateRequest) -> DealResponse:
        """
        Create a deal owned by the caller's organization.

        A deal created directly in a closed stage gets its close date stamped.

        Raises:
            NotFoundError: If the contact, company or assignee is not in the organization
        """
        organization_id = current_user.organization_id
        document = request.to_document()
        document["assignedTo"] = document.get("assignedTo") or current_user.id
        self.references.check(organization_id, document)
        document["actualCloseDate"] = utc_now() if document["stage"] in CLOSED_STAGES else None

        deal = self.repository.create(
            organization_id, {**document, "createdBy": current_user.id}
        )
        logger.info(
            "Deal created",
            deal_id=str(deal["_id"]),
            organization_id=organization_id,
            stage=deal["stage"],
            value=deal["value"],
        )
        return self._to_responses(organization_id, [deal])[0]

    def update_deal(
        self, current_user: CurrentUser, deal_id: str, request: DealUpdateRequest
    ) -> DealResponse:
        """
        Apply a partial update.

        Moving into a closed stage stamps actualCloseDate; reopening clears it.
        """
        organization_id = current_user.organization_id
        require_object_id(deal_id, "deal")
        existing = self.repository.get(organization_id, deal_id)

        changes = request.to_changes()
        self.references.check(organization_id, changes)
        new_stage = changes.get("stage")
        if new_stage and new_stage != existing.get("stage"):
            changes["actualCloseDate"] = utc_now() if new_stage in CLOSED_STAGES else None

        deal = self.repository.update_by_id(organization_id, deal_id, changes)
        if deal is None:
            raise NotFoundError("Deal not found")

        logger.info(
            "Deal updated",
            deal_id=deal_id,
            organization_id=organization_id,
            fields=sorted(changes),
        )
        return self._to_responses(organization_id, [deal])[0]

    def delete_deal(self, current_user: CurrentUser, deal_id: str) -> None:
        require_object_id(deal_id, "deal")
        if not self.repository.delete_by_id(current_user.organization_id, deal_id):
            raise NotFoundError("Deal not found")
        logger.info(
            "Deal deleted", deal_id=deal_id, organization_id=current_user.organization_id
        )

    def _to_responses(self, organization_id: str, documents: list[Document]) -> list[DealResponse]:
        company_ids = {doc["companyId"] for doc in documents if doc.get("companyId")}
        contact_ids = {doc["contactId"] for doc in documents if doc.get("contactId")}
        companies = self.companies.find_by_ids(organization_id, company_ids, ("name",))
        contacts = self.contacts.find_by_ids(
            organization_id, contact_ids, ("firstName", "lastName")
        )

        responses = []
        for doc in documents:
            contact = contacts.get(doc.get("contactId") or "")
            contact_name = (
                f"{contact.get('firstName', '')} {contact.get('lastName', '')}".strip()
                if contact
                else None
            )
            responses.append(
                DealResponse.from_document(
                    doc,
                    contact_name=contact_name,
                    company_name=companies.get(doc.get("companyId") or "", {}).get("name"),
                )
            )
        return responses

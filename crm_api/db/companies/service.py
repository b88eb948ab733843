"""Service layer for companies."""

from crm_api.auth.schemas import CurrentUser
from crm_api.db.companies.repository import CompanyRepository
from crm_api.db.companies.schemas import (
    CompanyCreateRequest,
    CompanyResponse,
    CompanyStatus,
    CompanySummary,
    CompanyUpdateRequest,
)
from crm_api.db.contacts.repository import ContactRepository
from crm_api.db.database import MongoDatabase
from crm_api.db.deals.repository import DealRepository
from crm_api.db.references import ReferenceValidator
from crm_api.db.repository import Document
from crm_api.exceptions import NotFoundError
from crm_api.utils.logger import logger
from crm_api.utils.sanitizer import (
    Pagination,
    escape_regex,
    require_object_id,
    sanitize_search_query,
)

QUICK_SEARCH_MAX_RESULTS = 20


class CompanyService:
    """Company CRUD within the caller's organization.

    ``contactCount`` and ``dealCount`` are computed from the contacts and
    deals collections on every read; they are never stored.
    """

    def __init__(self, database: MongoDatabase):
        """
        Initialize the service.

        Args:
            database: Shared MongoDB adapter
        """
        self.repository = CompanyRepository(database)
        self.contacts = ContactRepository(database)
        self.deals = DealRepository(database)
        self.references = ReferenceValidator(database)

    def list_companies(
        self,
        current_user: CurrentUser,
        pagination: Pagination,
        search: str | None = None,
        industry: str | None = None,
        status: CompanyStatus | None = None,
    ) -> tuple[list[CompanyResponse], int]:
        """
        Page through the organization's companies, newest first.

        Args:
            current_user: The authenticated caller
            pagination: Sanitized page window
            search: Raw search text matched against name, industry and website
            industry: Optional exact (case-insensitive) industry filter
            status: Optional status filter

        Returns:
            tuple: (companies on the page, total matching companies)
        """
        query = self.repository.search_filter(sanitize_search_query(search))
        if industry and industry.strip():
            query["industry"] = {
                "$regex": f"^{escape_regex(industry.strip())}$",
                "$options": "i",
            }
        if status:
            query["status"] = CompanyStatus(status).value

        documents, total = self.repository.paginate(
            current_user.organization_id, query, pagination, sort=[("createdAt", -1)]
        )
        return self._to_responses(current_user.organization_id, documents), total

    def list_summaries(self, current_user: CurrentUser) -> list[CompanySummary]:
        """All companies of the organization as id/name pairs, sorted by name."""
        documents = self.repository.list_summaries(current_user.organization_id)
        return [self._to_summary(doc) for doc in documents]

    def quick_search(
        self, current_user: CurrentUser, term: str | None, limit: int = 10
    ) -> list[CompanySummary]:
        pattern = sanitize_search_query(term)
        if not pattern:
            return []
        documents = self.repository.list_summaries(
            current_user.organization_id,
            self.repository.search_filter(pattern),
            limit=max(1, min(limit, QUICK_SEARCH_MAX_RESULTS)),
        )
        return [self._to_summary(doc) for doc in documents]

    def get_company(self, current_user: CurrentUser, company_id: str) -> CompanyResponse:
        require_object_id(company_id, "company")
        company = self.repository.get(current_user.organization_id, company_id)
        return self._to_responses(current_user.organization_id, [company])[0]

    def create_company(
        self, current_user: CurrentUser, request: CompanyCreateRequest
    ) -> CompanyResponse:
        organization_id = current_user.organization_id
        document = request.to_document()
        document["assignedTo"] = document.get("assignedTo") or current_user.id
        self.references.check(organization_id, document)

        company = self.repository.create(
            organization_id, {**document, "createdBy": current_user.id}
        )
        logger.info(
            "Company created",
            company_id=str(company["_id"]),
            organization_id=organization_id,
            user_id=current_user.id,
        )
        return self._to_responses(organization_id, [company])[0]

    def update_company(
        self, current_user: CurrentUser, company_id: str, request: CompanyUpdateRequest
    ) -> CompanyResponse:
        organization_id = current_user.organization_id
        require_object_id(company_id, "company")
        self.repository.get(organization_id, company_id)

        changes = request.to_changes()
        self.references.check(organization_id, changes)
        company = self.repository.update_by_id(organization_id, company_id, changes)
        if company is None:
            raise NotFoundError("Company not found")

        logger.info(
            "Company updated",
            company_id=company_id,
            organization_id=organization_id,
            fields=sorted(changes),
        )
        return self._to_responses(organization_id, [company])[0]

    def delete_company(self, current_user: CurrentUser, company_id: str) -> None:
        """
        Hard-delete a company.

        Contacts and deals keep their companyId; it simply stops resolving.
        """
        require_object_id(company_id, "company")
        if not self.repository.delete_by_id(current_user.organization_id, company_id):
            raise NotFoundError("Company not found")
        logger.info(
            "Company deleted",
            company_id=company_id,
            organization_id=current_user.organization_id,
        )

    def _to_responses(
        self, organization_id: str, documents: list[Document]
    ) -> list[CompanyResponse]:
        company_ids = [str(doc["_id"]) for doc in documents]
        contact_counts = self.contacts.count_by_field(organization_id, "companyId", company_ids)
        deal_counts = self.deals.count_by_field(organization_id, "companyId", company_ids)
        return [
            CompanyResponse.from_document(
                doc,
                contact_count=contact_counts.get(str(doc["_id"]), 0),
                deal_count=deal_counts.get(str(doc["_id"]), 0),
            )
            for doc in documents
        ]

    @staticmethod
    def _to_summary(document: Document) -> CompanySummary:
        return CompanySummary(
            id=str(document["_id"]),
            name=document["name"],
            industry=document.get("industry"),
            website=document.get("website"),
        )

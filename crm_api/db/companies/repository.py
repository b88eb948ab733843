"""Repository for company documents."""

from crm_api.db.database import CollectionName
from crm_api.db.repository import Document, TenantRepository


class CompanyRepository(TenantRepository):
    """Tenant-scoped access to companies."""

    collection_name = CollectionName.COMPANIES
    entity_label = "Company"
    duplicate_message = "Company already exists"
    search_fields = ("name", "industry", "website")

    def list_summaries(
        self, organization_id: str, query: Document | None = None, limit: int = 0
    ) -> list[Document]:
        """
        Fetch id, name, industry and website only, sorted by name.

        Args:
            organization_id: Caller's organization
            query: Extra filter, e.g. a search filter
            limit: Maximum results, 0 for all
        """
        return self.find(
            organization_id,
            query,
            sort=[("name", 1)],
            limit=limit,
            projection={"name": 1, "industry": 1, "website": 1},
        )


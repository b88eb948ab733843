"""Repository for deal documents."""

from crm_api.db.database import CollectionName
from crm_api.db.deals.schemas import CLOSED_STAGES
from crm_api.db.repository import Document, TenantRepository

ACTIVE_DEALS_FILTER: Document = {"stage": {"$nin": list(CLOSED_STAGES)}}


class DealRepository(TenantRepository):
    """Tenant-scoped access to deals."""

    collection_name = CollectionName.DEALS
    entity_label = "Deal"
    duplicate_message = "Deal already exists"
    search_fields = ("title", "description", "notes")

    def find_active(self, organization_id: str, limit: int = 0) -> list[Document]:
        """Open deals, highest value first."""
        return self.find(
            organization_id, ACTIVE_DEALS_FILTER, sort=[("value", -1)], limit=limit
        )

    def total_value(self, organization_id: str, query: Document | None = None) -> float:
        """
        Sum of ``value`` over matching deals.

        Args:
            organization_id: Caller's organization
            query: Extra filter, e.g. stage and creation window

        Returns:
            float: Total value, 0 when nothing matches
        """
        pipeline = [
            {"$match": self.scoped(organization_id, query)},
            {"$group": {"_id": None, "total": {"$sum": "$value"}}},
        ]
        rows = list(self.collection.aggregate(pipeline))
        return float(rows[0]["total"]) if rows else 0.0

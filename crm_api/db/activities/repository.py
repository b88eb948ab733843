"""Repository for activity documents."""

from datetime import datetime

from crm_api.db.activities.schemas import ActivityStatus
from crm_api.db.database import CollectionName
from crm_api.db.repository import Document, TenantRepository


class ActivityRepository(TenantRepository):
    """Tenant-scoped access to activities."""

    collection_name = CollectionName.ACTIVITIES
    entity_label = "Activity"
    duplicate_message = "Activity already exists"
    search_fields = ("subject", "description")

    def find_upcoming(
        self, organization_id: str, user_id: str, now: datetime, limit: int = 10
    ) -> list[Document]:
        """
        Pending activities assigned to a user that are due from ``now`` on.

        Args:
            organization_id: Caller's organization
            user_id: Assignee
            now: Reference time (naive UTC)
            limit: Maximum results

        Returns:
            list[Document]: Soonest first
        """
        return self.find(
            organization_id,
            {
                "assignedTo": user_id,
                "status": ActivityStatus.PENDING.value,
                "dueDate": {"$gte": now},
            },
            sort=[("dueDate", 1)],
            limit=limit,
        )

    def find_overdue(
        self, organization_id: str, user_id: str, now: datetime
    ) -> list[Document]:
        """Pending activities assigned to a user whose due date has passed, oldest first."""
        return self.find(
            organization_id,
            {
                "assignedTo": user_id,
                "status": ActivityStatus.PENDING.value,
                "dueDate": {"$lt": now},
            },
            sort=[("dueDate", 1)],
        )

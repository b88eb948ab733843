"""Service layer for activities."""

from crm_api.auth.schemas import CurrentUser
from crm_api.db.activities.repository import ActivityRepository
from crm_api.db.activities.schemas import (
    ActivityCreateRequest,
    ActivityResponse,
    ActivityStatus,
    ActivityType,
    ActivityUpdateRequest,
)
from crm_api.db.database import MongoDatabase
from crm_api.db.references import ReferenceValidator
from crm_api.exceptions import NotFoundError
from crm_api.utils.dates import utc_now
from crm_api.utils.logger import logger
from crm_api.utils.sanitizer import Pagination, require_object_id


class ActivityService:
    """Activity CRUD and per-user agenda queries."""

    def __init__(self, database: MongoDatabase):
        self.repository = ActivityRepository(database)
        self.references = ReferenceValidator(database)

    def list_activities(
        self,
        current_user: CurrentUser,
        pagination: Pagination,
        activity_type: ActivityType | None = None,
        status: ActivityStatus | None = None,
        contact_id: str | None = None,
        deal_id: str | None = None,
    ) -> tuple[list[ActivityResponse], int]:
        query = {}
        if activity_type:
            query["type"] = ActivityType(activity_type).value
        if status:
            query["status"] = ActivityStatus(status).value
        if contact_id:
            query["contactId"] = require_object_id(contact_id, "contact")
        if deal_id:
            query["dealId"] = require_object_id(deal_id, "deal")

        documents, total = self.repository.paginate(
            current_user.organization_id, query, pagination, sort=[("createdAt", -1)]
        )
        return [ActivityResponse.from_document(doc) for doc in documents], total

    def upcoming(self, current_user: CurrentUser, limit: int = 10) -> list[ActivityResponse]:
        documents = self.repository.find_upcoming(
            current_user.organization_id, current_user.id, utc_now(), limit=limit
        )
        return [ActivityResponse.from_document(doc) for doc in documents]

    def overdue(self, current_user: CurrentUser) -> list[ActivityResponse]:
        documents = self.repository.find_overdue(
            current_user.organization_id, current_user.id, utc_now()
        )
        return [ActivityResponse.from_document(doc) for doc in documents]

    def get_activity(self, current_user: CurrentUser, activity_id: str) -> ActivityResponse:
        require_object_id(activity_id, "activity")
        return ActivityResponse.from_document(
            self.repository.get(current_user.organization_id, activity_id)
        )

    def create_activity(
        self, current_user: CurrentUser, request: ActivityCreateRequest
    ) -> ActivityResponse:
        """
        Log an activity for the caller's organization.

        Raises:
            NotFoundError: If a referenced contact, company, deal or assignee is
                not in the organization
        """
        organization_id = current_user.organization_id
        document = request.to_document()
        document["assignedTo"] = document.get("assignedTo") or current_user.id
        self.references.check(organization_id, document)
        document["completedAt"] = (
            utc_now() if document["status"] == ActivityStatus.COMPLETED.value else None
        )

        activity = self.repository.create(
            organization_id, {**document, "createdBy": current_user.id}
        )
        logger.info(
            "Activity created",
            activity_id=str(activity["_id"]),
            organization_id=organization_id,
            type=activity["type"],
        )
        return ActivityResponse.from_document(activity)

    def update_activity(
        self, current_user: CurrentUser, activity_id: str, request: ActivityUpdateRequest
    ) -> ActivityResponse:
        """
        Apply a partial update.

        Completing an activity stamps completedAt; any other status clears it.
        """
        organization_id = current_user.organization_id
        require_object_id(activity_id, "activity")
        existing = self.repository.get(organization_id, activity_id)

        changes = request.to_changes()
        self.references.check(organization_id, changes)
        new_status = changes.get("status")
        if new_status and new_status != existing.get("status"):
            changes["completedAt"] = (
                utc_now() if new_status == ActivityStatus.COMPLETED.value else None
            )

        activity = self.repository.update_by_id(organization_id, activity_id, changes)
        if activity is None:
            raise NotFoundError("Activity not found")

        logger.info(
            "Activity updated",
            activity_id=activity_id,
            organization_id=organization_id,
            fields=sorted(changes),
        )
        return ActivityResponse.from_document(activity)

    def delete_activity(self, current_user: CurrentUser, activity_id: str) -> None:
        require_object_id(activity_id, "activity")
        if not self.repository.delete_by_id(current_user.organization_id, activity_id):
            raise NotFoundError("Activity not found")
        logger.info(
            "Activity deleted",
            activity_id=activity_id,
            organization_id=current_user.organization_id,
        )

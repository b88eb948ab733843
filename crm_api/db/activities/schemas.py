"""Pydantic schemas for activities (calls, emails, meetings, tasks and notes)."""

from enum import Enum

from pydantic import Field

from crm_api.schemas import (
    CamelModel,
    DocumentModel,
    OptionalDateTime,
    OptionalLongText,
    OptionalObjectId,
    PaginationResponse,
    RequestModel,
    ShortText,
    UpdateRequest,
    UTCDateTime,
)


class ActivityType(str, Enum):
    CALL = "call"
    EMAIL = "email"
    MEETING = "meeting"
    TASK = "task"
    NOTE = "note"


class ActivityStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ActivityPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ActivityCreateRequest(RequestModel):
    type: ActivityType
    subject: ShortText = Field(..., description="Short summary")
    description: OptionalLongText = None
    due_date: OptionalDateTime = None
    contact_id: OptionalObjectId = None
    company_id: OptionalObjectId = None
    deal_id: OptionalObjectId = None
    assigned_to: OptionalObjectId = Field(
        default=None, description="Responsible user; defaults to the caller"
    )
    status: ActivityStatus = ActivityStatus.PENDING
    priority: ActivityPriority = ActivityPriority.MEDIUM


class ActivityUpdateRequest(UpdateRequest):
    required_fields = frozenset({"type", "subject", "status", "priority"})

    type: ActivityType | None = None
    subject: ShortText | None = None
    description: OptionalLongText = None
    due_date: OptionalDateTime = None
    contact_id: OptionalObjectId = None
    company_id: OptionalObjectId = None
    deal_id: OptionalObjectId = None
    assigned_to: OptionalObjectId = None
    status: ActivityStatus | None = None
    priority: ActivityPriority | None = None


class ActivityResponse(DocumentModel):
    type: ActivityType
    subject: str
    description: str | None = None
    due_date: UTCDateTime | None = None
    completed_at: UTCDateTime | None = None
    contact_id: str | None = None
    company_id: str | None = None
    deal_id: str | None = None
    assigned_to: str | None = None
    created_by: str | None = None
    status: ActivityStatus = ActivityStatus.PENDING
    priority: ActivityPriority = ActivityPriority.MEDIUM


class ActivityData(CamelModel):
    activity: ActivityResponse


class ActivityListData(CamelModel):
    activities: list[ActivityResponse]
    pagination: PaginationResponse


class ActivityFeedData(CamelModel):
    """Unpaginated list, e.g. upcoming or overdue activities."""

    activities: list[ActivityResponse]

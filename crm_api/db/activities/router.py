"""
Activities router.

CRUD over calls, emails, meetings, tasks and notes, plus the caller's
upcoming and overdue agenda.
"""

from http import HTTPStatus

from fastapi import APIRouter, Depends, Query

from crm_api.auth.dependencies import get_current_user, require_writer
from crm_api.auth.schemas import CurrentUser
from crm_api.db.activities.schemas import (
    ActivityCreateRequest,
    ActivityData,
    ActivityFeedData,
    ActivityListData,
    ActivityStatus,
    ActivityType,
    ActivityUpdateRequest,
)
from crm_api.db.activities.service import ActivityService
from crm_api.db.dependencies import get_activity_service
from crm_api.schemas import ApiResponse, PaginationResponse
from crm_api.utils.sanitizer import sanitize_pagination

router = APIRouter(prefix="/activities", tags=["Activities"])


@router.get("", response_model=ApiResponse[ActivityListData])
def list_activities(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    activity_type: ActivityType | None = Query(default=None, alias="type"),
    status: ActivityStatus | None = Query(default=None),
    contact_id: str | None = Query(default=None, alias="contactId"),
    deal_id: str | None = Query(default=None, alias="dealId"),
    current_user: CurrentUser = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service),
) -> ApiResponse[ActivityListData]:
    pagination = sanitize_pagination(page, limit)
    activities, total = service.list_activities(
        current_user,
        pagination,
        activity_type=activity_type,
        status=status,
        contact_id=contact_id,
        deal_id=deal_id,
    )
    return ApiResponse(
        data=ActivityListData(
            activities=activities,
            pagination=PaginationResponse(**pagination.to_dict(total)),
        )
    )


@router.get("/upcoming", response_model=ApiResponse[ActivityFeedData])
def upcoming_activities(
    limit: int = Query(default=10, ge=1, le=50),
    current_user: CurrentUser = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service),
) -> ApiResponse[ActivityFeedData]:
    """Pending activities assigned to the caller, soonest first."""
    return ApiResponse(
        data=ActivityFeedData(activities=service.upcoming(current_user, limit=limit))
    )


@router.get("/overdue", response_model=ApiResponse[ActivityFeedData])
def overdue_activities(
    current_user: CurrentUser = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service),
) -> ApiResponse[ActivityFeedData]:
    """Pending activities assigned to the caller that are past due."""
    return ApiResponse(data=ActivityFeedData(activities=service.overdue(current_user)))


@router.get("/{activity_id}", response_model=ApiResponse[ActivityData])
def get_activity(
    activity_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service),
) -> ApiResponse[ActivityData]:
    return ApiResponse(
        data=ActivityData(activity=service.get_activity(current_user, activity_id))
    )


@router.post("", response_model=ApiResponse[ActivityData], status_code=HTTPStatus.CREATED)
def create_activity(
    body: ActivityCreateRequest,
    current_user: CurrentUser = Depends(require_writer),
    service: ActivityService = Depends(get_activity_service),
) -> ApiResponse[ActivityData]:
    activity = service.create_activity(current_user, body)
    return ApiResponse(
        message="Activity created successfully", data=ActivityData(activity=activity)
    )


@router.put("/{activity_id}", response_model=ApiResponse[ActivityData])
def update_activity(
    activity_id: str,
    body: ActivityUpdateRequest,
    current_user: CurrentUser = Depends(require_writer),
    service: ActivityService = Depends(get_activity_service),
) -> ApiResponse[ActivityData]:
    activity = service.update_activity(current_user, activity_id, body)
    return ApiResponse(
        message="Activity updated successfully", data=ActivityData(activity=activity)
    )


@router.delete("/{activity_id}", response_model=ApiResponse[None])
def delete_activity(
    activity_id: str,
    current_user: CurrentUser = Depends(require_writer),
    service: ActivityService = Depends(get_activity_service),
) -> ApiResponse[None]:
    service.delete_activity(current_user, activity_id)
    return ApiResponse(message="Activity deleted successfully")

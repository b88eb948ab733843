"""
Deals router with CRUD endpoints.

All endpoints are scoped to the authenticated caller's organization.
"""

from http import HTTPStatus

from fastapi import APIRouter, Depends, Query

from crm_api.auth.dependencies import get_current_user, require_writer
from crm_api.auth.schemas import CurrentUser
from crm_api.db.deals.schemas import (
    DealCreateRequest,
    DealData,
    DealListData,
    DealStage,
    DealUpdateRequest,
)
from crm_api.db.deals.service import DealService
from crm_api.db.dependencies import get_deal_service
from crm_api.schemas import ApiResponse, PaginationResponse
from crm_api.utils.sanitizer import sanitize_pagination

router = APIRouter(prefix="/deals", tags=["Deals"])


@router.get("", response_model=ApiResponse[DealListData])
def list_deals(
    page: str | None = Query(default=None, description="Page number, from 1"),
    limit: str | None = Query(default=None, description="Page size, 1 to 100"),
    search: str | None = Query(default=None, description="Title, description or notes"),
    stage: DealStage | None = Query(default=None),
    active_only: bool = Query(default=False, alias="activeOnly"),
    current_user: CurrentUser = Depends(get_current_user),
    service: DealService = Depends(get_deal_service),
) -> ApiResponse[DealListData]:
    """
    List deals in the caller's organization.

    Returns:
        ApiResponse[DealListData]: One page of deals plus pagination
    """
    pagination = sanitize_pagination(page, limit)
    deals, total = service.list_deals(
        current_user, pagination, search=search, stage=stage, active_only=active_only
    )
    return ApiResponse(
        data=DealListData(
            deals=deals,
            pagination=PaginationResponse(**pagination.to_dict(total)),
        )
    )


@router.get("/{deal_id}", response_model=ApiResponse[DealData])
def get_deal(
    deal_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: DealService = Depends(get_deal_service),
) -> ApiResponse[DealData]:
    return ApiResponse(data=DealData(deal=service.get_deal(current_user, deal_id)))


@router.post("", response_model=ApiResponse[DealData], status_code=HTTPStatus.CREATED)
def create_deal(
    body: DealCreateRequest,
    current_user: CurrentUser = Depends(require_writer),
    service: DealService = Depends(get_deal_service),
) -> ApiResponse[DealData]:
    deal = service.create_deal(current_user, body)
    return ApiResponse(message="Deal created successfully", data=DealData(deal=deal))


@router.put("/{deal_id}", response_model=ApiResponse[DealData])
def update_deal(
    deal_id: str,
    body: DealUpdateRequest,
    current_user: CurrentUser = Depends(require_writer),
    service: DealService = Depends(get_deal_service),
) -> ApiResponse[DealData]:
    deal = service.update_deal(current_user, deal_id, body)
    return ApiResponse(message="Deal updated successfully", data=DealData(deal=deal))


@router.delete("/{deal_id}", response_model=ApiResponse[None])
def delete_deal(
    deal_id: str,
    current_user: CurrentUser = Depends(require_writer),
    service: DealService = Depends(get_deal_service),
) -> ApiResponse[None]:
    service.delete_deal(current_user, deal_id)
    return ApiResponse(message="Deal deleted successfully")

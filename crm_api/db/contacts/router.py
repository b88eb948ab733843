"""
Contacts router with CRUD endpoints.

All endpoints are scoped to the authenticated caller's organization.
"""

from http import HTTPStatus

from fastapi import APIRouter, Depends, Query

from crm_api.auth.dependencies import get_current_user, require_writer
from crm_api.auth.schemas import CurrentUser
from crm_api.db.contacts.schemas import (
    ContactCreateRequest,
    ContactData,
    ContactListData,
    ContactStatus,
    ContactUpdateRequest,
)
from crm_api.db.contacts.service import ContactService
from crm_api.db.dependencies import get_contact_service
from crm_api.schemas import ApiResponse, PaginationResponse
from crm_api.utils.sanitizer import sanitize_pagination

router = APIRouter(prefix="/contacts", tags=["Contacts"])


@router.get("", response_model=ApiResponse[ContactListData])
def list_contacts(
    page: str | None = Query(default=None, description="Page number, from 1"),
    limit: str | None = Query(default=None, description="Page size, 1 to 100"),
    search: str | None = Query(default=None, description="Name, email or job title"),
    status: ContactStatus | None = Query(default=None),
    company_id: str | None = Query(default=None, alias="companyId"),
    current_user: CurrentUser = Depends(get_current_user),
    service: ContactService = Depends(get_contact_service),
) -> ApiResponse[ContactListData]:
    """
    List contacts in the caller's organization.

    Returns:
        ApiResponse[ContactListData]: One page of contacts plus pagination
    """
    pagination = sanitize_pagination(page, limit)
    contacts, total = service.list_contacts(
        current_user, pagination, search=search, status=status, company_id=company_id
    )
    return ApiResponse(
        data=ContactListData(
            contacts=contacts,
            pagination=PaginationResponse(**pagination.to_dict(total)),
        )
    )


@router.get("/{contact_id}", response_model=ApiResponse[ContactData])
def get_contact(
    contact_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: ContactService = Depends(get_contact_service),
) -> ApiResponse[ContactData]:
    contact = service.get_contact(current_user, contact_id)
    return ApiResponse(data=ContactData(contact=contact))


@router.post("", response_model=ApiResponse[ContactData], status_code=HTTPStatus.CREATED)
def create_contact(
    body: ContactCreateRequest,
    current_user: CurrentUser = Depends(require_writer),
    service: ContactService = Depends(get_contact_service),
) -> ApiResponse[ContactData]:
    contact = service.create_contact(current_user, body)
    return ApiResponse(message="Contact created successfully", data=ContactData(contact=contact))


@router.put("/{contact_id}", response_model=ApiResponse[ContactData])
def update_contact(
    contact_id: str,
    body: ContactUpdateRequest,
    current_user: CurrentUser = Depends(require_writer),
    service: ContactService = Depends(get_contact_service),
) -> ApiResponse[ContactData]:
    contact = service.update_contact(current_user, contact_id, body)
    return ApiResponse(message="Contact updated successfully", data=ContactData(contact=contact))


@router.delete("/{contact_id}", response_model=ApiResponse[None])
def delete_contact(
    contact_id: str,
    current_user: CurrentUser = Depends(require_writer),
    service: ContactService = Depends(get_contact_service),
) -> ApiResponse[None]:
    service.delete_contact(current_user, contact_id)
    return ApiResponse(message="Contact deleted successfully")

"""
Companies router with CRUD, list and quick-search endpoints.

All endpoints are scoped to the authenticated caller's organization.
"""

from http import HTTPStatus

from fastapi import APIRouter, Depends, Query

from crm_api.auth.dependencies import get_current_user, require_writer
from crm_api.auth.schemas import CurrentUser
from crm_api.db.companies.schemas import (
    CompanyCreateRequest,
    CompanyData,
    CompanyListData,
    CompanyStatus,
    CompanySummaryListData,
    CompanyUpdateRequest,
)
from crm_api.db.companies.service import CompanyService
from crm_api.db.dependencies import get_company_service
from crm_api.schemas import ApiResponse, PaginationResponse
from crm_api.utils.sanitizer import sanitize_pagination

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("", response_model=ApiResponse[CompanyListData])
def list_companies(
    page: str | None = Query(default=None, description="Page number, from 1"),
    limit: str | None = Query(default=None, description="Page size, 1 to 100"),
    search: str | None = Query(default=None, description="Name, industry or website"),
    industry: str | None = Query(default=None),
    status: CompanyStatus | None = Query(default=None),
    current_user: CurrentUser = Depends(get_current_user),
    service: CompanyService = Depends(get_company_service),
) -> ApiResponse[CompanyListData]:
    """
    List companies in the caller's organization with live contact and deal counts.

    Returns:
        ApiResponse[CompanyListData]: One page of companies plus pagination
    """
    pagination = sanitize_pagination(page, limit)
    companies, total = service.list_companies(
        current_user, pagination, search=search, industry=industry, status=status
    )
    return ApiResponse(
        data=CompanyListData(
            companies=companies,
            pagination=PaginationResponse(**pagination.to_dict(total)),
        )
    )


@router.get("/list", response_model=ApiResponse[CompanySummaryListData])
def list_company_summaries(
    current_user: CurrentUser = Depends(get_current_user),
    service: CompanyService = Depends(get_company_service),
) -> ApiResponse[CompanySummaryListData]:
    """Every company as id, name, industry and website, for dropdowns."""
    return ApiResponse(
        data=CompanySummaryListData(companies=service.list_summaries(current_user))
    )


@router.get("/search", response_model=ApiResponse[CompanySummaryListData])
def search_companies(
    q: str | None = Query(default=None, description="Search text"),
    limit: int = Query(default=10, ge=1, le=20),
    current_user: CurrentUser = Depends(get_current_user),
    service: CompanyService = Depends(get_company_service),
) -> ApiResponse[CompanySummaryListData]:
    return ApiResponse(
        data=CompanySummaryListData(companies=service.quick_search(current_user, q, limit))
    )


@router.get("/{company_id}", response_model=ApiResponse[CompanyData])
def get_company(
    company_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: CompanyService = Depends(get_company_service),
) -> ApiResponse[CompanyData]:
    company = service.get_company(current_user, company_id)
    return ApiResponse(data=CompanyData(company=company))


@router.post("", response_model=ApiResponse[CompanyData], status_code=HTTPStatus.CREATED)
def create_company(
    body: CompanyCreateRequest,
    current_user: CurrentUser = Depends(require_writer),
    service: CompanyService = Depends(get_company_service),
) -> ApiResponse[CompanyData]:
    company = service.create_company(current_user, body)
    return ApiResponse(message="Company created successfully", data=CompanyData(company=company))


@router.put("/{company_id}", response_model=ApiResponse[CompanyData])
def update_company(
    company_id: str,
    body: CompanyUpdateRequest,
    current_user: CurrentUser = Depends(require_writer),
    service: CompanyService = Depends(get_company_service),
) -> ApiResponse[CompanyData]:
    company = service.update_company(current_user, company_id, body)
    return ApiResponse(message="Company updated successfully", data=CompanyData(company=company))


@router.delete("/{company_id}", response_model=ApiResponse[None])
def delete_company(
    company_id: str,
    current_user: CurrentUser = Depends(require_writer),
    service: CompanyService = Depends(get_company_service),
) -> ApiResponse[None]:
    service.delete_company(current_user, company_id)
    return ApiResponse(message="Company deleted successfully")

"""Pydantic schemas for companies."""

from enum import Enum

from pydantic import Field

from crm_api.schemas import (
    CamelModel,
    DocumentModel,
    OptionalEmail,
    OptionalLongText,
    OptionalObjectId,
    OptionalText,
    PaginationResponse,
    RequestModel,
    ShortText,
    Tag,
    UpdateRequest,
)


class CompanySize(str, Enum):
    STARTUP = "startup"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    ENTERPRISE = "enterprise"


class CompanyStatus(str, Enum):
    PROSPECT = "prospect"
    CUSTOMER = "customer"
    PARTNER = "partner"
    INACTIVE = "inactive"


class CompanyCreateRequest(RequestModel):
    """Request model for creating a company."""

    name: ShortText = Field(..., description="Company name")
    website: OptionalText = None
    industry: OptionalText = None
    size: CompanySize | None = None
    revenue: float = Field(default=0, ge=0, description="Annual revenue")
    description: OptionalLongText = None
    location: OptionalText = None
    phone: OptionalText = None
    email: OptionalEmail = None
    tags: list[Tag] = Field(default_factory=list, max_length=20)
    status: CompanyStatus = CompanyStatus.PROSPECT
    assigned_to: OptionalObjectId = Field(
        default=None, description="Owning user; defaults to the caller"
    )


class CompanyUpdateRequest(UpdateRequest):
    """Partial update; only fields present in the body are changed."""

    required_fields = frozenset({"name", "revenue", "status", "tags"})

    name: ShortText | None = None
    website: OptionalText = None
    industry: OptionalText = None
    size: CompanySize | None = None
    revenue: float | None = Field(default=None, ge=0)
    description: OptionalLongText = None
    location: OptionalText = None
    phone: OptionalText = None
    email: OptionalEmail = None
    tags: list[Tag] | None = Field(default=None, max_length=20)
    status: CompanyStatus | None = None
    assigned_to: OptionalObjectId = None


class CompanyResponse(DocumentModel):
    name: str
    website: str | None = None
    industry: str | None = None
    size: CompanySize | None = None
    revenue: float = 0
    description: str | None = None
    location: str | None = None
    phone: str | None = None
    email: str | None = None
    tags: list[str] = Field(default_factory=list)
    status: CompanyStatus = CompanyStatus.PROSPECT
    assigned_to: str | None = None
    contact_count: int = Field(default=0, description="Contacts linked to the company")
    deal_count: int = Field(default=0, description="Deals linked to the company")


class CompanySummary(CamelModel):
    """Lightweight projection used by pickers and quick search."""

    id: str
    name: str
    industry: str | None = None
    website: str | None = None


class CompanyData(CamelModel):
    company: CompanyResponse


class CompanyListData(CamelModel):
    companies: list[CompanyResponse]
    pagination: PaginationResponse


class CompanySummaryListData(CamelModel):
    companies: list[CompanySummary]

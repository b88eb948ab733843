"""Pydantic schemas for contacts."""

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


class ContactStatus(str, Enum):
    LEAD = "lead"
    PROSPECT = "prospect"
    CUSTOMER = "customer"
    INACTIVE = "inactive"


class ContactCreateRequest(RequestModel):
    """Request model for creating a contact."""

    first_name: ShortText = Field(..., description="First name")
    last_name: ShortText = Field(..., description="Last name")
    email: OptionalEmail = None
    phone: OptionalText = None
    job_title: OptionalText = None
    company_id: OptionalObjectId = Field(
        default=None, description="Company in the same organization"
    )
    tags: list[Tag] = Field(default_factory=list, max_length=20)
    notes: OptionalLongText = None
    lead_source: OptionalText = None
    status: ContactStatus = ContactStatus.LEAD
    assigned_to: OptionalObjectId = Field(
        default=None, description="Owning user; defaults to the caller"
    )


class ContactUpdateRequest(UpdateRequest):
    """Partial update; only fields present in the body are changed."""

    required_fields = frozenset({"firstName", "lastName", "status", "tags"})

    first_name: ShortText | None = None
    last_name: ShortText | None = None
    email: OptionalEmail = None
    phone: OptionalText = None
    job_title: OptionalText = None
    company_id: OptionalObjectId = None
    tags: list[Tag] | None = Field(default=None, max_length=20)
    notes: OptionalLongText = None
    lead_source: OptionalText = None
    status: ContactStatus | None = None
    assigned_to: OptionalObjectId = None


class ContactResponse(DocumentModel):
    first_name: str
    last_name: str
    name: str = Field(..., description="Full name")
    email: str | None = None
    phone: str | None = None
    job_title: str | None = None
    company_id: str | None = None
    company_name: str | None = Field(default=None, description="Name of the linked company")
    tags: list[str] = Field(default_factory=list)
    notes: str | None = None
    lead_source: str | None = None
    status: ContactStatus = ContactStatus.LEAD
    assigned_to: str | None = None


class ContactData(CamelModel):
    contact: ContactResponse


class ContactListData(CamelModel):
    contacts: list[ContactResponse]
    pagination: PaginationResponse

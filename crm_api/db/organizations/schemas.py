"""Pydantic schemas for organizations."""

from enum import Enum
from typing import Annotated

from pydantic import Field, StringConstraints

from crm_api.schemas import CamelModel, DocumentModel, UTCDateTime


class OrganizationPlan(str, Enum):
    STARTER = "starter"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


class OrganizationStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"


DEFAULT_FEATURES = ["contacts", "deals", "activities"]


class OrganizationSettings(CamelModel):
    """Tenant-wide display preferences."""

    currency: str = Field(default="USD", description="ISO 4217 currency code")
    timezone: str = Field(default="UTC", description="IANA timezone name")
    date_format: str = Field(default="MM/DD/YYYY", description="Date display format")
    features: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FEATURES),
        description="Enabled product features",
    )


class OrganizationBilling(CamelModel):
    current_period_start: UTCDateTime
    current_period_end: UTCDateTime
    subscription_id: str | None = None
    customer_id: str | None = None


class OrganizationResponse(DocumentModel):
    """Organization fields safe to return to members."""

    name: str = Field(..., description="Organization display name")
    slug: str = Field(..., description="Unique URL-safe identifier")
    plan: OrganizationPlan = Field(..., description="Subscription plan")
    status: OrganizationStatus = Field(..., description="Account status")
    settings: OrganizationSettings = Field(default_factory=OrganizationSettings)


class OrganizationSettingsUpdate(CamelModel):
    """Partial update of organization settings; omitted fields are kept."""

    currency: Annotated[
        str, StringConstraints(strip_whitespace=True, to_upper=True, pattern=r"^[A-Za-z]{3}$")
    ] | None = None
    timezone: Annotated[
        str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)
    ] | None = None
    date_format: Annotated[
        str, StringConstraints(strip_whitespace=True, min_length=1, max_length=32)
    ] | None = None
    features: list[str] | None = None


class OrganizationData(CamelModel):
    organization: OrganizationResponse

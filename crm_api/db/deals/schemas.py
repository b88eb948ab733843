"""Pydantic schemas for deals."""

from enum import Enum
from typing import Annotated

from pydantic import Field, StringConstraints

from crm_api.schemas import (
    CamelModel,
    DocumentModel,
    OptionalDateTime,
    OptionalLongText,
    OptionalObjectId,
    PaginationResponse,
    RequestModel,
    ShortText,
    Tag,
    UpdateRequest,
    UTCDateTime,
)


class DealStage(str, Enum):
    """Pipeline stages, in order; the last two are terminal."""

    LEAD = "lead"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    CLOSED_WON = "closed_won"
    CLOSED_LOST = "closed_lost"


CLOSED_STAGES = (DealStage.CLOSED_WON.value, DealStage.CLOSED_LOST.value)

CurrencyCode = Annotated[
    str, StringConstraints(strip_whitespace=True, to_upper=True, pattern=r"^[A-Za-z]{3}$")
]
Probability = Annotated[int, Field(ge=0, le=100)]


class DealCreateRequest(RequestModel):
    """Request model for creating a deal."""

    title: ShortText = Field(..., description="Deal title")
    description: OptionalLongText = None
    value: float = Field(default=0, ge=0, description="Deal value")
    currency: CurrencyCode = "USD"
    stage: DealStage = DealStage.LEAD
    probability: Probability = 50
    expected_close_date: OptionalDateTime = None
    contact_id: OptionalObjectId = None
    company_id: OptionalObjectId = None
    assigned_to: OptionalObjectId = Field(
        default=None, description="Owning user; defaults to the caller"
    )
    tags: list[Tag] = Field(default_factory=list, max_length=20)
    notes: OptionalLongText = None


class DealUpdateRequest(UpdateRequest):
    """Partial update; only fields present in the body are changed."""

    required_fields = frozenset(
        {"title", "value", "currency", "stage", "probability", "tags"}
    )

    title: ShortText | None = None
    description: OptionalLongText = None
    value: float | None = Field(default=None, ge=0)
    currency: CurrencyCode | None = None
    stage: DealStage | None = None
    probability: Probability | None = None
    expected_close_date: OptionalDateTime = None
    contact_id: OptionalObjectId = None
    company_id: OptionalObjectId = None
    assigned_to: OptionalObjectId = None
    tags: list[Tag] | None = Field(default=None, max_length=20)
    notes: OptionalLongText = None


class DealResponse(DocumentModel):
    title: str
    description: str | None = None
    value: float = 0
    currency: str = "USD"
    stage: DealStage = DealStage.LEAD
    probability: int = 50
    expected_close_date: UTCDateTime | None = None
    actual_close_date: UTCDateTime | None = None
    contact_id: str | None = None
    contact_name: str | None = None
    company_id: str | None = None
    company_name: str | None = None
    assigned_to: str | None = None
    tags: list[str] = Field(default_factory=list)
    notes: str | None = None


class DealData(CamelModel):
    deal: DealResponse


class DealListData(CamelModel):
    deals: list[DealResponse]
    pagination: PaginationResponse

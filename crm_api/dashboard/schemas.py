"""Pydantic schemas for the dashboard summary."""

from enum import Enum

from pydantic import Field

from crm_api.schemas import CamelModel, UTCDateTime


class FeedItemType(str, Enum):
    CONTACT_ADDED = "contact_added"
    COMPANY_ADDED = "company_added"
    DEAL_CREATED = "deal_created"
    DEAL_UPDATED = "deal_updated"
    DEAL_CLOSED = "deal_closed"


class DashboardStats(CamelModel):
    total_contacts: int
    total_companies: int
    active_deals: int
    monthly_revenue: float = Field(..., description="closed_won value created this month")
    contacts_growth: int = Field(..., description="Percent change against last month")
    companies_growth: int
    deals_growth: int
    revenue_growth: int


class FeedItem(CamelModel):
    id: str
    type: FeedItemType
    description: str
    timestamp: UTCDateTime


class TopDeal(CamelModel):
    id: str
    name: str = Field(..., description="Deal title")
    value: float
    probability: int
    stage: str
    expected_close_date: UTCDateTime | None = None


class MonthlyRevenuePoint(CamelModel):
    month: str = Field(..., description="Abbreviated month name, e.g. Jan")
    revenue: float


class DashboardCharts(CamelModel):
    monthly_revenue: list[MonthlyRevenuePoint]
    deals_by_stage: dict[str, int]


class DashboardData(CamelModel):
    stats: DashboardStats
    activities: list[FeedItem]
    top_deals: list[TopDeal]
    charts: DashboardCharts

"""
Dashboard aggregation.

Computes headline counts, month-over-month growth, a six month revenue
series, the deal stage distribution, the top open deals and a feed of the
last week's changes. Every query is scoped to one organization and all
calendar math is done in UTC.
"""

from datetime import datetime, timedelta

from crm_api.dashboard.schemas import (
    DashboardCharts,
    DashboardData,
    DashboardStats,
    FeedItem,
    FeedItemType,
    MonthlyRevenuePoint,
    TopDeal,
)
from crm_api.db.companies.repository import CompanyRepository
from crm_api.db.contacts.repository import ContactRepository
from crm_api.db.database import MongoDatabase
from crm_api.db.deals.repository import ACTIVE_DEALS_FILTER, DealRepository
from crm_api.db.deals.schemas import DealStage
from crm_api.utils.dates import add_months, month_start, utc_now
from crm_api.utils.logger import logger

FEED_WINDOW_DAYS = 7
FEED_LIMIT = 10
TOP_DEALS_LIMIT = 5
REVENUE_SERIES_MONTHS = 6


def calculate_growth(current: float, previous: float) -> int:
    """
    Percent change from ``previous`` to ``current``, rounded.

    Examples:
        calculate_growth(5, 0) -> 100
        calculate_growth(0, 0) -> 0
        calculate_growth(15, 10) -> 50
    """
    if previous == 0:
        return 100 if current > 0 else 0
    return round((current - previous) / previous * 100)


class DashboardService:
    """Builds the dashboard summary for one organization."""

    def __init__(self, database: MongoDatabase):
        self.contacts = ContactRepository(database)
        self.companies = CompanyRepository(database)
        self.deals = DealRepository(database)

    def get_dashboard(self, organization_id: str, now: datetime | None = None) -> DashboardData:
        """
        Compute the dashboard.

        Args:
            organization_id: Organization to summarize
            now: Reference time (naive UTC); defaults to the current time

        Returns:
            DashboardData: Stats, feed, top deals and charts
        """
        now = now or utc_now()
        data = DashboardData(
            stats=self._stats(organization_id, now),
            activities=self._recent_activity(organization_id, now),
            top_deals=self._top_deals(organization_id),
            charts=DashboardCharts(
                monthly_revenue=self._revenue_series(organization_id, now),
                deals_by_stage=self._deals_by_stage(organization_id),
            ),
        )
        logger.debug("Dashboard computed", organization_id=organization_id)
        return data

    def monthly_revenue(self, organization_id: str, start: datetime) -> float:
        """Value of closed_won deals created in the calendar month starting at ``start``."""
        return self.deals.total_value(
            organization_id,
            {
                "stage": DealStage.CLOSED_WON.value,
                "createdAt": {"$gte": start, "$lt": add_months(start, 1)},
            },
        )

    def _stats(self, organization_id: str, now: datetime) -> DashboardStats:
        this_month = month_start(now)
        created_before_this_month = {"createdAt": {"$lt": this_month}}

        total_contacts = self.contacts.count(organization_id)
        total_companies = self.companies.count(organization_id)
        active_deals = self.deals.count(organization_id, ACTIVE_DEALS_FILTER)
        revenue = self.monthly_revenue(organization_id, this_month)

        previous_contacts = self.contacts.count(organization_id, created_before_this_month)
        previous_companies = self.companies.count(organization_id, created_before_this_month)
        previous_deals = self.deals.count(
            organization_id, {**ACTIVE_DEALS_FILTER, **created_before_this_month}
        )
        previous_revenue = self.monthly_revenue(organization_id, add_months(now, -1))

        return DashboardStats(
            total_contacts=total_contacts,
            total_companies=total_companies,
            active_deals=active_deals,
            monthly_revenue=revenue,
            contacts_growth=calculate_growth(total_contacts, previous_contacts),
            companies_growth=calculate_growth(total_companies, previous_companies),
            deals_growth=calculate_growth(active_deals, previous_deals),
            revenue_growth=calculate_growth(revenue, previous_revenue),
        )

    def _revenue_series(self, organization_id: str, now: datetime) -> list[MonthlyRevenuePoint]:
        points = []
        for offset in range(REVENUE_SERIES_MONTHS - 1, -1, -1):
            start = add_months(now, -offset)
            points.append(
                MonthlyRevenuePoint(
                    month=start.strftime("%b"),
                    revenue=self.monthly_revenue(organization_id, start),
                )
            )
        return points

    def _deals_by_stage(self, organization_id: str) -> dict[str, int]:
        stages = [stage.value for stage in DealStage]
        counts = self.deals.count_by_field(organization_id, "stage", stages)
        return {stage: counts.get(stage, 0) for stage in stages}

    def _top_deals(self, organization_id: str) -> list[TopDeal]:
        return [
            TopDeal(
                id=str(deal["_id"]),
                name=deal["title"],
                value=deal.get("value", 0),
                probability=deal.get("probability", 0),
                stage=deal["stage"],
                expected_close_date=deal.get("expectedCloseDate"),
            )
            for deal in self.deals.find_active(organization_id, limit=TOP_DEALS_LIMIT)
        ]

    def _recent_activity(self, organization_id: str, now: datetime) -> list[FeedItem]:
        since = now - timedelta(days=FEED_WINDOW_DAYS)
        created_since = {"createdAt": {"$gte": since}}
        newest_first = [("createdAt", -1)]
        items: list[FeedItem] = []

        for contact in self.contacts.find(
            organization_id, created_since, sort=newest_first, limit=FEED_LIMIT
        ):
            name = f"{contact.get('firstName', '')} {contact.get('lastName', '')}".strip()
            items.append(
                FeedItem(
                    id=f"contact-{contact['_id']}",
                    type=FeedItemType.CONTACT_ADDED,
                    description=f"New contact added: {name}",
                    timestamp=contact["createdAt"],
                )
            )

        for company in self.companies.find(
            organization_id, created_since, sort=newest_first, limit=FEED_LIMIT
        ):
            items.append(
                FeedItem(
                    id=f"company-{company['_id']}",
                    type=FeedItemType.COMPANY_ADDED,
                    description=f"New company added: {company['name']}",
                    timestamp=company["createdAt"],
                )
            )

        for deal in self.deals.find(
            organization_id,
            {"updatedAt": {"$gte": since}},
            sort=[("updatedAt", -1)],
            limit=FEED_LIMIT,
        ):
            items.extend(self._deal_feed_items(deal, since))

        items.sort(key=lambda item: item.timestamp, reverse=True)
        return items[:FEED_LIMIT]

    @staticmethod
    def _deal_feed_items(deal: dict, since: datetime) -> list[FeedItem]:
        """Creation entry when it falls in the window, plus the latest change."""
        title = deal["title"]
        items: list[FeedItem] = []
        if deal["createdAt"] >= since:
            items.append(
                FeedItem(
                    id=f"deal-created-{deal['_id']}",
                    type=FeedItemType.DEAL_CREATED,
                    description=f"New deal created: {title}",
                    timestamp=deal["createdAt"],
                )
            )
        if deal["updatedAt"] <= deal["createdAt"]:
            return items

        if deal["stage"] == DealStage.CLOSED_WON.value:
            items.append(
                FeedItem(
                    id=f"deal-closed-{deal['_id']}",
                    type=FeedItemType.DEAL_CLOSED,
                    description=f"Deal closed won: {title} - ${deal.get('value', 0):,.0f}",
                    timestamp=deal["updatedAt"],
                )
            )
        else:
            items.append(
                FeedItem(
                    id=f"deal-updated-{deal['_id']}",
                    type=FeedItemType.DEAL_UPDATED,
                    description=f"Deal updated: {title} moved to {deal['stage']}",
                    timestamp=deal["updatedAt"],
                )
            )
        return items

"""Tests for DashboardService."""

from datetime import datetime, timedelta

import pytest
from bson import ObjectId

from crm_api.dashboard.service import DashboardService, calculate_growth
from crm_api.db.database import CollectionName

ORG = str(ObjectId())
OTHER_ORG = str(ObjectId())
NOW = datetime(2024, 6, 15, 12, 0)
LAST_MONTH = datetime(2024, 5, 10, 9, 0)


@pytest.mark.parametrize(
    "current,previous,expected",
    [(5, 0, 100), (0, 0, 0), (15, 10, 50), (5, 10, -50), (10, 3, 233)],
)
def test_calculate_growth(current, previous, expected):
    assert calculate_growth(current, previous) == expected


@pytest.fixture
def seed(database):
    def _insert(collection, organization_id=ORG, created=NOW, updated=None, **fields):
        document = {
            "_id": ObjectId(),
            "organizationId": organization_id,
            "createdAt": created,
            "updatedAt": updated or created,
            **fields,
        }
        database.collection(collection).insert_one(document)
        return document

    return _insert


@pytest.fixture
def service(database):
    return DashboardService(database)


class TestStats:
    def test_empty_organization(self, service):
        data = service.get_dashboard(ORG, now=NOW)

        assert data.stats.total_contacts == 0
        assert data.stats.monthly_revenue == 0
        assert data.stats.contacts_growth == 0
        assert data.activities == []
        assert data.top_deals == []
        assert [point.revenue for point in data.charts.monthly_revenue] == [0] * 6
        assert set(data.charts.deals_by_stage.values()) == {0}

    def test_counts_and_growth(self, service, seed):
        seed(CollectionName.CONTACTS, created=LAST_MONTH, firstName="Old", lastName="One")
        seed(CollectionName.CONTACTS, created=LAST_MONTH, firstName="Old", lastName="Two")
        seed(CollectionName.CONTACTS, firstName="New", lastName="Three")
        seed(CollectionName.CONTACTS, organization_id=OTHER_ORG, firstName="X", lastName="Y")
        seed(CollectionName.COMPANIES, name="Initech")

        stats = service.get_dashboard(ORG, now=NOW).stats

        assert stats.total_contacts == 3
        assert stats.contacts_growth == 50
        assert stats.total_companies == 1
        assert stats.companies_growth == 100

    def test_revenue_counts_deals_won_this_month(self, service, seed):
        seed(CollectionName.DEALS, title="A", stage="closed_won", value=3000)
        seed(CollectionName.DEALS, title="B", stage="closed_won", value=1500)
        seed(CollectionName.DEALS, title="C", stage="closed_lost", value=9999)
        seed(CollectionName.DEALS, title="D", stage="closed_won", value=3000, created=LAST_MONTH)
        seed(CollectionName.DEALS, title="E", stage="proposal", value=700)

        data = service.get_dashboard(ORG, now=NOW)

        assert data.stats.monthly_revenue == 4500
        assert data.stats.revenue_growth == 50
        assert data.stats.active_deals == 1
        assert [point.month for point in data.charts.monthly_revenue] == [
            "Jan", "Feb", "Mar", "Apr", "May", "Jun",
        ]
        assert [point.revenue for point in data.charts.monthly_revenue][-2:] == [3000, 4500]
        assert data.charts.deals_by_stage["closed_won"] == 3
        assert data.charts.deals_by_stage["proposal"] == 1
        assert data.charts.deals_by_stage["lead"] == 0


class TestTopDeals:
    def test_top_five_open_deals_by_value(self, service, seed):
        for value in (100, 900, 300, 700, 500, 200):
            seed(CollectionName.DEALS, title=f"Deal {value}", stage="qualified", value=value)
        seed(CollectionName.DEALS, title="Closed", stage="closed_won", value=10_000)

        top = service.get_dashboard(ORG, now=NOW).top_deals

        assert [deal.value for deal in top] == [900, 700, 500, 300, 200]
        assert top[0].name == "Deal 900"


class TestRecentActivity:
    def test_feed_items(self, service, seed):
        seed(
            CollectionName.CONTACTS,
            created=NOW - timedelta(days=1),
            firstName="Jane",
            lastName="Roe",
        )
        seed(CollectionName.COMPANIES, created=NOW - timedelta(days=2), name="Initech")
        seed(
            CollectionName.DEALS,
            created=NOW - timedelta(days=3),
            updated=NOW - timedelta(hours=1),
            title="Renewal",
            stage="closed_won",
            value=1234,
        )
        seed(
            CollectionName.DEALS,
            created=NOW - timedelta(days=4),
            updated=NOW - timedelta(hours=2),
            title="Upsell",
            stage="negotiation",
            value=10,
        )
        seed(CollectionName.DEALS, created=NOW - timedelta(hours=3), title="Fresh", stage="lead")
        seed(CollectionName.CONTACTS, created=NOW - timedelta(days=30), firstName="Too", lastName="Old")

        feed = service.get_dashboard(ORG, now=NOW).activities

        assert [item.description for item in feed] == [
            "Deal closed won: Renewal - $1,234",
            "Deal updated: Upsell moved to negotiation",
            "New deal created: Fresh",
            "New contact added: Jane Roe",
            "New company added: Initech",
            "New deal created: Renewal",
            "New deal created: Upsell",
        ]
        assert [item.type for item in feed] == [
            "deal_closed",
            "deal_updated",
            "deal_created",
            "contact_added",
            "company_added",
            "deal_created",
            "deal_created",
        ]
        assert len({item.id for item in feed}) == len(feed)

    def test_deal_created_before_window_only_shows_change(self, service, seed):
        seed(
            CollectionName.DEALS,
            created=NOW - timedelta(days=20),
            updated=NOW - timedelta(days=1),
            title="Legacy",
            stage="closed_won",
            value=500,
        )

        feed = service.get_dashboard(ORG, now=NOW).activities

        assert [item.description for item in feed] == ["Deal closed won: Legacy - $500"]

    def test_feed_is_capped_at_ten(self, service, seed):
        for index in range(15):
            seed(
                CollectionName.CONTACTS,
                created=NOW - timedelta(minutes=index),
                firstName=f"C{index}",
                lastName="X",
            )

        feed = service.get_dashboard(ORG, now=NOW).activities

        assert len(feed) == 10
        assert feed[0].description == "New contact added: C0 X"

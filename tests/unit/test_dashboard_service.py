"""Unit tests for the dashboard metrics facade."""

from decimal import Decimal

import pytest

from bizmetrics.domain.currency import UnknownCurrencyError
from bizmetrics.infrastructure.repository import DataStoreUnavailableError
from bizmetrics.services import ActivityFeedBuilder, BusinessMetricsService, MetricsAggregator

from support import BUSINESS_ID, at


@pytest.fixture
def service(repository, normalizer):
    """Facade over the in-memory repository."""
    return BusinessMetricsService(
        aggregator=MetricsAggregator(repository, normalizer),
        activity_feed=ActivityFeedBuilder(repository),
    )


class TestGetBusinessMetrics:
    """Tests for BusinessMetricsService.get_business_metrics."""

    @pytest.mark.asyncio
    async def test_empty_business(self, service, now):
        metrics = await service.get_business_metrics(BUSINESS_ID, now=now)

        assert metrics.to_dict() == {
            "revenue": 0,
            "total_customers": 0,
            "customers_this_month": 0,
            "customer_growth": "0%",
            "revenueData": [
                {"name": "Jan 2024", "value": 0},
                {"name": "Feb 2024", "value": 0},
                {"name": "Mar 2024", "value": 0},
                {"name": "Apr 2024", "value": 0},
                {"name": "May 2024", "value": 0},
                {"name": "Jun 2024", "value": 0},
            ],
            "recent_activities": [],
        }

    @pytest.mark.asyncio
    async def test_composes_revenue_and_activity(self, service, repository, now):
        customer = repository.add_customer("Ada Stores", at(2024, 6, 1))
        invoice = repository.add_invoice(customer, "INV-001", "1000", at(2024, 6, 2), currency="USD")
        repository.add_payment(invoice, "1000", at(2024, 6, 3))

        payload = (await service.get_business_metrics(BUSINESS_ID, now=now)).to_dict()

        assert payload["revenue"] == Decimal("1500000")
        assert payload["total_customers"] == 1
        assert payload["customers_this_month"] == 1
        assert payload["customer_growth"] == "100%"
        assert payload["revenueData"][-1] == {"name": "Jun 2024", "value": Decimal("1500000")}
        assert [a["type"] for a in payload["recent_activities"]] == [
            "payment_received",
            "invoice_created",
            "customer_added",
        ]
        assert payload["recent_activities"][0]["amount"] == Decimal("1000")
        assert payload["recent_activities"][0]["currency"] == "USD"

    @pytest.mark.asyncio
    async def test_activity_limit_passed_through(self, service, repository, now):
        for day in range(1, 11):
            repository.add_customer(f"c{day}", at(2024, 6, day))

        metrics = await service.get_business_metrics(BUSINESS_ID, now=now, activity_limit=3)

        assert len(metrics.recent_activities) == 3
        assert metrics.revenue.total_customers == 10

    @pytest.mark.asyncio
    async def test_data_store_failure_propagates(self, service, repository, now):
        repository.error = DataStoreUnavailableError("connection refused")

        with pytest.raises(DataStoreUnavailableError):
            await service.get_business_metrics(BUSINESS_ID, now=now)

    @pytest.mark.asyncio
    async def test_no_partial_result_on_currency_error(self, service, repository, now):
        customer = repository.add_customer("Ada Stores", at(2024, 6, 1))
        invoice = repository.add_invoice(customer, "INV-1", "10", at(2024, 6, 2), currency="XOF")
        repository.add_payment(invoice, "10", at(2024, 6, 3))

        with pytest.raises(UnknownCurrencyError):
            await service.get_business_metrics(BUSINESS_ID, now=now)

    @pytest.mark.asyncio
    async def test_defaults_now_to_current_time(self, service, repository):
        metrics = await service.get_business_metrics(BUSINESS_ID)

        assert len(metrics.revenue.revenue_series) == 6

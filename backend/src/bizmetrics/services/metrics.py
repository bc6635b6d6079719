"""
Revenue and customer aggregation for one business.

Every figure is computed from fresh queries at request time; nothing is
cached between calls.
"""

import logging
from datetime import datetime, timezone, tzinfo
from decimal import Decimal

from bizmetrics.domain.calendar import MonthWindow, month_window, trailing_months
from bizmetrics.domain.currency import CurrencyNormalizer
from bizmetrics.domain.growth import customer_growth
from bizmetrics.domain.models import RevenueMetrics, RevenuePoint
from bizmetrics.infrastructure.repository import MetricsRepository

logger = logging.getLogger(__name__)

SERIES_MONTHS = 6


class MetricsAggregator:
    """
    Computes revenue totals, the monthly revenue series and customer counts.

    Payments are attributed to a business through its invoices. A business
    with no rows at all yields zeros everywhere rather than an error.

    Example:
        aggregator = MetricsAggregator(
            repository=SqlAlchemyMetricsRepository(session),
            normalizer=CurrencyNormalizer("NGN", {"USD": Decimal("1500")}),
        )
        metrics = await aggregator.aggregate("business-id", now=datetime.now(timezone.utc))
    """

    def __init__(
        self,
        repository: MetricsRepository,
        normalizer: CurrencyNormalizer,
        tz: tzinfo = timezone.utc,
        series_months: int = SERIES_MONTHS,
    ) -> None:
        """
        Initialize the aggregator.

        Args:
            repository: Read queries for customers, invoices and payments
            normalizer: Converts payment amounts into the reporting currency
            tz: Timezone that defines calendar-month boundaries
            series_months: Number of months in the revenue series
        """
        self.repository = repository
        self.normalizer = normalizer
        self.tz = tz
        self.series_months = series_months

    async def revenue(
        self,
        invoice_ids: list[str],
        window: MonthWindow | None = None,
    ) -> Decimal:
        """Normalized revenue for the given invoices, optionally within one month."""
        totals = await self.repository.payment_totals(invoice_ids, window)
        return self.normalizer.convert_totals(totals)

    async def revenue_series(self, invoice_ids: list[str], now: datetime) -> list[RevenuePoint]:
        """
        Revenue per calendar month, oldest first, ending with the current month.

        Each month is queried on its own.
        """
        points = []
        for window in trailing_months(now, self.tz, self.series_months):
            points.append(
                RevenuePoint(label=window.label, value=await self.revenue(invoice_ids, window))
            )
        return points

    async def revenue_totals(self, business_id: str, now: datetime) -> tuple[Decimal, Decimal]:
        """
        This month's and all-time revenue for a business.

        Runs only the revenue queries; customer counts and the series are skipped.
        """
        invoice_ids = await self.repository.invoice_ids(business_id)
        return await self._totals(invoice_ids, month_window(now, self.tz))

    async def _totals(
        self, invoice_ids: list[str], current: MonthWindow
    ) -> tuple[Decimal, Decimal]:
        return await self.revenue(invoice_ids, current), await self.revenue(invoice_ids)

    async def aggregate(self, business_id: str, now: datetime) -> RevenueMetrics:
        """
        Compute all revenue and customer figures for a business.

        Args:
            business_id: Business to aggregate
            now: Evaluation instant; its calendar month is "this month"

        Returns:
            RevenueMetrics in the reporting currency
        """
        current = month_window(now, self.tz)
        invoice_ids = await self.repository.invoice_ids(business_id)

        monthly_revenue, total_revenue = await self._totals(invoice_ids, current)

        total_customers = await self.repository.count_customers(business_id)
        customers_this_month = await self.repository.count_customers(business_id, current)

        series = await self.revenue_series(invoice_ids, now)

        logger.debug(
            f"Aggregated business {business_id} for {current.label}: "
            f"{len(invoice_ids)} invoices, {total_customers} customers, "
            f"monthly revenue {monthly_revenue} {self.normalizer.reporting_currency}"
        )

        return RevenueMetrics(
            monthly_revenue=monthly_revenue,
            total_revenue=total_revenue,
            total_customers=total_customers,
            customers_this_month=customers_this_month,
            customer_growth=customer_growth(total_customers, customers_this_month),
            revenue_series=series,
        )

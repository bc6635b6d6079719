"""
Business dashboard metrics.

Composes the aggregator and the activity feed into the single object the
dashboard renders.
"""

import logging
from datetime import datetime, timezone

from bizmetrics.domain.models import BusinessMetrics

from .activity import ActivityFeedBuilder
from .metrics import MetricsAggregator

logger = logging.getLogger(__name__)


class BusinessMetricsService:
    """
    Produces the full dashboard metrics for a business.

    No partial results: an error from either component propagates and
    nothing is returned.

    Example:
        service = BusinessMetricsService(
            aggregator=MetricsAggregator(repository, normalizer),
            activity_feed=ActivityFeedBuilder(repository),
        )
        metrics = await service.get_business_metrics("business-id")
        payload = metrics.to_dict()
    """

    def __init__(
        self,
        aggregator: MetricsAggregator,
        activity_feed: ActivityFeedBuilder,
    ) -> None:
        self.aggregator = aggregator
        self.activity_feed = activity_feed

    async def get_business_metrics(
        self,
        business_id: str,
        now: datetime | None = None,
        activity_limit: int | None = None,
    ) -> BusinessMetrics:
        """
        Compute dashboard metrics for a business.

        Args:
            business_id: Business to report on
            now: Evaluation instant (defaults to the current UTC time)
            activity_limit: Size of the recent-activity feed

        Returns:
            BusinessMetrics combining revenue figures and recent activity
        """
        now = now or datetime.now(timezone.utc)
        logger.info(f"Computing metrics for business {business_id}")

        # Both components share one AsyncSession, which cannot run queries concurrently
        revenue = await self.aggregator.aggregate(business_id, now)
        activities = await self.activity_feed.recent(business_id, activity_limit)

        return BusinessMetrics(revenue=revenue, recent_activities=activities)

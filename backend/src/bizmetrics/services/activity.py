"""
Recent-activity feed and paged activity history.

Both read the three activity sources (customers, invoices, payments)
independently, normalize them and merge by time.
"""

import logging

from bizmetrics.domain.activity import (
    DEFAULT_FEED_LIMIT,
    customer_activity,
    invoice_activity,
    merge_activities,
    payment_activity,
)
from bizmetrics.domain.models import Activity, ActivityPage, ActivityQuery, ActivityType
from bizmetrics.infrastructure.repository import MetricsRepository

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class ActivityFeedBuilder:
    """
    Builds the activity feed for a business.

    Each source is fetched with its own limit before merging, so at most
    three times `limit` rows are read for a feed of `limit` entries.
    """

    def __init__(
        self,
        repository: MetricsRepository,
        default_limit: int = DEFAULT_FEED_LIMIT,
    ) -> None:
        self.repository = repository
        self.default_limit = default_limit

    async def _fetch(
        self,
        business_id: str,
        limit: int,
        types: frozenset[ActivityType],
        query: ActivityQuery,
    ) -> list[list[Activity]]:
        # Source order matters: it is the tie-break for equal timestamps
        sources: list[list[Activity]] = []

        if ActivityType.CUSTOMER_ADDED in types:
            customers = await self.repository.list_customers(business_id, limit, query)
            sources.append([customer_activity(c) for c in customers])

        if ActivityType.INVOICE_CREATED in types:
            invoices = await self.repository.list_invoices(business_id, limit, query)
            sources.append([invoice_activity(i) for i in invoices])

        if ActivityType.PAYMENT_RECEIVED in types:
            invoice_ids = await self.repository.invoice_ids(business_id)
            payments = await self.repository.list_payments(invoice_ids, limit, query)
            sources.append([payment_activity(p) for p in payments])

        return sources

    async def recent(self, business_id: str, limit: int | None = None) -> list[Activity]:
        """
        Get the most recent activities across all sources.

        Args:
            business_id: Business whose activity to read
            limit: Maximum entries per source and overall (default from config)

        Returns:
            Up to `limit` activities, most recent first
        """
        limit = self.default_limit if limit is None else limit
        if limit < 1:
            raise ValueError(f"limit must be positive, got {limit}")

        sources = await self._fetch(business_id, limit, frozenset(ActivityType), ActivityQuery())
        feed = merge_activities(sources, limit)
        logger.debug(f"Built activity feed for business {business_id}: {len(feed)} entries")
        return feed

    async def history(
        self,
        business_id: str,
        page: int = 1,
        per_page: int = DEFAULT_FEED_LIMIT,
        activity_type: ActivityType | None = None,
        query: ActivityQuery | None = None,
    ) -> ActivityPage:
        """
        Get one page of the filtered activity history.

        Page `p` needs the newest p * per_page entries overall, so each
        source is asked for that many plus one; the extra row tells us
        whether a further page exists.

        Args:
            business_id: Business whose activity to read
            page: 1-based page number
            per_page: Entries per page (1-100)
            activity_type: Restrict to one kind of activity (None for all)
            query: Date range and free-text filters

        Returns:
            ActivityPage with the page's entries and the next page number
        """
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if not 1 <= per_page <= MAX_PAGE_SIZE:
            raise ValueError(f"per_page must be between 1 and {MAX_PAGE_SIZE}, got {per_page}")

        types = frozenset([activity_type]) if activity_type else frozenset(ActivityType)
        window = page * per_page
        sources = await self._fetch(business_id, window + 1, types, query or ActivityQuery())

        merged = merge_activities(sources, limit=window + 1)
        data = merged[(page - 1) * per_page:window]
        next_page = page + 1 if len(merged) > window else None

        return ActivityPage(data=data, next_page=next_page)

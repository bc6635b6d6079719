"""
Business metrics endpoints.

Dashboard metrics, revenue summary and the paged activity history.
"""

import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from bizmetrics.api.dependencies import (
    get_activity_feed,
    get_aggregator,
    get_metrics_service,
    get_now,
)
from bizmetrics.api.schemas import (
    ActivityFilterEnum,
    ActivityPageResponse,
    BusinessMetricsResponse,
    ErrorResponse,
    RevenueSummaryResponse,
)
from bizmetrics.domain.calendar import ensure_aware
from bizmetrics.domain.models import ActivityQuery, ActivityType
from bizmetrics.services import ActivityFeedBuilder, BusinessMetricsService, MetricsAggregator
from bizmetrics.services.activity import MAX_PAGE_SIZE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/businesses/{business_id}", tags=["metrics"])

ERROR_RESPONSES = {
    500: {"model": ErrorResponse, "description": "Metrics could not be computed"},
    503: {"model": ErrorResponse, "description": "Data store unavailable"},
}


@router.get(
    "/metrics",
    response_model=BusinessMetricsResponse,
    responses=ERROR_RESPONSES,
)
async def get_business_metrics(
    business_id: str,
    service: Annotated[BusinessMetricsService, Depends(get_metrics_service)],
    now: Annotated[datetime, Depends(get_now)],
    limit: Annotated[int | None, Query(ge=1, le=MAX_PAGE_SIZE)] = None,
) -> BusinessMetricsResponse:
    """
    Get dashboard metrics for a business.

    Returns this month's revenue, customer counts and growth, a six-month
    revenue series and the most recent activity. Unknown businesses get
    all-zero metrics.
    """
    metrics = await service.get_business_metrics(business_id, now=now, activity_limit=limit)
    return BusinessMetricsResponse.from_domain(metrics)


@router.get(
    "/revenue",
    response_model=RevenueSummaryResponse,
    responses=ERROR_RESPONSES,
)
async def get_revenue_summary(
    business_id: str,
    aggregator: Annotated[MetricsAggregator, Depends(get_aggregator)],
    now: Annotated[datetime, Depends(get_now)],
) -> RevenueSummaryResponse:
    """Get this month's and all-time revenue in the reporting currency."""
    monthly_revenue, total_revenue = await aggregator.revenue_totals(business_id, now)
    return RevenueSummaryResponse(
        currency=aggregator.normalizer.reporting_currency,
        monthly_revenue=monthly_revenue,
        total_revenue=total_revenue,
    )


@router.get(
    "/activities",
    response_model=ActivityPageResponse,
    responses=ERROR_RESPONSES,
)
async def list_activities(
    business_id: str,
    activity_feed: Annotated[ActivityFeedBuilder, Depends(get_activity_feed)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = 20,
    type: Annotated[ActivityFilterEnum, Query()] = ActivityFilterEnum.ALL,
    search: Annotated[str | None, Query(max_length=128)] = None,
    since: Annotated[datetime | None, Query(alias="from")] = None,
    until: Annotated[datetime | None, Query(alias="to")] = None,
) -> ActivityPageResponse:
    """
    Page through a business's activity history.

    Filters by activity type, free text (customer name or invoice number)
    and a `from`/`to` time range.
    """
    activity_type = None if type == ActivityFilterEnum.ALL else ActivityType(type.value)
    try:
        query = ActivityQuery(
            since=ensure_aware(since) if since else None,
            until=ensure_aware(until) if until else None,
            search=search.strip() if search and search.strip() else None,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.debug(
        f"Activity history for {business_id}: page={page} per_page={per_page} "
        f"type={type.value} search={query.search!r}"
    )

    result = await activity_feed.history(
        business_id,
        page=page,
        per_page=per_page,
        activity_type=activity_type,
        query=query,
    )
    return ActivityPageResponse.from_domain(result)

"""
FastAPI dependency wiring.

One database session and repository per request; services are cheap
and built per request on top of them.
"""

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends

from bizmetrics.config import Settings, get_settings
from bizmetrics.domain.currency import CurrencyNormalizer
from bizmetrics.infrastructure.database import get_session
from bizmetrics.infrastructure.repository import MetricsRepository, SqlAlchemyMetricsRepository
from bizmetrics.services import ActivityFeedBuilder, BusinessMetricsService, MetricsAggregator


async def get_repository() -> AsyncGenerator[MetricsRepository, None]:
    """Yield a repository bound to a request-scoped session."""
    async with get_session() as session:
        yield SqlAlchemyMetricsRepository(session)


def get_now() -> datetime:
    """Evaluation instant for the request."""
    return datetime.now(timezone.utc)


def get_normalizer(settings: Annotated[Settings, Depends(get_settings)]) -> CurrencyNormalizer:
    """Currency normalizer configured from settings."""
    return CurrencyNormalizer(settings.reporting_currency, settings.exchange_rates)


def get_aggregator(
    repository: Annotated[MetricsRepository, Depends(get_repository)],
    normalizer: Annotated[CurrencyNormalizer, Depends(get_normalizer)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> MetricsAggregator:
    return MetricsAggregator(repository=repository, normalizer=normalizer, tz=settings.tzinfo)


def get_activity_feed(
    repository: Annotated[MetricsRepository, Depends(get_repository)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ActivityFeedBuilder:
    return ActivityFeedBuilder(repository=repository, default_limit=settings.activity_feed_limit)


def get_metrics_service(
    aggregator: Annotated[MetricsAggregator, Depends(get_aggregator)],
    activity_feed: Annotated[ActivityFeedBuilder, Depends(get_activity_feed)],
) -> BusinessMetricsService:
    return BusinessMetricsService(aggregator=aggregator, activity_feed=activity_feed)

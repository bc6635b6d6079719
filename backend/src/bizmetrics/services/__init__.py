"""
Services package - Metrics aggregation and activity feeds.

Includes the revenue aggregator, the activity feed builder and the
dashboard facade that composes them.
"""

from .activity import ActivityFeedBuilder
from .dashboard import BusinessMetricsService
from .metrics import MetricsAggregator

__all__ = ["ActivityFeedBuilder", "BusinessMetricsService", "MetricsAggregator"]

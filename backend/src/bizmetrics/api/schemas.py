"""
Pydantic schemas for API request/response validation.

These schemas define the contract between frontend and backend.
Field names match what the existing dashboard reads, including the
camel-cased `revenueData`. Monetary values stay Decimal in Python and
are written to JSON as numbers, which is what the charts expect.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, PlainSerializer

from bizmetrics.domain.models import Activity, ActivityPage, BusinessMetrics

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ActivityTypeEnum(str, Enum):
    """Activity kinds for API responses."""
    CUSTOMER_ADDED = "customer_added"
    INVOICE_CREATED = "invoice_created"
    PAYMENT_RECEIVED = "payment_received"


class ActivityFilterEnum(str, Enum):
    """Activity type filter accepted by the history endpoint."""
    ALL = "all"
    CUSTOMER_ADDED = "customer_added"
    INVOICE_CREATED = "invoice_created"
    PAYMENT_RECEIVED = "payment_received"


# =============================================================================
# Response Schemas
# =============================================================================

class RevenuePointResponse(BaseModel):
    """One month of the revenue chart."""
    name: str
    value: Money


class ActivityResponse(BaseModel):
    """A single activity feed entry."""
    type: ActivityTypeEnum
    title: str
    time: datetime
    amount: Money | None = None
    currency: str | None = None

    @classmethod
    def from_domain(cls, activity: Activity) -> "ActivityResponse":
        return cls(
            type=ActivityTypeEnum(activity.type.value),
            title=activity.title,
            time=activity.time,
            amount=activity.amount,
            currency=activity.currency,
        )


class BusinessMetricsResponse(BaseModel):
    """Business dashboard metrics."""
    revenue: Money
    total_customers: int
    customers_this_month: int
    customer_growth: str
    revenueData: list[RevenuePointResponse]
    recent_activities: list[ActivityResponse]

    @classmethod
    def from_domain(cls, metrics: BusinessMetrics) -> "BusinessMetricsResponse":
        return cls.model_validate(
            {
                **metrics.to_dict(),
                "recent_activities": [
                    ActivityResponse.from_domain(a) for a in metrics.recent_activities
                ],
            }
        )


class ActivityPageResponse(BaseModel):
    """One page of activity history."""
    data: list[ActivityResponse]
    next_page: int | None = None

    @classmethod
    def from_domain(cls, page: ActivityPage) -> "ActivityPageResponse":
        return cls(
            data=[ActivityResponse.from_domain(a) for a in page.data],
            next_page=page.next_page,
        )


class RevenueSummaryResponse(BaseModel):
    """Revenue figures with the currency they are reported in."""
    currency: str
    monthly_revenue: Money
    total_revenue: Money


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
    database: str = "connected"
    reporting_currency: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: str | None = None
    code: str | None = None

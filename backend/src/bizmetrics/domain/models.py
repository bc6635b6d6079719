"""
Domain models for business metrics.

These models are read-only snapshots of the records a business owns
(customers, invoices, payments) plus the derived shapes the dashboard
consumes (revenue points, activities, the aggregated metrics).

Design Decisions:
- Using dataclasses for immutable, typed domain objects
- Payments carry the joined invoice number and customer name so the
  activity feed never needs a second lookup
- Decimal for all monetary values to avoid floating-point errors
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum


def _check_money(amount: Decimal, currency: str) -> None:
    if amount < 0:
        raise ValueError(f"Amount must be non-negative, got {amount}")
    if len(currency) != 3 or not currency.isalpha():
        raise ValueError(f"Currency must be a 3-letter code, got {currency!r}")


class ActivityType(Enum):
    """Kinds of events shown in the activity feed."""
    CUSTOMER_ADDED = "customer_added"
    INVOICE_CREATED = "invoice_created"
    PAYMENT_RECEIVED = "payment_received"


@dataclass(frozen=True)
class CustomerRecord:
    """A customer belonging to exactly one business."""
    id: str
    business_id: str
    name: str
    created_at: datetime


@dataclass(frozen=True)
class InvoiceRecord:
    """
    An invoice issued by a business to one of its customers.

    `customer_name` is joined from the customer row.
    """
    id: str
    business_id: str
    customer_id: str
    customer_name: str
    invoice_number: str
    amount: Decimal
    currency: str
    created_at: datetime

    def __post_init__(self) -> None:
        """Validate amount and currency."""
        _check_money(self.amount, self.currency)


@dataclass(frozen=True)
class PaymentRecord:
    """
    A payment recorded against an invoice.

    A payment never references a business directly; its business is the
    business of its invoice.
    """
    id: str
    invoice_id: str
    invoice_number: str
    customer_name: str
    amount: Decimal
    currency: str
    created_at: datetime

    def __post_init__(self) -> None:
        """Validate amount and currency."""
        _check_money(self.amount, self.currency)


@dataclass(frozen=True)
class Activity:
    """A display-ready event derived from a customer, invoice or payment."""
    type: ActivityType
    title: str
    time: datetime
    amount: Decimal | None = None
    currency: str | None = None


@dataclass(frozen=True)
class ActivityQuery:
    """
    Optional filters for activity source queries.

    `since` is inclusive, `until` is exclusive. `search` matches customer
    names and invoice numbers, case-insensitively.
    """
    since: datetime | None = None
    until: datetime | None = None
    search: str | None = None

    def __post_init__(self) -> None:
        """Validate bounds order."""
        if self.since and self.until and self.since > self.until:
            raise ValueError(f"since ({self.since}) is after until ({self.until})")


@dataclass(frozen=True)
class ActivityPage:
    """One page of the activity history."""
    data: list[Activity]
    next_page: int | None = None


@dataclass(frozen=True)
class RevenuePoint:
    """Revenue for one calendar month, e.g. ("Jan 2024", 125000)."""
    label: str
    value: Decimal


@dataclass(frozen=True)
class RevenueMetrics:
    """
    Revenue and customer figures for one business at one instant.

    All revenue values are in the reporting currency.
    """
    monthly_revenue: Decimal
    total_revenue: Decimal
    total_customers: int
    customers_this_month: int
    customer_growth: str
    revenue_series: list[RevenuePoint] = field(default_factory=list)


@dataclass(frozen=True)
class BusinessMetrics:
    """Everything the business dashboard renders in one response."""
    revenue: RevenueMetrics
    recent_activities: list[Activity] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Serialize using the field names the dashboard frontend reads."""
        return {
            "revenue": self.revenue.monthly_revenue,
            "total_customers": self.revenue.total_customers,
            "customers_this_month": self.revenue.customers_this_month,
            "customer_growth": self.revenue.customer_growth,
            "revenueData": [
                {"name": point.label, "value": point.value}
                for point in self.revenue.revenue_series
            ],
            "recent_activities": [
                {
                    "type": activity.type.value,
                    "title": activity.title,
                    "time": activity.time,
                    "amount": activity.amount,
                    "currency": activity.currency,
                }
                for activity in self.recent_activities
            ],
        }

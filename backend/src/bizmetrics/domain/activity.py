"""
Activity normalization and merge rules.

Turns customer, invoice and payment records into display-ready
Activity objects and merges the per-source lists into one feed.

The feed is built with a two-stage limit: each source contributes at
most `limit` rows, then the merged list is cut to `limit` again. Every
entry of the overall top `limit` is also within its own source's top
`limit`, so the result holds the same entries as one global query;
only the order of equal timestamps depends on the source order.
"""

from collections.abc import Iterable

from .calendar import ensure_aware
from .models import Activity, ActivityType, CustomerRecord, InvoiceRecord, PaymentRecord

DEFAULT_FEED_LIMIT = 20


def customer_activity(customer: CustomerRecord) -> Activity:
    """New customer event. Carries no amount."""
    return Activity(
        type=ActivityType.CUSTOMER_ADDED,
        title=f"New customer added: {customer.name}",
        time=ensure_aware(customer.created_at),
    )


def invoice_activity(invoice: InvoiceRecord) -> Activity:
    """Invoice creation event with the invoice's amount and currency."""
    return Activity(
        type=ActivityType.INVOICE_CREATED,
        title=f"Invoice #{invoice.invoice_number} created for {invoice.customer_name}",
        time=ensure_aware(invoice.created_at),
        amount=invoice.amount,
        currency=invoice.currency,
    )


def payment_activity(payment: PaymentRecord) -> Activity:
    """Payment event with the payment's own amount and currency."""
    return Activity(
        type=ActivityType.PAYMENT_RECEIVED,
        title=(
            f"Payment received for Invoice #{payment.invoice_number} "
            f"from {payment.customer_name}"
        ),
        time=ensure_aware(payment.created_at),
        amount=payment.amount,
        currency=payment.currency,
    )


def merge_activities(
    sources: Iterable[Iterable[Activity]],
    limit: int | None = DEFAULT_FEED_LIMIT,
) -> list[Activity]:
    """
    Merge per-source activity lists, most recent first.

    Sources are concatenated in the order given and sorted with a stable
    sort, so equal timestamps keep concatenation order (customers, then
    invoices, then payments when called by the feed builder).

    Args:
        sources: Activity lists, one per source
        limit: Maximum number of activities to keep (None keeps all)

    Returns:
        Merged activities sorted non-increasing by time
    """
    merged: list[Activity] = []
    for source in sources:
        merged.extend(source)

    # sorted() is stable with reverse=True as well
    merged = sorted(merged, key=lambda activity: activity.time, reverse=True)

    if limit is not None:
        merged = merged[:limit]
    return merged

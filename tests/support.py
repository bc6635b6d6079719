"""Test doubles and data builders shared by the test suite."""

from collections.abc import Sequence
from datetime import datetime, timezone
from decimal import Decimal
from itertools import count

from bizmetrics.domain.calendar import MonthWindow
from bizmetrics.domain.models import ActivityQuery, CustomerRecord, InvoiceRecord, PaymentRecord
from bizmetrics.infrastructure.repository import NO_FILTER, MetricsRepository


BUSINESS_ID = "biz-1"
OTHER_BUSINESS_ID = "biz-2"

# Mid-June 2024; the trailing six months run Jan..Jun 2024
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def at(year: int, month: int, day: int = 1, hour: int = 12, minute: int = 0) -> datetime:
    """Shorthand for an aware UTC timestamp."""
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


class InMemoryMetricsRepository(MetricsRepository):
    """MetricsRepository over plain lists, with call recording."""

    def __init__(self) -> None:
        self.customers: list[CustomerRecord] = []
        self.invoices: list[InvoiceRecord] = []
        self.payments: list[PaymentRecord] = []
        self.calls: list[tuple] = []
        self.error: Exception | None = None
        self._ids = count(1)

    # -- seeding helpers ------------------------------------------------------

    def add_customer(
        self,
        name: str,
        created_at: datetime,
        business_id: str = BUSINESS_ID,
    ) -> CustomerRecord:
        customer = CustomerRecord(
            id=f"cust-{next(self._ids)}",
            business_id=business_id,
            name=name,
            created_at=created_at,
        )
        self.customers.append(customer)
        return customer

    def add_invoice(
        self,
        customer: CustomerRecord,
        number: str,
        amount: str | Decimal,
        created_at: datetime,
        currency: str = "NGN",
    ) -> InvoiceRecord:
        invoice = InvoiceRecord(
            id=f"inv-{next(self._ids)}",
            business_id=customer.business_id,
            customer_id=customer.id,
            customer_name=customer.name,
            invoice_number=number,
            amount=Decimal(amount),
            currency=currency,
            created_at=created_at,
        )
        self.invoices.append(invoice)
        return invoice

    def add_payment(
        self,
        invoice: InvoiceRecord,
        amount: str | Decimal,
        created_at: datetime,
        currency: str | None = None,
    ) -> PaymentRecord:
        payment = PaymentRecord(
            id=f"pay-{next(self._ids)}",
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            customer_name=invoice.customer_name,
            amount=Decimal(amount),
            currency=currency or invoice.currency,
            created_at=created_at,
        )
        self.payments.append(payment)
        return payment

    # -- MetricsRepository ----------------------------------------------------

    def _record(self, *call) -> None:
        self.calls.append(call)
        if self.error is not None:
            raise self.error

    @staticmethod
    def _matches(moment: datetime, query: ActivityQuery, *texts: str) -> bool:
        if query.since is not None and moment < query.since:
            return False
        if query.until is not None and moment >= query.until:
            return False
        if query.search:
            needle = query.search.lower()
            return any(needle in text.lower() for text in texts)
        return True

    @staticmethod
    def _newest(rows: list, limit: int) -> list:
        return sorted(rows, key=lambda row: row.created_at, reverse=True)[:limit]

    async def count_customers(self, business_id: str, window: MonthWindow | None = None) -> int:
        self._record("count_customers", business_id, window)
        return sum(
            1
            for c in self.customers
            if c.business_id == business_id and (window is None or window.contains(c.created_at))
        )

    async def list_customers(
        self,
        business_id: str,
        limit: int,
        query: ActivityQuery = NO_FILTER,
    ) -> list[CustomerRecord]:
        self._record("list_customers", business_id, limit)
        rows = [
            c for c in self.customers
            if c.business_id == business_id and self._matches(c.created_at, query, c.name)
        ]
        return self._newest(rows, limit)

    async def invoice_ids(self, business_id: str) -> list[str]:
        self._record("invoice_ids", business_id)
        return [i.id for i in self.invoices if i.business_id == business_id]

    async def list_invoices(
        self,
        business_id: str,
        limit: int,
        query: ActivityQuery = NO_FILTER,
    ) -> list[InvoiceRecord]:
        self._record("list_invoices", business_id, limit)
        rows = [
            i for i in self.invoices
            if i.business_id == business_id
            and self._matches(i.created_at, query, i.customer_name, i.invoice_number)
        ]
        return self._newest(rows, limit)

    async def payment_totals(
        self,
        invoice_ids: Sequence[str],
        window: MonthWindow | None = None,
    ) -> dict[str, Decimal]:
        self._record("payment_totals", tuple(invoice_ids), window)
        totals: dict[str, Decimal] = {}
        for p in self.payments:
            if p.invoice_id in invoice_ids and (window is None or window.contains(p.created_at)):
                totals[p.currency] = totals.get(p.currency, Decimal(0)) + p.amount
        return totals

    async def list_payments(
        self,
        invoice_ids: Sequence[str],
        limit: int,
        query: ActivityQuery = NO_FILTER,
    ) -> list[PaymentRecord]:
        self._record("list_payments", tuple(invoice_ids), limit)
        rows = [
            p for p in self.payments
            if p.invoice_id in invoice_ids
            and self._matches(p.created_at, query, p.customer_name, p.invoice_number)
        ]
        return self._newest(rows, limit)

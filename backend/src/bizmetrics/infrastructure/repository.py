"""
Read-side repository for business metrics.

Exposes exactly the queries the metrics services need, independent of
the ORM. The SQLAlchemy implementation is the production backend; tests
substitute an in-memory one.

Design Decisions:
- Abstract repository interface, one async method per query shape
- Payment queries are scoped by invoice IDs, never by business directly
- Revenue sums are grouped by currency so conversion happens in Python
  with Decimal arithmetic
- Driver and connection failures surface as DataStoreUnavailableError;
  nothing is retried here
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from contextlib import asynccontextmanager
from decimal import Decimal

from sqlalchemy import Select, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bizmetrics.domain.calendar import MonthWindow
from bizmetrics.domain.models import ActivityQuery, CustomerRecord, InvoiceRecord, PaymentRecord

from .database import BusinessCustomer, BusinessInvoice, BusinessInvoicePayment

logger = logging.getLogger(__name__)

NO_FILTER = ActivityQuery()


class DataStoreUnavailableError(RuntimeError):
    """Raised when the backing data store cannot serve a query."""


class MetricsRepository(ABC):
    """Abstract interface for the metrics read queries."""

    @abstractmethod
    async def count_customers(
        self,
        business_id: str,
        window: MonthWindow | None = None,
    ) -> int:
        """Count a business's customers, optionally only those created in `window`."""
        pass

    @abstractmethod
    async def list_customers(
        self,
        business_id: str,
        limit: int,
        query: ActivityQuery = NO_FILTER,
    ) -> list[CustomerRecord]:
        """Most recently created customers first."""
        pass

    @abstractmethod
    async def invoice_ids(self, business_id: str) -> list[str]:
        """IDs of every invoice the business issued."""
        pass

    @abstractmethod
    async def list_invoices(
        self,
        business_id: str,
        limit: int,
        query: ActivityQuery = NO_FILTER,
    ) -> list[InvoiceRecord]:
        """Most recently created invoices first, with customer names."""
        pass

    @abstractmethod
    async def payment_totals(
        self,
        invoice_ids: Sequence[str],
        window: MonthWindow | None = None,
    ) -> dict[str, Decimal]:
        """Sum of payment amounts per currency for the given invoices."""
        pass

    @abstractmethod
    async def list_payments(
        self,
        invoice_ids: Sequence[str],
        limit: int,
        query: ActivityQuery = NO_FILTER,
    ) -> list[PaymentRecord]:
        """Most recent payments first, with invoice numbers and customer names."""
        pass


@asynccontextmanager
async def _translate_errors(operation: str):
    try:
        yield
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Data store query failed ({operation}): {e}")
        raise DataStoreUnavailableError(f"Data store unavailable during {operation}") from e


class SqlAlchemyMetricsRepository(MetricsRepository):
    """
    MetricsRepository backed by an async SQLAlchemy session.

    The session is owned by the caller (one per request).
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _within(stmt: Select, column, since, until) -> Select:
        if since is not None:
            stmt = stmt.where(column >= since)
        if until is not None:
            stmt = stmt.where(column < until)
        return stmt

    async def count_customers(
        self,
        business_id: str,
        window: MonthWindow | None = None,
    ) -> int:
        stmt = (
            select(func.count())
            .select_from(BusinessCustomer)
            .where(BusinessCustomer.business_id == business_id)
        )
        if window is not None:
            stmt = self._within(stmt, BusinessCustomer.created_at, window.start, window.end)

        async with _translate_errors("count_customers"):
            result = await self.session.execute(stmt)
            return int(result.scalar_one())

    async def list_customers(
        self,
        business_id: str,
        limit: int,
        query: ActivityQuery = NO_FILTER,
    ) -> list[CustomerRecord]:
        stmt = select(BusinessCustomer).where(BusinessCustomer.business_id == business_id)
        stmt = self._within(stmt, BusinessCustomer.created_at, query.since, query.until)
        if query.search:
            stmt = stmt.where(BusinessCustomer.name.icontains(query.search, autoescape=True))
        stmt = stmt.order_by(BusinessCustomer.created_at.desc()).limit(limit)

        async with _translate_errors("list_customers"):
            rows = (await self.session.execute(stmt)).scalars().all()

        return [
            CustomerRecord(
                id=row.id,
                business_id=row.business_id,
                name=row.name,
                created_at=row.created_at,
            )
            for row in rows
        ]

    async def invoice_ids(self, business_id: str) -> list[str]:
        stmt = select(BusinessInvoice.id).where(BusinessInvoice.business_id == business_id)
        async with _translate_errors("invoice_ids"):
            return list((await self.session.execute(stmt)).scalars().all())

    async def list_invoices(
        self,
        business_id: str,
        limit: int,
        query: ActivityQuery = NO_FILTER,
    ) -> list[InvoiceRecord]:
        stmt = (
            select(BusinessInvoice, BusinessCustomer.name)
            .join(BusinessCustomer, BusinessInvoice.customer_id == BusinessCustomer.id)
            .where(BusinessInvoice.business_id == business_id)
        )
        stmt = self._within(stmt, BusinessInvoice.created_at, query.since, query.until)
        if query.search:
            stmt = stmt.where(
                or_(
                    BusinessCustomer.name.icontains(query.search, autoescape=True),
                    BusinessInvoice.invoice_number.icontains(query.search, autoescape=True),
                )
            )
        stmt = stmt.order_by(BusinessInvoice.created_at.desc()).limit(limit)

        async with _translate_errors("list_invoices"):
            rows = (await self.session.execute(stmt)).all()

        return [
            InvoiceRecord(
                id=invoice.id,
                business_id=invoice.business_id,
                customer_id=invoice.customer_id,
                customer_name=customer_name,
                invoice_number=invoice.invoice_number,
                amount=invoice.amount,
                currency=invoice.currency,
                created_at=invoice.created_at,
            )
            for invoice, customer_name in rows
        ]

    async def payment_totals(
        self,
        invoice_ids: Sequence[str],
        window: MonthWindow | None = None,
    ) -> dict[str, Decimal]:
        if not invoice_ids:
            return {}

        stmt = (
            select(BusinessInvoicePayment.currency, func.sum(BusinessInvoicePayment.amount))
            .where(BusinessInvoicePayment.invoice_id.in_(invoice_ids))
            .group_by(BusinessInvoicePayment.currency)
        )
        if window is not None:
            stmt = self._within(stmt, BusinessInvoicePayment.created_at, window.start, window.end)

        async with _translate_errors("payment_totals"):
            rows = (await self.session.execute(stmt)).all()

        return {currency: Decimal(total or 0) for currency, total in rows}

    async def list_payments(
        self,
        invoice_ids: Sequence[str],
        limit: int,
        query: ActivityQuery = NO_FILTER,
    ) -> list[PaymentRecord]:
        if not invoice_ids:
            return []

        stmt = (
            select(BusinessInvoicePayment, BusinessInvoice.invoice_number, BusinessCustomer.name)
            .join(BusinessInvoice, BusinessInvoicePayment.invoice_id == BusinessInvoice.id)
            .join(BusinessCustomer, BusinessInvoice.customer_id == BusinessCustomer.id)
            .where(BusinessInvoicePayment.invoice_id.in_(invoice_ids))
        )
        stmt = self._within(stmt, BusinessInvoicePayment.created_at, query.since, query.until)
        if query.search:
            stmt = stmt.where(
                or_(
                    BusinessCustomer.name.icontains(query.search, autoescape=True),
                    BusinessInvoice.invoice_number.icontains(query.search, autoescape=True),
                )
            )
        stmt = stmt.order_by(BusinessInvoicePayment.created_at.desc()).limit(limit)

        async with _translate_errors("list_payments"):
            rows = (await self.session.execute(stmt)).all()

        return [
            PaymentRecord(
                id=payment.id,
                invoice_id=payment.invoice_id,
                invoice_number=invoice_number,
                customer_name=customer_name,
                amount=payment.amount,
                currency=payment.currency,
                created_at=payment.created_at,
            )
            for payment, invoice_number, customer_name in rows
        ]

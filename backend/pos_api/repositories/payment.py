"""
Payment Repository - settlements and revenue aggregates.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple, Sequence

from sqlalchemy import Select, func, select

from pos_api.models import Payment
from pos_shared.config.constants import PaymentMethod

from .base import BaseRepository, RepositoryFilters


@dataclass
class PaymentFilters(RepositoryFilters):
    order_id: str | None = None
    payment_method: PaymentMethod | None = None


class RevenueRow(NamedTuple):
    payment_method: PaymentMethod
    payments: int
    amount_cents: int
    tip_cents: int


class PaymentRepository(BaseRepository[Payment]):

    @property
    def model(self) -> type[Payment]:
        return Payment

    def _base_query(self) -> Select:
        return select(Payment).order_by(Payment.payment_date.desc(), Payment.id)

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if not isinstance(filters, PaymentFilters):
            return query
        if filters.order_id is not None:
            query = query.where(Payment.order_id == filters.order_id)
        if filters.payment_method is not None:
            query = query.where(Payment.payment_method == filters.payment_method)
        return query

    def find_by_order(self, order_id: str) -> Payment | None:
        return self._db.scalar(select(Payment).where(Payment.order_id == order_id))

    def find_by_date_range(self, start: datetime, end: datetime) -> Sequence[Payment]:
        """Payments dated in [start, end), unpaginated, for reports."""
        query = (
            select(Payment)
            .where(Payment.payment_date >= start, Payment.payment_date < end)
            .order_by(Payment.payment_date)
        )
        return self._db.execute(query).scalars().all()

    def revenue_by_date_range(self, start: datetime, end: datetime) -> list[RevenueRow]:
        """Amount and tip totals per payment method for payments in [start, end)."""
        query = (
            select(
                Payment.payment_method,
                func.count(Payment.id).label("payments"),
                func.coalesce(func.sum(Payment.amount_cents), 0).label("amount_cents"),
                func.coalesce(func.sum(Payment.tip_cents), 0).label("tip_cents"),
            )
            .where(Payment.payment_date >= start, Payment.payment_date < end)
            .group_by(Payment.payment_method)
            .order_by(Payment.payment_method)
        )
        return [
            RevenueRow(row.payment_method, int(row.payments), int(row.amount_cents), int(row.tip_cents))
            for row in self._db.execute(query)
        ]

"""
Order Repository - orders with their item sequence.
Items are loaded with the order (selectin), so reads never N+1.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple, Sequence

from sqlalchemy import Select, func, select

from pos_api.models import MenuItem, Order, OrderItem
from pos_shared.config.constants import ACTIVE_ORDER_STATUSES, OrderStatus

from .base import BaseRepository, RepositoryFilters


@dataclass
class OrderFilters(RepositoryFilters):
    status: OrderStatus | None = None
    statuses: list[OrderStatus] | None = None
    table_id: str | None = None
    waiter_id: str | None = None


class ItemFrequencyRow(NamedTuple):
    menu_item_id: str
    name: str
    count: int
    quantity: int


class OrderRepository(BaseRepository[Order]):

    @property
    def model(self) -> type[Order]:
        return Order

    def _base_query(self) -> Select:
        return select(Order).order_by(Order.created_at.desc(), Order.id)

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if not isinstance(filters, OrderFilters):
            return query
        if filters.status is not None:
            query = query.where(Order.status == filters.status)
        elif filters.statuses:
            query = query.where(Order.status.in_(filters.statuses))
        if filters.table_id is not None:
            query = query.where(Order.table_id == filters.table_id)
        if filters.waiter_id is not None:
            query = query.where(Order.waiter_id == filters.waiter_id)
        return query

    def find_by_status(self, status: OrderStatus) -> Sequence[Order]:
        return self.find_all(OrderFilters(status=status))

    def find_by_table(self, table_id: str) -> Sequence[Order]:
        return self.find_all(OrderFilters(table_id=table_id))

    def find_by_waiter(self, waiter_id: str) -> Sequence[Order]:
        return self.find_all(OrderFilters(waiter_id=waiter_id))

    def find_active_for_table(self, table_id: str) -> Order | None:
        """The table's open order, if any. At most one exists."""
        query = select(Order).where(
            Order.table_id == table_id,
            Order.status.in_(ACTIVE_ORDER_STATUSES),
        )
        return self._db.scalar(query)

    def count_unsettled_for_table(self, table_id: str, exclude_order_id: str | None = None) -> int:
        """Orders on the table that are neither paid nor cancelled."""
        query = (
            select(func.count())
            .select_from(Order)
            .where(Order.table_id == table_id, Order.status.in_(ACTIVE_ORDER_STATUSES))
        )
        if exclude_order_id is not None:
            query = query.where(Order.id != exclude_order_id)
        return self._db.scalar(query) or 0

    def find_by_date_range(self, start: datetime, end: datetime) -> Sequence[Order]:
        """Orders created in [start, end), unpaginated, for reports."""
        query = (
            select(Order)
            .where(Order.created_at >= start, Order.created_at < end)
            .order_by(Order.created_at)
        )
        return self._db.execute(query).scalars().unique().all()

    def item_order_frequency(self, start: datetime, end: datetime) -> list[ItemFrequencyRow]:
        """
        How often each menu item was ordered in [start, end), most frequent
        first. Lines of cancelled orders are not counted.
        """
        query = (
            select(
                OrderItem.menu_item_id,
                MenuItem.name,
                func.count(OrderItem.id).label("line_count"),
                func.coalesce(func.sum(OrderItem.quantity), 0).label("quantity"),
            )
            .join(Order, Order.id == OrderItem.order_id)
            .join(MenuItem, MenuItem.id == OrderItem.menu_item_id)
            .where(
                Order.created_at >= start,
                Order.created_at < end,
                Order.status != OrderStatus.CANCELLED,
            )
            .group_by(OrderItem.menu_item_id, MenuItem.name)
            .order_by(func.count(OrderItem.id).desc(), MenuItem.name)
        )
        return [
            ItemFrequencyRow(row.menu_item_id, row.name, int(row.line_count), int(row.quantity))
            for row in self._db.execute(query)
        ]

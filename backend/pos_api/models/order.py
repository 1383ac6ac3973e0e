"""
Order Models: Order, OrderItem.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pos_shared.config.constants import ACTIVE_ORDER_STATUSES, OrderItemStatus, OrderStatus

from .base import Base, TimestampMixin, enum_column, new_id

if TYPE_CHECKING:
    from .billing import Payment
    from .table import Table

_ACTIVE_STATUS_SQL = ", ".join(f"'{s.value}'" for s in sorted(ACTIVE_ORDER_STATUSES, key=lambda s: s.value))
ACTIVE_ORDER_PREDICATE = text(f"status IN ({_ACTIVE_STATUS_SQL})")


class Order(TimestampMixin, Base):
    """
    An order placed for a table.

    A table has at most one active order (not paid, not cancelled); the
    partial unique index below enforces it at the storage level.
    """

    __tablename__ = "pos_order"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    table_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("restaurant_table.id"), nullable=False, index=True
    )
    waiter_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("app_user.id"), nullable=True, index=True
    )
    status: Mapped[OrderStatus] = mapped_column(
        enum_column(OrderStatus), nullable=False, default=OrderStatus.NEW, index=True
    )

    # Items are part of the order: loaded with it, ordered, deleted with it
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        order_by="OrderItem.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    table: Mapped["Table"] = relationship(back_populates="orders")
    payment: Mapped[Optional["Payment"]] = relationship(back_populates="order", uselist=False)

    __table_args__ = (
        Index(
            "uq_order_one_active_per_table",
            "table_id",
            unique=True,
            postgresql_where=ACTIVE_ORDER_PREDICATE,
            sqlite_where=ACTIVE_ORDER_PREDICATE,
        ),
        Index("ix_order_table_status", "table_id", "status"),
    )

    @property
    def total_cents(self) -> int:
        return sum(item.price_cents * item.quantity for item in self.items)

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, table_id={self.table_id}, status='{self.status.value}')>"


class OrderItem(Base):
    """
    One line of an order. name and price_cents are copied from the menu item
    when the line is added, so later menu edits do not rewrite history.
    """

    __tablename__ = "pos_order_item"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    order_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("pos_order.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    menu_item_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("menu_item.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[OrderItemStatus] = mapped_column(
        enum_column(OrderItemStatus), nullable=False, default=OrderItemStatus.NEW
    )

    order: Mapped["Order"] = relationship(back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_order_item_quantity_positive"),
        CheckConstraint("price_cents >= 0", name="chk_order_item_price_non_negative"),
        Index("uq_order_item_position", "order_id", "position", unique=True),
    )

    def __repr__(self) -> str:
        return f"<OrderItem(id={self.id}, order_id={self.order_id}, name='{self.name}', qty={self.quantity})>"

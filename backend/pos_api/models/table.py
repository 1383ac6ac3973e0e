"""
Restaurant table model.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pos_shared.config.constants import TableStatus

from .base import AuditMixin, Base, enum_column, new_id

if TYPE_CHECKING:
    from .order import Order
    from .user import User


class Table(AuditMixin, Base):
    """
    Physical table in the restaurant.

    occupied implies waiter_id is set; available implies waiter, guest count
    and reservation fields are all empty. TableService keeps both true.
    """

    # "table" is a reserved SQL keyword
    __tablename__ = "restaurant_table"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    number: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    floor: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[TableStatus] = mapped_column(
        enum_column(TableStatus), nullable=False, default=TableStatus.AVAILABLE, index=True
    )
    waiter_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("app_user.id"), nullable=True, index=True
    )
    guest_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    reservation_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reservation_phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reservation_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_table_floor_status", "floor", "status"),
    )

    waiter: Mapped[Optional["User"]] = relationship()
    orders: Mapped[list["Order"]] = relationship(back_populates="table")

    def __repr__(self) -> str:
        return f"<Table(id={self.id}, number={self.number}, status='{self.status.value}')>"

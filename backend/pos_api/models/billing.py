"""
Payment model.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pos_shared.config.constants import PaymentMethod

from .base import Base, TimestampMixin, enum_column, new_id, utcnow

if TYPE_CHECKING:
    from .order import Order


class Payment(TimestampMixin, Base):
    """
    Settlement of a whole order. One payment per order (unique order_id);
    split bills are not modeled.
    """

    __tablename__ = "payment"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    order_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("pos_order.id"), nullable=False, unique=True
    )
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    tip_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        enum_column(PaymentMethod), nullable=False, index=True
    )
    payment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    recorded_by_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("app_user.id"), nullable=True
    )

    order: Mapped["Order"] = relationship(back_populates="payment")

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="chk_payment_amount_positive"),
        CheckConstraint("tip_cents >= 0", name="chk_payment_tip_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Payment(id={self.id}, order_id={self.order_id}, amount_cents={self.amount_cents})>"

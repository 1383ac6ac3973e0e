"""
Menu catalog model.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pos_shared.config.constants import MenuCategory

from .base import AuditMixin, Base, enum_column, new_id


class MenuItem(AuditMixin, Base):
    """
    A dish or drink that can be ordered.
    Deleting is a soft delete so past order lines keep their reference.
    """

    __tablename__ = "menu_item"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[MenuCategory] = mapped_column(enum_column(MenuCategory), nullable=False, index=True)
    available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_special: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<MenuItem(id={self.id}, name='{self.name}', price_cents={self.price_cents})>"

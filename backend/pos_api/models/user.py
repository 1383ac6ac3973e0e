"""
Staff account model.
"""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pos_shared.config.constants import Role

from .base import AuditMixin, Base, enum_column, new_id


class User(AuditMixin, Base):
    """
    A staff member (host, waiter, chef, manager, owner, admin).
    Deactivation is a soft delete through is_active; rows are never removed.
    """

    __tablename__ = "app_user"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password: Mapped[str] = mapped_column(Text, nullable=False)  # bcrypt digest
    role: Mapped[Role] = mapped_column(enum_column(Role), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"

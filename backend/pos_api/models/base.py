"""
Base class and mixins for all SQLAlchemy ORM models.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def new_id() -> str:
    """Opaque primary key for every entity."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def enum_column(enum_cls: type[Enum]) -> SAEnum:
    """
    Store a str Enum by value ("occupied", not "OCCUPIED") in a VARCHAR, so
    adding a member never needs an ALTER TYPE.
    """
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=32,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class TimestampMixin:
    """created_at / updated_at, set from the application clock."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=utcnow, nullable=True
    )


class AuditMixin(TimestampMixin):
    """
    Mixin providing soft delete and audit trail fields.

    Fields added:
    - is_active: Soft delete flag (False = deleted/deactivated)
    - deleted_at: When the entity was soft-deleted
    - created_by_id, updated_by_id, deleted_by_id: Acting staff member

    Methods:
    - soft_delete(user_id): Mark entity as deleted
    - restore(user_id): Restore a soft-deleted entity
    """

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # No FK to app_user: it would make app_user reference itself through the mixin
    created_by_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    updated_by_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    deleted_by_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    def soft_delete(self, user_id: str | None) -> None:
        self.is_active = False
        self.deleted_at = utcnow()
        self.deleted_by_id = user_id

    def restore(self, user_id: str | None) -> None:
        self.is_active = True
        self.deleted_at = None
        self.deleted_by_id = None
        self.set_updated_by(user_id)

    def set_created_by(self, user_id: str | None) -> None:
        self.created_by_id = user_id

    def set_updated_by(self, user_id: str | None) -> None:
        self.updated_by_id = user_id
        self.updated_at = utcnow()

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        id_val = getattr(self, "id", None)
        active = "active" if self.is_active else "deleted"
        return f"<{class_name}(id={id_val}, {active})>"

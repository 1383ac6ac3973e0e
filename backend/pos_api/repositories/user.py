"""
User Repository - staff accounts.
"""

from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import Select, func, select

from pos_api.models import User
from pos_shared.config.constants import Role

from .base import BaseRepository, RepositoryFilters


@dataclass
class UserFilters(RepositoryFilters):
    role: Role | None = None
    exclude_role: Role | None = None


class UserRepository(BaseRepository[User]):
    """
    Inactive (deactivated) accounts are still returned by the staff queries;
    is_active is the account status here, not a hidden soft delete.
    """

    @property
    def model(self) -> type[User]:
        return User

    def _base_query(self) -> Select:
        return select(User).order_by(User.name, User.id)

    def _apply_common_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if filters.created_from is not None:
            query = query.where(User.created_at >= filters.created_from)
        if filters.created_to is not None:
            query = query.where(User.created_at < filters.created_to)
        return query

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if not isinstance(filters, UserFilters):
            return query
        if filters.role is not None:
            query = query.where(User.role == filters.role)
        if filters.exclude_role is not None:
            query = query.where(User.role != filters.exclude_role)
        return query

    def find_by_id(self, entity_id: str, include_deleted: bool = True) -> User | None:
        return self._db.scalar(select(User).where(User.id == entity_id))

    def find_by_email(self, email: str) -> User | None:
        """Case-insensitive email lookup."""
        return self._db.scalar(select(User).where(func.lower(User.email) == email.strip().lower()))

    def find_by_role(self, role: Role) -> Sequence[User]:
        return self.find_all(UserFilters(role=role))

"""
Menu Item Repository - catalog records.
"""

from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import Select, select

from pos_api.models import MenuItem
from pos_shared.config.constants import MenuCategory

from .base import BaseRepository, RepositoryFilters


@dataclass
class MenuItemFilters(RepositoryFilters):
    category: MenuCategory | None = None
    available: bool | None = None


class MenuItemRepository(BaseRepository[MenuItem]):

    @property
    def model(self) -> type[MenuItem]:
        return MenuItem

    def _base_query(self) -> Select:
        return select(MenuItem).order_by(MenuItem.category, MenuItem.name)

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if not isinstance(filters, MenuItemFilters):
            return query
        if filters.category is not None:
            query = query.where(MenuItem.category == filters.category)
        if filters.available is not None:
            query = query.where(MenuItem.available.is_(filters.available))
        return query

    def find_by_category(self, category: MenuCategory) -> Sequence[MenuItem]:
        return self.find_all(MenuItemFilters(category=category))

"""
Table Repository - restaurant tables.
"""

from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import Select, select

from pos_api.models import Table
from pos_shared.config.constants import TableStatus

from .base import BaseRepository, RepositoryFilters


@dataclass
class TableFilters(RepositoryFilters):
    status: TableStatus | None = None
    floor: int | None = None
    waiter_id: str | None = None


class TableRepository(BaseRepository[Table]):

    @property
    def model(self) -> type[Table]:
        return Table

    def _base_query(self) -> Select:
        return select(Table).order_by(Table.floor, Table.number)

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if not isinstance(filters, TableFilters):
            return query
        if filters.status is not None:
            query = query.where(Table.status == filters.status)
        if filters.floor is not None:
            query = query.where(Table.floor == filters.floor)
        if filters.waiter_id is not None:
            query = query.where(Table.waiter_id == filters.waiter_id)
        return query

    def find_by_number(self, number: int) -> Table | None:
        return self._db.scalar(select(Table).where(Table.number == number))

    def find_by_status(self, status: TableStatus) -> Sequence[Table]:
        return self.find_all(TableFilters(status=status))

    def find_by_waiter(self, waiter_id: str) -> Sequence[Table]:
        return self.find_all(TableFilters(waiter_id=waiter_id))

"""
Base Repository implementation.
Provides common data access patterns; subclasses add entity filters.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Generic, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from pos_shared.config.constants import Limits

ModelT = TypeVar("ModelT")


@dataclass
class RepositoryFilters:
    """Base filters for repository queries."""

    # Pagination
    limit: int = Limits.DEFAULT_PAGE_SIZE
    offset: int = 0

    # Soft delete
    include_deleted: bool = False

    # Creation window [created_from, created_to)
    created_from: datetime | None = None
    created_to: datetime | None = None

    def __post_init__(self):
        self.limit = min(max(1, self.limit), Limits.MAX_PAGE_SIZE)
        self.offset = max(0, self.offset)


class BaseRepository(ABC, Generic[ModelT]):
    """
    Abstract base repository with common operations.

    Subclasses must implement:
    - model: the SQLAlchemy model class
    - _base_query(): base query with eager loading and default ordering
    - _apply_filters(): entity-specific filters
    """

    def __init__(self, db: Session):
        self._db = db

    @property
    @abstractmethod
    def model(self) -> type[ModelT]:
        ...

    @abstractmethod
    def _base_query(self) -> Select:
        ...

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        return query

    def _apply_common_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if not filters.include_deleted and hasattr(self.model, "is_active"):
            query = query.where(self.model.is_active.is_(True))
        if filters.created_from is not None:
            query = query.where(self.model.created_at >= filters.created_from)
        if filters.created_to is not None:
            query = query.where(self.model.created_at < filters.created_to)
        return query

    def find_all(self, filters: RepositoryFilters | None = None) -> Sequence[ModelT]:
        """Find all entities matching filters, paginated."""
        filters = filters or RepositoryFilters()
        query = self._apply_common_filters(self._base_query(), filters)
        query = self._apply_filters(query, filters)
        query = query.offset(filters.offset).limit(filters.limit)
        return self._db.execute(query).scalars().unique().all()

    def find_by_id(self, entity_id: str, include_deleted: bool = False) -> ModelT | None:
        query = self._base_query().where(self.model.id == entity_id)
        if not include_deleted and hasattr(self.model, "is_active"):
            query = query.where(self.model.is_active.is_(True))
        return self._db.scalar(query)

    def find_by_id_for_update(self, entity_id: str) -> ModelT | None:
        """
        Find entity by ID and lock its row until the transaction ends.
        SQLite ignores FOR UPDATE; the in-process keyed lock covers it there.
        """
        query = (
            select(self.model)
            .where(self.model.id == entity_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self._db.scalar(query)

    def count(self, filters: RepositoryFilters | None = None) -> int:
        filters = filters or RepositoryFilters()
        query = select(func.count()).select_from(self.model)
        query = self._apply_common_filters(query, filters)
        query = self._apply_filters(query, filters)
        return self._db.scalar(query) or 0

    def exists(self, entity_id: str) -> bool:
        query = select(func.count()).select_from(self.model).where(self.model.id == entity_id)
        return (self._db.scalar(query) or 0) > 0

    def add(self, entity: ModelT) -> ModelT:
        """Add entity to session and flush so defaults (id) are populated."""
        self._db.add(entity)
        self._db.flush()
        return entity

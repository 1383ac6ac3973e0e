"""
Base Service Classes.

Services hold the business rules and orchestrate repositories:

    Router (thin) -> Service (business logic) -> Repository (data access) -> Model

Usage:
    class MenuService(BaseCRUDService[MenuItem, MenuItemOutput]):
        def __init__(self, db: Session):
            super().__init__(
                db=db,
                repo=MenuItemRepository(db),
                output_schema=MenuItemOutput,
                entity_name="Menu item",
            )
"""

from __future__ import annotations

from abc import ABC
from typing import Any, Generic, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import Session

from pos_api.models import Base
from pos_api.repositories import BaseRepository, RepositoryFilters
from pos_shared.config.logging import get_logger
from pos_shared.infrastructure.db import safe_commit
from pos_shared.utils.exceptions import NotFoundError

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
OutputT = TypeVar("OutputT", bound=BaseModel)


class BaseService(ABC):
    """Common infrastructure for domain services (session, commit)."""

    def __init__(self, db: Session):
        self._db = db

    @property
    def db(self) -> Session:
        return self._db

    def _commit(self) -> None:
        safe_commit(self._db)


class BaseCRUDService(BaseService, Generic[ModelT, OutputT]):
    """
    Base service for entities with a straightforward read/write surface.

    Subclasses override the _validate_* hooks for business rules and
    to_output() when the DTO needs more than the columns.
    """

    def __init__(
        self,
        db: Session,
        repo: BaseRepository[ModelT],
        output_schema: Type[OutputT],
        entity_name: str,
    ):
        super().__init__(db)
        self._repo = repo
        self._output_schema = output_schema
        self._entity_name = entity_name

    @property
    def repo(self) -> BaseRepository[ModelT]:
        return self._repo

    @property
    def entity_name(self) -> str:
        """Human-readable entity name for messages."""
        return self._entity_name

    # =========================================================================
    # Read Operations
    # =========================================================================

    def get_entity(self, entity_id: str) -> ModelT:
        """Get raw entity or raise NotFoundError."""
        entity = self._repo.find_by_id(entity_id)
        if entity is None:
            raise NotFoundError(self._entity_name, entity_id)
        return entity

    def get_by_id(self, entity_id: str) -> OutputT:
        return self.to_output(self.get_entity(entity_id))

    def list_entities(self, filters: RepositoryFilters | None = None) -> list[OutputT]:
        return [self.to_output(e) for e in self._repo.find_all(filters)]

    # =========================================================================
    # Write Operations
    # =========================================================================

    def _apply_changes(self, entity: ModelT, data: dict[str, Any]) -> dict[str, Any]:
        """Set attributes and return the previous values of those that changed."""
        old_values: dict[str, Any] = {}
        for field_name, value in data.items():
            current = getattr(entity, field_name)
            if current != value:
                old_values[field_name] = current
                setattr(entity, field_name, value)
        return old_values

    # =========================================================================
    # Transformation
    # =========================================================================

    def to_output(self, entity: ModelT) -> OutputT:
        """Convert entity to output DTO."""
        return self._output_schema.model_validate(entity)

"""
Menu Service - catalog CRUD.
Reads need the `menu` permission; writes need manager tier or higher.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from pos_api.models import MenuItem
from pos_api.repositories import MenuItemFilters, MenuItemRepository
from pos_api.services.base_service import BaseCRUDService
from pos_api.services.permissions import PermissionContext
from pos_shared.config.constants import Limits, MenuCategory, Permission
from pos_shared.config.logging import get_logger
from pos_shared.utils.schemas import MenuItemCreate, MenuItemOutput, MenuItemUpdate

logger = get_logger(__name__)


class MenuService(BaseCRUDService[MenuItem, MenuItemOutput]):
    """Service for menu item management."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            repo=MenuItemRepository(db),
            output_schema=MenuItemOutput,
            entity_name="Menu item",
        )

    def list(
        self,
        ctx: PermissionContext,
        *,
        category: MenuCategory | None = None,
        available: bool | None = None,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[MenuItemOutput]:
        ctx.require_permission(Permission.MENU, "view the menu")
        return self.list_entities(
            MenuItemFilters(category=category, available=available, limit=limit, offset=offset)
        )

    def get(self, ctx: PermissionContext, item_id: str) -> MenuItemOutput:
        ctx.require_permission(Permission.MENU, "view the menu")
        return self.get_by_id(item_id)

    def create(self, ctx: PermissionContext, data: MenuItemCreate) -> MenuItemOutput:
        ctx.require_menu_write("create menu items")

        item = MenuItem(**data.model_dump())
        item.set_created_by(ctx.user_id)
        self.repo.add(item)
        self._commit()

        logger.info("Menu item created", menu_item_id=item.id, name=item.name, user_id=ctx.user_id)
        return self.to_output(item)

    def update(self, ctx: PermissionContext, item_id: str, data: MenuItemUpdate) -> MenuItemOutput:
        ctx.require_menu_write("update menu items")

        item = self.get_entity(item_id)
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        old_values = self._apply_changes(item, changes)
        if old_values:
            item.set_updated_by(ctx.user_id)
            self._commit()
            logger.info(
                "Menu item updated",
                menu_item_id=item.id,
                fields=sorted(old_values),
                user_id=ctx.user_id,
            )
        return self.to_output(item)

    def delete(self, ctx: PermissionContext, item_id: str) -> None:
        """Soft delete. Order lines that reference the item keep working."""
        ctx.require_menu_write("delete menu items")

        item = self.get_entity(item_id)
        item.soft_delete(ctx.user_id)
        self._commit()

        logger.info("Menu item deleted", menu_item_id=item.id, name=item.name, user_id=ctx.user_id)

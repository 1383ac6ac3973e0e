"""
Menu endpoints. Thin router over MenuService.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from pos_api.routers._common import Pagination, get_pagination, get_permission_context
from pos_api.services.domain import MenuService
from pos_api.services.permissions import PermissionContext
from pos_shared.config.constants import MenuCategory
from pos_shared.infrastructure.db import get_db
from pos_shared.utils.schemas import MenuItemCreate, MenuItemOutput, MenuItemUpdate

router = APIRouter(prefix="/api/menu", tags=["menu"])


def _get_service(db: Session) -> MenuService:
    return MenuService(db)


@router.get("", response_model=list[MenuItemOutput])
def list_menu_items(
    category: MenuCategory | None = None,
    available: bool | None = None,
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> list[MenuItemOutput]:
    return _get_service(db).list(
        ctx,
        category=category,
        available=available,
        limit=pagination.limit,
        offset=pagination.offset,
    )


@router.post("", response_model=MenuItemOutput, status_code=status.HTTP_201_CREATED)
def create_menu_item(
    body: MenuItemCreate,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> MenuItemOutput:
    return _get_service(db).create(ctx, body)


@router.get("/{item_id}", response_model=MenuItemOutput)
def get_menu_item(
    item_id: str,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> MenuItemOutput:
    return _get_service(db).get(ctx, item_id)


@router.patch("/{item_id}", response_model=MenuItemOutput)
def update_menu_item(
    item_id: str,
    body: MenuItemUpdate,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> MenuItemOutput:
    return _get_service(db).update(ctx, item_id, body)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu_item(
    item_id: str,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> None:
    """Soft delete: the item disappears from the menu, past orders keep it."""
    _get_service(db).delete(ctx, item_id)

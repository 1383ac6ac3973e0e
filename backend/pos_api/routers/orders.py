"""
Order endpoints. Thin router over OrderService.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from pos_api.routers._common import Pagination, get_pagination, get_permission_context
from pos_api.services.domain import OrderService
from pos_api.services.permissions import PermissionContext
from pos_shared.config.constants import OrderStatus
from pos_shared.infrastructure.db import get_db
from pos_shared.utils.schemas import (
    OrderCreate,
    OrderItemInput,
    OrderItemUpdate,
    OrderOutput,
    OrderStatusUpdate,
)

router = APIRouter(prefix="/api/orders", tags=["orders"])


def _get_service(db: Session) -> OrderService:
    return OrderService(db)


@router.get("", response_model=list[OrderOutput])
def list_orders(
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
    table_id: str | None = None,
    waiter_id: str | None = None,
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> list[OrderOutput]:
    return _get_service(db).list(
        ctx,
        status=status_filter,
        table_id=table_id,
        waiter_id=waiter_id,
        limit=pagination.limit,
        offset=pagination.offset,
    )


@router.post("", response_model=OrderOutput, status_code=status.HTTP_201_CREATED)
def create_order(
    body: OrderCreate,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> OrderOutput:
    """
    Submit items for an occupied table. When the table already has an
    active order the items are appended to it and that order is returned.
    """
    return _get_service(db).create(ctx, body)


@router.get("/{order_id}", response_model=OrderOutput)
def get_order(
    order_id: str,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> OrderOutput:
    return _get_service(db).get(ctx, order_id)


@router.patch("/{order_id}/status", response_model=OrderOutput)
def update_order_status(
    order_id: str,
    body: OrderStatusUpdate,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> OrderOutput:
    return _get_service(db).advance_status(ctx, order_id, body.status)


@router.post("/{order_id}/cancel", response_model=OrderOutput)
def cancel_order(
    order_id: str,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> OrderOutput:
    return _get_service(db).cancel(ctx, order_id)


@router.post("/{order_id}/items", response_model=OrderOutput, status_code=status.HTTP_201_CREATED)
def add_order_item(
    order_id: str,
    body: OrderItemInput,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> OrderOutput:
    return _get_service(db).add_item(ctx, order_id, body)


@router.patch("/{order_id}/items/{item_id}", response_model=OrderOutput)
def update_order_item(
    order_id: str,
    item_id: str,
    body: OrderItemUpdate,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> OrderOutput:
    return _get_service(db).update_item(ctx, order_id, item_id, body)

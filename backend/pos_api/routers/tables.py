"""
Table endpoints. Thin router over TableService.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from pos_api.routers._common import Pagination, get_pagination, get_permission_context
from pos_api.services.domain import TableService
from pos_api.services.permissions import PermissionContext
from pos_shared.config.constants import TableStatus
from pos_shared.infrastructure.db import get_db
from pos_shared.utils.schemas import AssignWaiterRequest, TableCreate, TableOutput, TableUpdate

router = APIRouter(prefix="/api/tables", tags=["tables"])


def _get_service(db: Session) -> TableService:
    return TableService(db)


@router.get("", response_model=list[TableOutput])
def list_tables(
    status_filter: TableStatus | None = Query(default=None, alias="status"),
    floor: int | None = None,
    waiter_id: str | None = None,
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> list[TableOutput]:
    """List tables, optionally filtered by status, floor or waiter."""
    return _get_service(db).list(
        ctx,
        status=status_filter,
        floor=floor,
        waiter_id=waiter_id,
        limit=pagination.limit,
        offset=pagination.offset,
    )


@router.post("", response_model=TableOutput, status_code=status.HTTP_201_CREATED)
def create_table(
    body: TableCreate,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> TableOutput:
    return _get_service(db).create(ctx, body)


@router.get("/{table_id}", response_model=TableOutput)
def get_table(
    table_id: str,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> TableOutput:
    return _get_service(db).get(ctx, table_id)


@router.patch("/{table_id}", response_model=TableOutput)
def update_table(
    table_id: str,
    body: TableUpdate,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> TableOutput:
    """
    Partial update. Only the fields present in the body are applied;
    setting status to available clears the server, guests and reservation.
    """
    return _get_service(db).update_status(ctx, table_id, body.model_dump(exclude_unset=True))


@router.post("/{table_id}/assign", response_model=TableOutput)
def assign_waiter(
    table_id: str,
    body: AssignWaiterRequest,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> TableOutput:
    return _get_service(db).assign_waiter(ctx, table_id, body.waiter_id)

"""
Staff management endpoints. Thin router over StaffService.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from pos_api.routers._common import Pagination, get_pagination, get_permission_context
from pos_api.services.domain import StaffService
from pos_api.services.permissions import PermissionContext
from pos_shared.config.constants import Role
from pos_shared.infrastructure.db import get_db
from pos_shared.utils.schemas import StaffCreate, StaffOutput, StaffUpdate

router = APIRouter(prefix="/api/staff", tags=["staff"])


def _get_service(db: Session) -> StaffService:
    return StaffService(db)


@router.get("", response_model=list[StaffOutput])
def list_staff(
    role: Role | None = None,
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> list[StaffOutput]:
    """
    List staff members. Admin accounts are left out unless an admin asks
    for them; ?role=waiter is open to every signed-in staff member.
    """
    return _get_service(db).list(ctx, role=role, limit=pagination.limit, offset=pagination.offset)


@router.post("", response_model=StaffOutput, status_code=status.HTTP_201_CREATED)
def create_staff(
    body: StaffCreate,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> StaffOutput:
    return _get_service(db).create(ctx, body)


@router.get("/{staff_id}", response_model=StaffOutput)
def get_staff(
    staff_id: str,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> StaffOutput:
    return _get_service(db).get(ctx, staff_id)


@router.patch("/{staff_id}", response_model=StaffOutput)
def update_staff(
    staff_id: str,
    body: StaffUpdate,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> StaffOutput:
    return _get_service(db).update(ctx, staff_id, body)


@router.delete("/{staff_id}", response_model=StaffOutput)
def deactivate_staff(
    staff_id: str,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> StaffOutput:
    """Deactivate (soft delete) a staff member. The record is kept."""
    return _get_service(db).deactivate(ctx, staff_id)

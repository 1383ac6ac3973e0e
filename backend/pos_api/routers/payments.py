"""
Payment endpoints. Recording a payment settles the order and may free the table.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from pos_api.routers._common import Pagination, get_pagination, get_permission_context
from pos_api.services.domain import PaymentService
from pos_api.services.permissions import PermissionContext
from pos_shared.infrastructure.db import get_db
from pos_shared.utils.schemas import PaymentCreate, PaymentOutput

router = APIRouter(prefix="/api/payments", tags=["payments"])


def _get_service(db: Session) -> PaymentService:
    return PaymentService(db)


@router.get("", response_model=list[PaymentOutput])
def list_payments(
    order_id: str | None = None,
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> list[PaymentOutput]:
    return _get_service(db).list(ctx, order_id=order_id, limit=pagination.limit, offset=pagination.offset)


@router.post("", response_model=PaymentOutput, status_code=status.HTTP_201_CREATED)
def settle_payment(
    body: PaymentCreate,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> PaymentOutput:
    """
    Settle an order. Waiters accept cash only; managers and above accept
    any method.
    """
    return _get_service(db).settle(ctx, body)


@router.get("/{payment_id}", response_model=PaymentOutput)
def get_payment(
    payment_id: str,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> PaymentOutput:
    return _get_service(db).get(ctx, payment_id)

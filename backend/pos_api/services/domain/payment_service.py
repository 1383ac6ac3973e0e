"""
Payment Service - settlement of an order and the cascade it owns.

settle() records the payment, marks the order paid and, when nothing else
on the table is still unsettled, releases the table. The three steps share
one transaction under the table's keyed lock with the table and order rows
locked for update, so no other settlement or order mutation on the same
table can interleave.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pos_api.models import Payment
from pos_api.repositories import OrderRepository, PaymentFilters, PaymentRepository, TableRepository
from pos_api.services.base_service import BaseCRUDService
from pos_api.services.permissions import PermissionContext
from pos_shared.config.constants import Limits, OrderStatus, Permission
from pos_shared.config.logging import get_logger
from pos_shared.infrastructure.locks import table_locks
from pos_shared.utils.exceptions import (
    AlreadyPaidError,
    InvalidTransitionError,
    NotFoundError,
    PaymentAmountError,
)
from pos_shared.utils.schemas import PaymentCreate, PaymentOutput

from .table_service import TableService

logger = get_logger(__name__)


class PaymentService(BaseCRUDService[Payment, PaymentOutput]):
    """Service for payments."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            repo=PaymentRepository(db),
            output_schema=PaymentOutput,
            entity_name="Payment",
        )
        self._orders = OrderRepository(db)
        self._tables = TableRepository(db)
        self._table_service = TableService(db)

    def get(self, ctx: PermissionContext, payment_id: str) -> PaymentOutput:
        ctx.require_permission(Permission.PAYMENTS, "view payments")
        return self.get_by_id(payment_id)

    def list(
        self,
        ctx: PermissionContext,
        *,
        order_id: str | None = None,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[PaymentOutput]:
        ctx.require_permission(Permission.PAYMENTS, "view payments")
        return self.list_entities(PaymentFilters(order_id=order_id, limit=limit, offset=offset))

    def settle(self, ctx: PermissionContext, data: PaymentCreate) -> PaymentOutput:
        """
        Settle an order with a single payment.

        Raises:
            AuthorizationError: caller may not settle, or not with this method
            PaymentAmountError: amount not positive or tip negative
            NotFoundError: order does not exist
            AlreadyPaidError: order was settled before
            InvalidTransitionError: order was cancelled
        """
        ctx.require_payment_method(data.payment_method)

        if data.amount_cents <= 0:
            raise PaymentAmountError(data.amount_cents, "must be greater than zero")
        if data.tip_cents < 0:
            raise PaymentAmountError(data.tip_cents, "tip cannot be negative")

        order = self._orders.find_by_id(data.order_id)
        if order is None:
            raise NotFoundError("Order", data.order_id)

        with table_locks.hold(order.table_id):
            table = self._tables.find_by_id_for_update(order.table_id)
            order = self._orders.find_by_id_for_update(data.order_id)

            if order.status is OrderStatus.PAID:
                raise AlreadyPaidError(order.id)
            if order.status is OrderStatus.CANCELLED:
                raise InvalidTransitionError(
                    "Order", order.status.value, OrderStatus.PAID.value, order_id=order.id
                )

            payment = Payment(
                order_id=order.id,
                amount_cents=data.amount_cents,
                tip_cents=data.tip_cents,
                payment_method=data.payment_method,
                recorded_by_id=ctx.user_id,
            )
            order.status = OrderStatus.PAID

            released = self._orders.count_unsettled_for_table(table.id, exclude_order_id=order.id) == 0
            if released:
                self._table_service.release(table, ctx.user_id)

            try:
                self.repo.add(payment)
                self._commit()
            except IntegrityError:
                self.db.rollback()
                raise AlreadyPaidError(order.id)

        logger.info(
            "Payment recorded",
            payment_id=payment.id,
            order_id=order.id,
            table_id=table.id,
            amount_cents=payment.amount_cents,
            tip_cents=payment.tip_cents,
            payment_method=payment.payment_method.value,
            table_released=released,
            user_id=ctx.user_id,
        )
        return self.to_output(payment)

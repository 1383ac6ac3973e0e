"""
Order Service - order lifecycle for a table.

A table has at most one active order. Submitting items for a table that
already has one appends to it; the read-then-create decision runs under
the table's keyed lock with the table row locked for update, and the
partial unique index on pos_order backs it at the storage level.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pos_api.models import MenuItem, Order, OrderItem, Table
from pos_api.repositories import (
    MenuItemRepository,
    OrderFilters,
    OrderRepository,
    TableRepository,
    UserRepository,
)
from pos_api.services.base_service import BaseCRUDService
from pos_api.services.permissions import PermissionContext
from pos_shared.config.constants import (
    ORDER_TRANSITIONS,
    Limits,
    OrderItemStatus,
    OrderStatus,
    Permission,
    TableStatus,
)
from pos_shared.config.logging import get_logger
from pos_shared.infrastructure.locks import table_locks
from pos_shared.utils.exceptions import (
    AlreadyPaidError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    TableNotOccupiedError,
)
from pos_shared.utils.schemas import OrderCreate, OrderItemInput, OrderItemUpdate, OrderOutput

logger = get_logger(__name__)


class OrderService(BaseCRUDService[Order, OrderOutput]):
    """Service for orders and their item sequence."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            repo=OrderRepository(db),
            output_schema=OrderOutput,
            entity_name="Order",
        )
        self._orders = OrderRepository(db)
        self._tables = TableRepository(db)
        self._menu = MenuItemRepository(db)
        self._users = UserRepository(db)

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, ctx: PermissionContext, order_id: str) -> OrderOutput:
        ctx.require_permission(Permission.ORDERS, "view orders")
        return self.get_by_id(order_id)

    def list(
        self,
        ctx: PermissionContext,
        *,
        status: OrderStatus | None = None,
        table_id: str | None = None,
        waiter_id: str | None = None,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[OrderOutput]:
        ctx.require_permission(Permission.ORDERS, "view orders")
        return self.list_entities(OrderFilters(
                status=status, table_id=table_id, waiter_id=waiter_id, limit=limit, offset=offset
            ))

    # =========================================================================
    # Create / append
    # =========================================================================

    def create(self, ctx: PermissionContext, data: OrderCreate) -> OrderOutput:
        """
        Submit items for an occupied table.

        Reuses the table's active order when there is one, otherwise opens a
        new order whose waiter defaults to the table's server. Items are
        appended in the same transaction.
        """
        ctx.require_permission(Permission.ORDERS, "create orders")

        # Resolve menu items before touching the order so nothing is flushed
        # for a submission that is going to be rejected.
        resolved = [(self._get_orderable_menu_item(item.menu_item_id), item) for item in data.items]

        with table_locks.hold(data.table_id):
            table = self._tables.find_by_id_for_update(data.table_id)
            if table is None:
                raise NotFoundError("Table", data.table_id)
            if table.status is not TableStatus.OCCUPIED:
                raise TableNotOccupiedError(table.number, table_id=table.id)

            try:
                order = self._orders.find_active_for_table(table.id)
                created = order is None
                if created:
                    order = self._open_order(table, data.waiter_id)
                for menu_item, item_data in resolved:
                    self._append_item(order, menu_item, item_data)
                self._commit()
            except IntegrityError:
                self.db.rollback()
                # Another process opened the table's order first; join it
                order = self._append_to_active_order(data.table_id, resolved)
                created = False

        logger.info(
            "Order created" if created else "Items appended to active order",
            order_id=order.id,
            table_id=order.table_id,
            waiter_id=order.waiter_id,
            item_count=len(resolved),
            user_id=ctx.user_id,
        )
        return self.to_output(order)

    def add_item(self, ctx: PermissionContext, order_id: str, data: OrderItemInput) -> OrderOutput:
        ctx.require_permission(Permission.ORDERS, "add items to orders")

        order = self.get_entity(order_id)
        menu_item = self._get_orderable_menu_item(data.menu_item_id)

        with table_locks.hold(order.table_id):
            order = self._orders.find_by_id_for_update(order_id)
            self._require_modifiable(order)
            item = self._append_item(order, menu_item, data)
            self._commit()

        logger.info(
            "Order item added",
            order_id=order.id,
            order_item_id=item.id,
            menu_item_id=item.menu_item_id,
            quantity=item.quantity,
            user_id=ctx.user_id,
        )
        return self.to_output(order)

    def update_item(
        self,
        ctx: PermissionContext,
        order_id: str,
        item_id: str,
        data: OrderItemUpdate,
    ) -> OrderOutput:
        """Replace fields of one line in place. Paid orders are immutable."""
        ctx.require_permission(Permission.ORDERS, "update order items")
        if data.status is not None:
            ctx.require_order_status(data.status)

        order = self.get_entity(order_id)

        with table_locks.hold(order.table_id):
            order = self._orders.find_by_id_for_update(order_id)
            self._require_modifiable(order)

            item = next((i for i in order.items if i.id == item_id), None)
            if item is None:
                raise NotFoundError("Order item", item_id)

            changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
            old_values = self._apply_changes(item, changes)
            if old_values:
                self._commit()

        if old_values:
            logger.info(
                "Order item updated",
                order_id=order.id,
                order_item_id=item.id,
                fields=sorted(old_values),
                user_id=ctx.user_id,
            )
        return self.to_output(order)

    # =========================================================================
    # Status
    # =========================================================================

    def advance_status(self, ctx: PermissionContext, order_id: str, status: OrderStatus) -> OrderOutput:
        """
        Move an order forward along new -> in_progress -> done -> delivered,
        or cancel it. Paid is reached only through settlement. Moving to the
        current status is a no-op.
        """
        ctx.require_order_status(status)

        order = self.get_entity(order_id)

        with table_locks.hold(order.table_id):
            order = self._orders.find_by_id_for_update(order_id)
            current = order.status

            if current is OrderStatus.PAID:
                raise AlreadyPaidError(order.id)
            if status is current:
                return self.to_output(order)
            if status not in ORDER_TRANSITIONS[current]:
                raise InvalidTransitionError("Order", current.value, status.value, order_id=order.id)

            order.status = status
            self._commit()

        logger.info(
            "Order status changed",
            order_id=order.id,
            table_id=order.table_id,
            from_status=current.value,
            to_status=status.value,
            user_id=ctx.user_id,
        )
        return self.to_output(order)

    def cancel(self, ctx: PermissionContext, order_id: str) -> OrderOutput:
        """Cancel an active order. The table keeps its occupancy."""
        return self.advance_status(ctx, order_id, OrderStatus.CANCELLED)

    # =========================================================================
    # Internal
    # =========================================================================

    def _open_order(self, table: Table, waiter_id: str | None) -> Order:
        if waiter_id is not None and self._users.find_by_id(waiter_id) is None:
            raise NotFoundError("Waiter", waiter_id)

        order = Order(
            table_id=table.id,
            waiter_id=waiter_id or table.waiter_id,
            status=OrderStatus.NEW,
        )
        self._orders.add(order)
        return order

    def _append_to_active_order(
        self,
        table_id: str,
        resolved: list[tuple[MenuItem, OrderItemInput]],
    ) -> Order:
        order = self._orders.find_active_for_table(table_id)
        if order is None:
            raise ConflictError("Table already has an active order", table_id=table_id)

        logger.warning("Lost order creation race, appending to active order", order_id=order.id, table_id=table_id)
        try:
            for menu_item, item_data in resolved:
                self._append_item(order, menu_item, item_data)
            self._commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Table already has an active order", table_id=table_id, order_id=order.id)
        return order

    def _get_orderable_menu_item(self, menu_item_id: str) -> MenuItem:
        menu_item = self._menu.find_by_id(menu_item_id)
        if menu_item is None:
            raise NotFoundError("Menu item", menu_item_id)
        if not menu_item.available:
            raise ConflictError(f"Menu item '{menu_item.name}' is not available", menu_item_id=menu_item_id)
        return menu_item

    def _require_modifiable(self, order: Order) -> None:
        if order.status is OrderStatus.PAID:
            raise AlreadyPaidError(order.id)
        if order.status is OrderStatus.CANCELLED:
            raise ConflictError("Cannot modify a cancelled order", order_id=order.id)

    def _append_item(self, order: Order, menu_item: MenuItem, data: OrderItemInput) -> OrderItem:
        """Append a line; name and price are copied from the menu unless overridden."""
        position = max((i.position for i in order.items), default=0) + 1
        item = OrderItem(
            position=position,
            menu_item_id=menu_item.id,
            name=menu_item.name,
            price_cents=data.price_cents if data.price_cents is not None else menu_item.price_cents,
            quantity=data.quantity,
            notes=data.notes,
            status=OrderItemStatus.NEW,
        )
        order.items.append(item)
        return item

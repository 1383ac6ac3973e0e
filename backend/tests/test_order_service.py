"""
Tests for OrderService: create/reuse of the active order, items, the
forward-only status flow and immutability after settlement.
"""

import pytest

from pos_api.models import Order
from pos_api.repositories import OrderRepository
from pos_api.services.domain import OrderService
from pos_shared.config.constants import OrderItemStatus, OrderStatus, Role
from pos_shared.utils.exceptions import (
    AlreadyPaidError,
    AuthorizationError,
    ConflictError,
    InsufficientRoleError,
    InvalidTransitionError,
    NotFoundError,
    TableNotOccupiedError,
)
from pos_shared.utils.schemas import OrderCreate, OrderItemInput, OrderItemUpdate
from tests.conftest import make_menu_item


def submit(db_session, ctx, table, *items, waiter_id=None):
    return OrderService(db_session).create(
        ctx,
        OrderCreate(table_id=table.id, waiter_id=waiter_id, items=list(items)),
    )


class TestCreateOrder:

    def test_new_order_on_occupied_table(self, db_session, contexts, menu, occupied_table):
        order = submit(
            db_session,
            contexts[Role.WAITER],
            occupied_table,
            OrderItemInput(menu_item_id=menu["burger"].id, quantity=2),
        )

        assert order.status is OrderStatus.NEW
        assert order.table_id == occupied_table.id
        assert order.waiter_id == occupied_table.waiter_id
        assert len(order.items) == 1
        item = order.items[0]
        assert item.name == "Burger"
        assert item.price_cents == 1250
        assert item.quantity == 2
        assert item.status is OrderItemStatus.NEW
        assert order.total_cents == 2500

    def test_table_not_occupied(self, db_session, contexts, menu, table):
        with pytest.raises(TableNotOccupiedError, match="not occupied"):
            submit(db_session, contexts[Role.WAITER], table, OrderItemInput(menu_item_id=menu["burger"].id))

    def test_missing_table(self, db_session, contexts):
        with pytest.raises(NotFoundError):
            OrderService(db_session).create(contexts[Role.WAITER], OrderCreate(table_id="missing"))

    def test_second_submission_reuses_active_order(self, db_session, contexts, menu, occupied_table):
        first = submit(db_session, contexts[Role.WAITER], occupied_table, OrderItemInput(menu_item_id=menu["burger"].id))
        second = submit(db_session, contexts[Role.WAITER], occupied_table, OrderItemInput(menu_item_id=menu["fries"].id))

        assert second.id == first.id
        assert [i.name for i in second.items] == ["Burger", "Fries"]
        assert db_session.query(Order).count() == 1

    def test_lost_creation_race_appends_to_winning_order(
        self, db_session, contexts, menu, occupied_table, monkeypatch
    ):
        winner = Order(table_id=occupied_table.id, waiter_id=occupied_table.waiter_id, status=OrderStatus.NEW)
        db_session.add(winner)
        db_session.commit()

        # The first lookup misses the order another process just opened
        original = OrderRepository.find_active_for_table
        calls = []

        def stale_then_fresh(self, table_id):
            calls.append(table_id)
            return None if len(calls) == 1 else original(self, table_id)

        monkeypatch.setattr(OrderRepository, "find_active_for_table", stale_then_fresh)

        order = submit(
            db_session,
            contexts[Role.WAITER],
            occupied_table,
            OrderItemInput(menu_item_id=menu["burger"].id),
            OrderItemInput(menu_item_id=menu["fries"].id),
        )

        assert order.id == winner.id
        assert [i.name for i in order.items] == ["Burger", "Fries"]
        assert db_session.query(Order).filter(Order.status == OrderStatus.NEW).count() == 1

    def test_new_order_after_previous_was_cancelled(self, db_session, contexts, menu, occupied_table):
        first = submit(db_session, contexts[Role.WAITER], occupied_table, OrderItemInput(menu_item_id=menu["burger"].id))
        OrderService(db_session).cancel(contexts[Role.WAITER], first.id)

        second = submit(db_session, contexts[Role.WAITER], occupied_table, OrderItemInput(menu_item_id=menu["soda"].id))

        assert second.id != first.id

    def test_without_items_opens_empty_order(self, db_session, contexts, occupied_table):
        order = submit(db_session, contexts[Role.WAITER], occupied_table)
        assert order.items == []
        assert order.total_cents == 0

    def test_explicit_waiter(self, db_session, contexts, staff, occupied_table):
        order = submit(db_session, contexts[Role.MANAGER], occupied_table, waiter_id=staff[Role.MANAGER].id)
        assert order.waiter_id == staff[Role.MANAGER].id

    def test_price_override(self, db_session, contexts, menu, occupied_table):
        order = submit(
            db_session,
            contexts[Role.WAITER],
            occupied_table,
            OrderItemInput(menu_item_id=menu["burger"].id, price_cents=1000),
        )
        assert order.items[0].price_cents == 1000

    def test_unknown_menu_item_creates_nothing(self, db_session, contexts, occupied_table):
        with pytest.raises(NotFoundError):
            submit(db_session, contexts[Role.WAITER], occupied_table, OrderItemInput(menu_item_id="missing"))
        assert db_session.query(Order).count() == 0

    def test_unavailable_menu_item(self, db_session, contexts, occupied_table):
        sold_out = make_menu_item(db_session, "Special", 2000, available=False)
        with pytest.raises(ConflictError):
            submit(db_session, contexts[Role.WAITER], occupied_table, OrderItemInput(menu_item_id=sold_out.id))

    def test_deleted_menu_item(self, db_session, contexts, menu, occupied_table):
        menu["soda"].soft_delete(None)
        db_session.commit()
        with pytest.raises(NotFoundError):
            submit(db_session, contexts[Role.WAITER], occupied_table, OrderItemInput(menu_item_id=menu["soda"].id))

    def test_host_cannot_create_orders(self, db_session, contexts, occupied_table):
        with pytest.raises(AuthorizationError):
            submit(db_session, contexts[Role.HOST], occupied_table)


class TestAddAndUpdateItems:

    def test_add_item(self, db_session, contexts, menu, occupied_table):
        order = submit(db_session, contexts[Role.WAITER], occupied_table)

        result = OrderService(db_session).add_item(
            contexts[Role.WAITER], order.id, OrderItemInput(menu_item_id=menu["fries"].id, quantity=3, notes="extra salt")
        )

        assert len(result.items) == 1
        assert result.items[0].quantity == 3
        assert result.items[0].notes == "extra salt"
        assert result.total_cents == 1350

    def test_add_item_to_paid_order(self, db_session, contexts, menu, occupied_table):
        order = submit(db_session, contexts[Role.WAITER], occupied_table)
        db_session.get(Order, order.id).status = OrderStatus.PAID
        db_session.commit()

        with pytest.raises(AlreadyPaidError):
            OrderService(db_session).add_item(
                contexts[Role.WAITER], order.id, OrderItemInput(menu_item_id=menu["fries"].id)
            )

    def test_add_item_to_missing_order(self, db_session, contexts, menu):
        with pytest.raises(NotFoundError):
            OrderService(db_session).add_item(
                contexts[Role.WAITER], "missing", OrderItemInput(menu_item_id=menu["fries"].id)
            )

    def test_update_item_in_place(self, db_session, contexts, menu, occupied_table):
        order = submit(db_session, contexts[Role.WAITER], occupied_table, OrderItemInput(menu_item_id=menu["burger"].id))
        item_id = order.items[0].id

        result = OrderService(db_session).update_item(
            contexts[Role.WAITER], order.id, item_id, OrderItemUpdate(quantity=4, notes="no onions")
        )

        assert result.items[0].id == item_id
        assert result.items[0].quantity == 4
        assert result.items[0].notes == "no onions"

    def test_update_item_on_paid_order(self, db_session, contexts, menu, occupied_table):
        order = submit(db_session, contexts[Role.WAITER], occupied_table, OrderItemInput(menu_item_id=menu["burger"].id))
        db_session.get(Order, order.id).status = OrderStatus.PAID
        db_session.commit()

        with pytest.raises(AlreadyPaidError):
            OrderService(db_session).update_item(
                contexts[Role.WAITER], order.id, order.items[0].id, OrderItemUpdate(quantity=2)
            )

    def test_update_missing_item(self, db_session, contexts, occupied_table):
        order = submit(db_session, contexts[Role.WAITER], occupied_table)
        with pytest.raises(NotFoundError):
            OrderService(db_session).update_item(contexts[Role.WAITER], order.id, "missing", OrderItemUpdate(quantity=2))

    def test_item_kitchen_status_needs_chef(self, db_session, contexts, menu, occupied_table):
        order = submit(db_session, contexts[Role.WAITER], occupied_table, OrderItemInput(menu_item_id=menu["burger"].id))
        item_id = order.items[0].id
        service = OrderService(db_session)

        with pytest.raises(InsufficientRoleError):
            service.update_item(contexts[Role.WAITER], order.id, item_id, OrderItemUpdate(status=OrderItemStatus.IN_PROGRESS))

        result = service.update_item(contexts[Role.CHEF], order.id, item_id, OrderItemUpdate(status=OrderItemStatus.DONE))
        assert result.items[0].status is OrderItemStatus.DONE


class TestAdvanceStatus:

    def test_forward_flow(self, db_session, contexts, occupied_table):
        order = submit(db_session, contexts[Role.WAITER], occupied_table)
        service = OrderService(db_session)

        assert service.advance_status(contexts[Role.CHEF], order.id, OrderStatus.IN_PROGRESS).status is OrderStatus.IN_PROGRESS
        assert service.advance_status(contexts[Role.CHEF], order.id, OrderStatus.DONE).status is OrderStatus.DONE
        assert service.advance_status(contexts[Role.WAITER], order.id, OrderStatus.DELIVERED).status is OrderStatus.DELIVERED

    def test_waiter_cannot_start_cooking(self, db_session, contexts, occupied_table):
        order = submit(db_session, contexts[Role.WAITER], occupied_table)
        with pytest.raises(AuthorizationError):
            OrderService(db_session).advance_status(contexts[Role.WAITER], order.id, OrderStatus.IN_PROGRESS)

    def test_manager_can_start_cooking(self, db_session, contexts, occupied_table):
        order = submit(db_session, contexts[Role.WAITER], occupied_table)
        result = OrderService(db_session).advance_status(contexts[Role.MANAGER], order.id, OrderStatus.IN_PROGRESS)
        assert result.status is OrderStatus.IN_PROGRESS

    def test_backwards_rejected(self, db_session, contexts, occupied_table):
        order = submit(db_session, contexts[Role.WAITER], occupied_table)
        service = OrderService(db_session)
        service.advance_status(contexts[Role.WAITER], order.id, OrderStatus.DELIVERED)

        with pytest.raises(InvalidTransitionError):
            service.advance_status(contexts[Role.CHEF], order.id, OrderStatus.IN_PROGRESS)

    def test_paid_only_through_settlement(self, db_session, contexts, occupied_table):
        order = submit(db_session, contexts[Role.WAITER], occupied_table)
        with pytest.raises(InvalidTransitionError):
            OrderService(db_session).advance_status(contexts[Role.MANAGER], order.id, OrderStatus.PAID)

    def test_same_status_is_noop(self, db_session, contexts, occupied_table):
        order = submit(db_session, contexts[Role.WAITER], occupied_table)
        result = OrderService(db_session).advance_status(contexts[Role.WAITER], order.id, OrderStatus.NEW)
        assert result.status is OrderStatus.NEW

    def test_paid_order_is_frozen(self, db_session, contexts, occupied_table):
        order = submit(db_session, contexts[Role.WAITER], occupied_table)
        db_session.get(Order, order.id).status = OrderStatus.PAID
        db_session.commit()

        with pytest.raises(AlreadyPaidError):
            OrderService(db_session).cancel(contexts[Role.WAITER], order.id)

    def test_cancelled_is_terminal(self, db_session, contexts, occupied_table):
        order = submit(db_session, contexts[Role.WAITER], occupied_table)
        service = OrderService(db_session)
        service.cancel(contexts[Role.WAITER], order.id)

        with pytest.raises(InvalidTransitionError):
            service.advance_status(contexts[Role.WAITER], order.id, OrderStatus.DELIVERED)

    def test_missing_order(self, db_session, contexts):
        with pytest.raises(NotFoundError):
            OrderService(db_session).advance_status(contexts[Role.CHEF], "missing", OrderStatus.DONE)


class TestReadOrders:

    def test_get_and_list(self, db_session, contexts, menu, occupied_table):
        order = submit(db_session, contexts[Role.WAITER], occupied_table, OrderItemInput(menu_item_id=menu["soda"].id))
        service = OrderService(db_session)

        assert service.get(contexts[Role.CHEF], order.id).total_cents == 300
        assert [o.id for o in service.list(contexts[Role.CHEF], table_id=occupied_table.id)] == [order.id]
        assert service.list(contexts[Role.CHEF], status=OrderStatus.PAID) == []

    def test_host_cannot_read_orders(self, db_session, contexts):
        with pytest.raises(AuthorizationError):
            OrderService(db_session).list(contexts[Role.HOST])

"""
Tests for PaymentService: settlement and the order/table cascade.
"""

import pytest

from pos_api.models import Order, Payment, Table
from pos_api.repositories import OrderRepository
from pos_api.services.domain import OrderService, PaymentService
from pos_shared.config.constants import OrderStatus, PaymentMethod, Role, TableStatus
from pos_shared.utils.exceptions import (
    AlreadyPaidError,
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    PaymentAmountError,
)
from pos_shared.utils.schemas import OrderCreate, OrderItemInput, PaymentCreate


@pytest.fixture
def open_order(db_session, contexts, menu, occupied_table):
    return OrderService(db_session).create(
        contexts[Role.WAITER],
        OrderCreate(table_id=occupied_table.id, items=[OrderItemInput(menu_item_id=menu["burger"].id, quantity=2)]),
    )


def pay(order_id, amount_cents=2500, tip_cents=0, method=PaymentMethod.CASH):
    return PaymentCreate(order_id=order_id, amount_cents=amount_cents, tip_cents=tip_cents, payment_method=method)


class TestSettle:

    def test_last_order_releases_table(self, db_session, contexts, occupied_table, open_order):
        occupied_table.guest_count = 2
        db_session.commit()

        payment = PaymentService(db_session).settle(contexts[Role.WAITER], pay(open_order.id, tip_cents=300))

        assert payment.order_id == open_order.id
        assert payment.amount_cents == 2500
        assert payment.tip_cents == 300
        assert payment.recorded_by_id == contexts[Role.WAITER].user_id

        order = db_session.get(Order, open_order.id)
        table = db_session.get(Table, occupied_table.id)
        assert order.status is OrderStatus.PAID
        assert table.status is TableStatus.AVAILABLE
        assert table.waiter_id is None
        assert table.guest_count is None

    def test_table_kept_while_another_order_is_unsettled(
        self, db_session, contexts, occupied_table, open_order, monkeypatch
    ):
        # The one-active-order index makes a second unsettled order unreachable
        # through the services, so report one from the repository instead
        monkeypatch.setattr(
            OrderRepository,
            "count_unsettled_for_table",
            lambda self, table_id, exclude_order_id=None: 1,
        )

        PaymentService(db_session).settle(contexts[Role.MANAGER], pay(open_order.id, method=PaymentMethod.CREDIT_CARD))

        assert db_session.get(Order, open_order.id).status is OrderStatus.PAID
        table = db_session.get(Table, occupied_table.id)
        assert table.status is TableStatus.OCCUPIED
        assert table.waiter_id == occupied_table.waiter_id

    def test_second_settlement_rejected(self, db_session, contexts, open_order):
        service = PaymentService(db_session)
        service.settle(contexts[Role.WAITER], pay(open_order.id))

        with pytest.raises(AlreadyPaidError):
            service.settle(contexts[Role.WAITER], pay(open_order.id))
        assert db_session.query(Payment).count() == 1

    def test_cancelled_order_cannot_be_paid(self, db_session, contexts, open_order):
        OrderService(db_session).cancel(contexts[Role.WAITER], open_order.id)

        with pytest.raises(InvalidTransitionError):
            PaymentService(db_session).settle(contexts[Role.WAITER], pay(open_order.id))

    def test_missing_order(self, db_session, contexts):
        with pytest.raises(NotFoundError):
            PaymentService(db_session).settle(contexts[Role.WAITER], pay("missing"))

    @pytest.mark.parametrize("amount,tip", [(0, 0), (-100, 0), (1000, -1)])
    def test_amount_validation(self, db_session, contexts, open_order, amount, tip):
        with pytest.raises(PaymentAmountError):
            PaymentService(db_session).settle(contexts[Role.WAITER], pay(open_order.id, amount, tip))

    @pytest.mark.parametrize("method", [PaymentMethod.CREDIT_CARD, PaymentMethod.DEBIT_CARD])
    def test_waiter_is_cash_only(self, db_session, contexts, open_order, method):
        with pytest.raises(AuthorizationError):
            PaymentService(db_session).settle(contexts[Role.WAITER], pay(open_order.id, method=method))
        assert db_session.get(Order, open_order.id).status is OrderStatus.NEW

    def test_manager_takes_cards(self, db_session, contexts, open_order):
        payment = PaymentService(db_session).settle(
            contexts[Role.MANAGER], pay(open_order.id, method=PaymentMethod.DEBIT_CARD)
        )
        assert payment.payment_method is PaymentMethod.DEBIT_CARD

    @pytest.mark.parametrize("role", [Role.HOST, Role.CHEF])
    def test_roles_without_payments(self, db_session, contexts, open_order, role):
        with pytest.raises(AuthorizationError):
            PaymentService(db_session).settle(contexts[role], pay(open_order.id))

    def test_paid_order_rejects_new_items(self, db_session, contexts, menu, open_order):
        PaymentService(db_session).settle(contexts[Role.WAITER], pay(open_order.id))

        with pytest.raises(AlreadyPaidError):
            OrderService(db_session).add_item(
                contexts[Role.WAITER], open_order.id, OrderItemInput(menu_item_id=menu["soda"].id)
            )


class TestReadPayments:

    def test_get_and_list(self, db_session, contexts, open_order):
        service = PaymentService(db_session)
        payment = service.settle(contexts[Role.WAITER], pay(open_order.id))

        assert service.get(contexts[Role.MANAGER], payment.id).id == payment.id
        assert [p.id for p in service.list(contexts[Role.MANAGER], order_id=open_order.id)] == [payment.id]

    def test_missing_payment(self, db_session, contexts):
        with pytest.raises(NotFoundError):
            PaymentService(db_session).get(contexts[Role.MANAGER], "missing")

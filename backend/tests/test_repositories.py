"""
Tests for the repository query surface.
"""

from datetime import datetime, timedelta, timezone

from pos_api.models import Order, Payment
from pos_api.repositories import (
    MenuItemRepository,
    OrderRepository,
    PaymentRepository,
    RepositoryFilters,
    TableRepository,
    UserRepository,
)
from pos_shared.config.constants import Limits, MenuCategory, OrderStatus, PaymentMethod, Role, TableStatus
from tests.conftest import make_table, make_user


class TestRepositoryFilters:

    def test_limit_is_clamped(self):
        assert RepositoryFilters(limit=0).limit == 1
        assert RepositoryFilters(limit=10_000).limit == Limits.MAX_PAGE_SIZE
        assert RepositoryFilters(offset=-5).offset == 0


class TestUserRepository:

    def test_find_by_role(self, db_session, staff):
        assert [u.email for u in UserRepository(db_session).find_by_role(Role.CHEF)] == ["chef@test.com"]

    def test_find_by_email_ignores_case(self, db_session, staff):
        assert UserRepository(db_session).find_by_email("  OWNER@test.com ").id == staff[Role.OWNER].id

    def test_inactive_accounts_still_found(self, db_session):
        user = make_user(db_session, Role.HOST, email="old@test.com", is_active=False)
        repo = UserRepository(db_session)

        assert repo.find_by_id(user.id) is not None
        assert user.id in [u.id for u in repo.find_by_role(Role.HOST)]


class TestTableRepository:

    def test_status_and_waiter_queries(self, db_session, staff, table, occupied_table):
        repo = TableRepository(db_session)

        assert [t.number for t in repo.find_by_status(TableStatus.AVAILABLE)] == [5]
        assert [t.number for t in repo.find_by_waiter(staff[Role.WAITER].id)] == [7]
        assert repo.find_by_number(7).id == occupied_table.id
        assert repo.find_by_number(99) is None

    def test_ordered_by_floor_then_number(self, db_session):
        make_table(db_session, number=12, floor=2)
        make_table(db_session, number=3, floor=2)
        make_table(db_session, number=8, floor=1)

        assert [t.number for t in TableRepository(db_session).find_all()] == [8, 3, 12]

    def test_count_and_exists(self, db_session, table):
        repo = TableRepository(db_session)

        assert repo.count() == 1
        assert repo.exists(table.id)
        assert not repo.exists("missing")


class TestMenuItemRepository:

    def test_find_by_category(self, db_session, menu):
        result = MenuItemRepository(db_session).find_by_category(MenuCategory.SIDE)
        assert [m.name for m in result] == ["Fries"]

    def test_soft_deleted_items_hidden(self, db_session, menu):
        menu["soda"].soft_delete(None)
        db_session.commit()
        repo = MenuItemRepository(db_session)

        assert repo.find_by_id(menu["soda"].id) is None
        assert repo.find_by_id(menu["soda"].id, include_deleted=True) is not None
        assert "Soda" not in [m.name for m in repo.find_all()]
        assert "Soda" in [m.name for m in repo.find_all(RepositoryFilters(include_deleted=True))]


class TestOrderRepository:

    def test_table_waiter_and_status_queries(self, db_session, staff, occupied_table):
        waiter = staff[Role.WAITER]
        paid = Order(table_id=occupied_table.id, waiter_id=waiter.id, status=OrderStatus.PAID)
        active = Order(table_id=occupied_table.id, waiter_id=waiter.id, status=OrderStatus.DONE)
        db_session.add_all([paid, active])
        db_session.commit()
        repo = OrderRepository(db_session)

        assert {o.id for o in repo.find_by_table(occupied_table.id)} == {paid.id, active.id}
        assert {o.id for o in repo.find_by_waiter(waiter.id)} == {paid.id, active.id}
        assert [o.id for o in repo.find_by_status(OrderStatus.PAID)] == [paid.id]
        assert repo.find_active_for_table(occupied_table.id).id == active.id
        assert repo.count_unsettled_for_table(occupied_table.id) == 1
        assert repo.count_unsettled_for_table(occupied_table.id, exclude_order_id=active.id) == 0

    def test_no_active_order(self, db_session, table):
        assert OrderRepository(db_session).find_active_for_table(table.id) is None


class TestPaymentRepository:

    def test_find_by_order_and_revenue(self, db_session, occupied_table):
        order = Order(table_id=occupied_table.id, status=OrderStatus.PAID)
        db_session.add(order)
        db_session.flush()
        now = datetime.now(timezone.utc)
        payment = Payment(
            order_id=order.id,
            amount_cents=1800,
            tip_cents=200,
            payment_method=PaymentMethod.DEBIT_CARD,
            payment_date=now,
        )
        db_session.add(payment)
        db_session.commit()
        repo = PaymentRepository(db_session)

        assert repo.find_by_order(order.id).id == payment.id

        rows = repo.revenue_by_date_range(now - timedelta(hours=1), now + timedelta(hours=1))
        assert [(r.payment_method, r.payments, r.amount_cents, r.tip_cents) for r in rows] == [
            (PaymentMethod.DEBIT_CARD, 1, 1800, 200),
        ]
        assert repo.revenue_by_date_range(now + timedelta(hours=1), now + timedelta(hours=2)) == []

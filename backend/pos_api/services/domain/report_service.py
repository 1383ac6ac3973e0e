"""
Report Service - read-only views over orders and payments for a date range.

Dates are whole days in UTC; end_date is inclusive.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy.orm import Session

from pos_api.repositories import OrderRepository, PaymentRepository
from pos_api.services.base_service import BaseService
from pos_api.services.permissions import PermissionContext
from pos_shared.config.constants import OrderStatus, PaymentMethod
from pos_shared.config.logging import get_logger
from pos_shared.utils.exceptions import ValidationError
from pos_shared.utils.schemas import (
    ItemFrequencyEntry,
    ItemFrequencyReport,
    OrderStatisticsReport,
    RevenueReport,
)

logger = get_logger(__name__)

# Week starts on Sunday in the reports
DAYS_OF_WEEK = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def date_window(start_date: date, end_date: date) -> tuple[datetime, datetime]:
    """Half-open [start, end) datetime window covering both dates."""
    if start_date > end_date:
        raise ValidationError(
            "start_date must not be after end_date",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
        )
    start = datetime.combine(start_date, time.min, tzinfo=timezone.utc)
    end = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return start, end


def day_of_week_name(moment: datetime) -> str:
    # datetime.weekday() is Monday=0
    return DAYS_OF_WEEK[(moment.weekday() + 1) % 7]


class ReportService(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)
        self._orders = OrderRepository(db)
        self._payments = PaymentRepository(db)

    def item_frequency(self, ctx: PermissionContext, start_date: date, end_date: date) -> ItemFrequencyReport:
        ctx.require_reports()
        start, end = date_window(start_date, end_date)

        rows = self._orders.item_order_frequency(start, end)
        logger.debug("Item frequency report", start=start_date.isoformat(), end=end_date.isoformat(), rows=len(rows))
        return ItemFrequencyReport(
            start_date=start_date,
            end_date=end_date,
            items=[ItemFrequencyEntry(**row._asdict()) for row in rows],
        )

    def revenue(self, ctx: PermissionContext, start_date: date, end_date: date) -> RevenueReport:
        ctx.require_reports()
        start, end = date_window(start_date, end_date)

        by_method = {method.value: 0 for method in PaymentMethod}
        total_tips = 0
        for row in self._payments.revenue_by_date_range(start, end):
            by_method[row.payment_method.value] = row.amount_cents
            total_tips += row.tip_cents

        daily: dict[str, int] = {}
        for payment in self._payments.find_by_date_range(start, end):
            day = payment.payment_date.date().isoformat()
            daily[day] = daily.get(day, 0) + payment.amount_cents

        return RevenueReport(
            start_date=start_date,
            end_date=end_date,
            total_revenue_cents=sum(by_method.values()),
            revenue_by_method=by_method,
            total_tips_cents=total_tips,
            daily_revenue=daily,
        )

    def order_statistics(self, ctx: PermissionContext, start_date: date, end_date: date) -> OrderStatisticsReport:
        """Counts per status and weekday; the average is over item totals."""
        ctx.require_reports()
        start, end = date_window(start_date, end_date)

        orders = self._orders.find_by_date_range(start, end)

        by_status = {status.value: 0 for status in OrderStatus}
        by_status.update(Counter(order.status.value for order in orders))

        by_day = {day: 0 for day in DAYS_OF_WEEK}
        by_day.update(Counter(day_of_week_name(order.created_at) for order in orders))

        total_amount = sum(order.total_cents for order in orders)
        average = round(total_amount / len(orders)) if orders else 0

        return OrderStatisticsReport(
            start_date=start_date,
            end_date=end_date,
            total_orders=len(orders),
            orders_by_status=by_status,
            average_order_amount_cents=average,
            orders_by_day_of_week=by_day,
        )

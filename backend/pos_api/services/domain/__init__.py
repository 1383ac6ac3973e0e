"""
Domain services. Each operation takes the caller's PermissionContext and
checks it before touching state.
"""

from .auth_service import AuthService
from .menu_service import MenuService
from .order_service import OrderService
from .payment_service import PaymentService
from .report_service import ReportService
from .staff_service import StaffService
from .table_service import TableService, resolve_table_state

__all__ = [
    "AuthService",
    "MenuService",
    "OrderService",
    "PaymentService",
    "ReportService",
    "StaffService",
    "TableService",
    "resolve_table_state",
]

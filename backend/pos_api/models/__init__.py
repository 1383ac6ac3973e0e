"""
SQLAlchemy ORM Models Package.

- base: Base class, TimestampMixin, AuditMixin
- user: User
- table: Table
- menu: MenuItem
- order: Order, OrderItem
- billing: Payment
"""

from .base import AuditMixin, Base, TimestampMixin
from .billing import Payment
from .menu import MenuItem
from .order import Order, OrderItem
from .table import Table
from .user import User

__all__ = [
    "Base",
    "AuditMixin",
    "TimestampMixin",
    "User",
    "Table",
    "MenuItem",
    "Order",
    "OrderItem",
    "Payment",
]

"""
Repository Pattern implementation.
Centralizes data access; services never build queries themselves.

Usage:
    from pos_api.repositories import OrderRepository, OrderFilters

    repo = OrderRepository(db)
    orders = repo.find_all(OrderFilters(table_id=table_id))
    active = repo.find_active_for_table(table_id)
"""

from .base import BaseRepository, RepositoryFilters
from .menu_item import MenuItemFilters, MenuItemRepository
from .order import ItemFrequencyRow, OrderFilters, OrderRepository
from .payment import PaymentFilters, PaymentRepository, RevenueRow
from .table import TableFilters, TableRepository
from .user import UserFilters, UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "RepositoryFilters",
    # User
    "UserRepository",
    "UserFilters",
    # Table
    "TableRepository",
    "TableFilters",
    # Menu
    "MenuItemRepository",
    "MenuItemFilters",
    # Order
    "OrderRepository",
    "OrderFilters",
    "ItemFrequencyRow",
    # Payment
    "PaymentRepository",
    "PaymentFilters",
    "RevenueRow",
]

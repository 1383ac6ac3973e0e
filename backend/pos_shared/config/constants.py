"""
Centralized constants for the POS backend.

Every role and status is a closed enumeration. Code that branches on one of
them goes through a lookup table defined here (or in the permission
strategies), and those tables are checked at import time so a new member
cannot be left unhandled.

Usage:
    from pos_shared.config.constants import Role, OrderStatus, ACTIVE_ORDER_STATUSES

    if order.status in ACTIVE_ORDER_STATUSES:
        ...
"""

from enum import Enum
from typing import Final


# =============================================================================
# Roles and permissions
# =============================================================================


class Role(str, Enum):
    """Staff roles, lowest privilege first."""

    HOST = "host"
    WAITER = "waiter"
    CHEF = "chef"
    MANAGER = "manager"
    OWNER = "owner"
    ADMIN = "admin"


class Permission(str, Enum):
    """Permission tags granted per role. ALL is the admin wildcard."""

    TABLES = "tables"
    MENU = "menu"
    ORDERS = "orders"
    PAYMENTS = "payments"
    STAFF = "staff"
    REPORTS = "reports"
    ASSIGN_TABLES = "assign_tables"
    VIEW_STAFF = "view_staff"
    ALL = "all"


# Roles that share a tier without being substitutable for each other
LATERAL_ROLES: Final[frozenset[Role]] = frozenset({Role.WAITER, Role.CHEF})


# =============================================================================
# Entity status enums
# =============================================================================


class TableStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"
    CLEANING = "cleaning"


class OrderStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    DELIVERED = "delivered"
    PAID = "paid"
    CANCELLED = "cancelled"


class OrderItemStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"


class MenuCategory(str, Enum):
    APPETIZER = "appetizer"
    MAIN_COURSE = "main_course"
    SIDE = "side"
    DESSERT = "dessert"
    DRINK = "drink"


# An order holds its table until it is paid or cancelled
ACTIVE_ORDER_STATUSES: Final[frozenset[OrderStatus]] = frozenset({
    OrderStatus.NEW,
    OrderStatus.IN_PROGRESS,
    OrderStatus.DONE,
    OrderStatus.DELIVERED,
})

# Kitchen-owned statuses: only chefs and management may move work into them
KITCHEN_STATUSES: Final[frozenset[str]] = frozenset({
    OrderStatus.IN_PROGRESS.value,
    OrderStatus.DONE.value,
})


# =============================================================================
# Status Transitions
# =============================================================================

# Valid order status transitions (from -> allowed to states).
# PAID is reached only through payment settlement.
# Flow: NEW -> IN_PROGRESS -> DONE -> DELIVERED, CANCELLED from any active state
ORDER_TRANSITIONS: Final[dict[OrderStatus, frozenset[OrderStatus]]] = {
    OrderStatus.NEW: frozenset({
        OrderStatus.IN_PROGRESS, OrderStatus.DONE, OrderStatus.DELIVERED, OrderStatus.CANCELLED,
    }),
    OrderStatus.IN_PROGRESS: frozenset({
        OrderStatus.DONE, OrderStatus.DELIVERED, OrderStatus.CANCELLED,
    }),
    OrderStatus.DONE: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.CANCELLED}),
    OrderStatus.PAID: frozenset(),  # Terminal state
    OrderStatus.CANCELLED: frozenset(),  # Terminal state
}

_untracked = set(OrderStatus) - ORDER_TRANSITIONS.keys()
if _untracked:
    raise RuntimeError(f"ORDER_TRANSITIONS is missing statuses: {sorted(s.value for s in _untracked)}")


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    # Quantity limits
    MIN_QUANTITY: Final[int] = 1
    MAX_QUANTITY: Final[int] = 99

    # Price limits (in cents)
    MIN_PRICE_CENTS: Final[int] = 0
    MAX_PRICE_CENTS: Final[int] = 100_000_00  # $100,000

    # Tables
    MAX_TABLE_CAPACITY: Final[int] = 50
    MAX_GUEST_COUNT: Final[int] = 50
    DEFAULT_FLOOR: Final[int] = 1

    # String lengths
    MAX_NAME_LENGTH: Final[int] = 200
    MAX_DESCRIPTION_LENGTH: Final[int] = 2000
    MAX_NOTES_LENGTH: Final[int] = 500
    MIN_PASSWORD_LENGTH: Final[int] = 6

    # Pagination defaults
    DEFAULT_PAGE_SIZE: Final[int] = 100
    MAX_PAGE_SIZE: Final[int] = 500

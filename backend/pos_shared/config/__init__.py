"""
Configuration module: Settings, logging, constants.
"""

from pos_shared.config.settings import settings, get_settings
from pos_shared.config.logging import get_logger, setup_logging
from pos_shared.config.constants import (
    Role,
    Permission,
    TableStatus,
    OrderStatus,
    OrderItemStatus,
    PaymentMethod,
    MenuCategory,
    Limits,
)

__all__ = [
    # settings
    "settings",
    "get_settings",
    # logging
    "get_logger",
    "setup_logging",
    # constants
    "Role",
    "Permission",
    "TableStatus",
    "OrderStatus",
    "OrderItemStatus",
    "PaymentMethod",
    "MenuCategory",
    "Limits",
]

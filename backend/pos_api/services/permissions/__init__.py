"""
Permission Strategy Pattern implementation.

Usage:
    from pos_api.services.permissions import PermissionContext, Identity

    ctx = PermissionContext(Identity(id=user.id, email=user.email, role=user.role))
    ctx.require_permission(Permission.ORDERS, "view orders")

    # Pure predicates for policy-only checks
    from pos_api.services.permissions import policy
    policy.is_at_least(Role.OWNER, Role.MANAGER)
"""

from . import policy
from .context import Identity, PermissionContext
from .strategies import (
    STRATEGY_REGISTRY,
    AdminStrategy,
    ChefStrategy,
    HostStrategy,
    ManagerStrategy,
    OwnerStrategy,
    RoleStrategy,
    WaiterStrategy,
    get_strategy_for_role,
)

__all__ = [
    # Strategies
    "RoleStrategy",
    "HostStrategy",
    "WaiterStrategy",
    "ChefStrategy",
    "ManagerStrategy",
    "OwnerStrategy",
    "AdminStrategy",
    "STRATEGY_REGISTRY",
    "get_strategy_for_role",
    # Policy
    "policy",
    # Context
    "Identity",
    "PermissionContext",
]

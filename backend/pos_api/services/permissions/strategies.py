"""
Permission Strategy implementations.
Strategy Pattern for role-based access control.

Each role has exactly one strategy carrying its tier, its permission tags and
the set of roles it may provision. The registry at the bottom is checked at
import time against Role so a new role cannot be left without one.
"""

from abc import ABC, abstractmethod

from pos_shared.config.constants import Permission, Role


# =============================================================================
# Mixins for Common Patterns
# =============================================================================


class NoProvisioningMixin:
    """Mixin for roles that cannot create or modify staff accounts."""

    @property
    def manageable_roles(self) -> frozenset[Role]:
        return frozenset()


# =============================================================================
# Base Strategy
# =============================================================================


class RoleStrategy(ABC):
    """
    Abstract base for role strategies.

    tier is the coarse rank used by is_at_least(); lateral roles share a tier.
    """

    @property
    @abstractmethod
    def role(self) -> Role:
        ...

    @property
    @abstractmethod
    def tier(self) -> int:
        ...

    @property
    @abstractmethod
    def permissions(self) -> frozenset[Permission]:
        ...

    @property
    @abstractmethod
    def manageable_roles(self) -> frozenset[Role]:
        """Roles this role may create, update and deactivate."""
        ...

    def has_permission(self, permission: Permission) -> bool:
        perms = self.permissions
        return Permission.ALL in perms or permission in perms

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(tier={self.tier})>"


class HostStrategy(NoProvisioningMixin, RoleStrategy):
    """Seats guests: reads tables, menu and the staff list."""

    role = Role.HOST
    tier = 1
    permissions = frozenset({Permission.TABLES, Permission.MENU, Permission.VIEW_STAFF})


class WaiterStrategy(NoProvisioningMixin, RoleStrategy):
    """Runs the floor: tables, orders and cash payments."""

    role = Role.WAITER
    tier = 2
    permissions = frozenset({
        Permission.TABLES,
        Permission.MENU,
        Permission.ORDERS,
        Permission.PAYMENTS,
        Permission.ASSIGN_TABLES,
    })


class ChefStrategy(NoProvisioningMixin, RoleStrategy):
    """Kitchen: moves orders and items through preparation."""

    role = Role.CHEF
    tier = 2
    permissions = frozenset({
        Permission.TABLES,
        Permission.ORDERS,
        Permission.MENU,
        Permission.VIEW_STAFF,
    })


class ManagerStrategy(RoleStrategy):
    """Runs a shift: menu, tables, staff below manager, any payment method."""

    role = Role.MANAGER
    tier = 3
    permissions = frozenset({
        Permission.TABLES,
        Permission.MENU,
        Permission.ORDERS,
        Permission.PAYMENTS,
        Permission.STAFF,
        Permission.ASSIGN_TABLES,
    })
    manageable_roles = frozenset({Role.WAITER, Role.HOST, Role.CHEF})


class OwnerStrategy(RoleStrategy):
    """Everything a manager does, plus reports and manager accounts."""

    role = Role.OWNER
    tier = 4
    permissions = ManagerStrategy.permissions | {Permission.REPORTS}
    manageable_roles = ManagerStrategy.manageable_roles | {Role.MANAGER}


class AdminStrategy(RoleStrategy):
    """Super-role: wildcard permission, provisions any role."""

    role = Role.ADMIN
    tier = 5
    permissions = frozenset({Permission.ALL})
    manageable_roles = frozenset(Role)


# Strategy registry
STRATEGY_REGISTRY: dict[Role, RoleStrategy] = {
    strategy.role: strategy
    for strategy in (
        HostStrategy(),
        WaiterStrategy(),
        ChefStrategy(),
        ManagerStrategy(),
        OwnerStrategy(),
        AdminStrategy(),
    )
}

_missing = set(Role) - STRATEGY_REGISTRY.keys()
if _missing:
    raise RuntimeError(f"No permission strategy for roles: {sorted(r.value for r in _missing)}")


def get_strategy_for_role(role: Role) -> RoleStrategy:
    """Get permission strategy for a role."""
    return STRATEGY_REGISTRY[Role(role)]

"""
Permission Context - Main entry point for permission checks.
"""

from dataclasses import dataclass
from typing import Any

from pos_shared.config.constants import (
    OrderItemStatus,
    OrderStatus,
    PaymentMethod,
    Permission,
    Role,
)
from pos_shared.utils.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InsufficientRoleError,
    MissingPermissionError,
)

from . import policy
from .strategies import RoleStrategy, get_strategy_for_role


@dataclass(frozen=True)
class Identity:
    """The authenticated caller. Built per request from verified token claims."""

    id: str
    email: str
    role: Role

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "Identity":
        try:
            return cls(id=str(claims["sub"]), email=claims.get("email", ""), role=Role(claims["role"]))
        except (KeyError, ValueError):
            raise AuthenticationError("Invalid token claims")


class PermissionContext:
    """
    Context for performing permission checks.

    Usage:
        ctx = PermissionContext(identity)

        if ctx.can(Permission.ORDERS):
            ...

        ctx.require_permission(Permission.TABLES, "view tables")
        ctx.require_order_status(OrderStatus.IN_PROGRESS)

    Every require_* raises an AuthorizationError subclass naming the missing
    permission or role and never touches state.
    """

    def __init__(self, identity: Identity):
        self._identity = identity
        self._strategy = get_strategy_for_role(identity.role)

    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def user_id(self) -> str:
        return self._identity.id

    @property
    def role(self) -> Role:
        return self._identity.role

    @property
    def strategy(self) -> RoleStrategy:
        return self._strategy

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def can(self, permission: Permission) -> bool:
        return self._strategy.has_permission(permission)

    def is_at_least(self, required: Role) -> bool:
        return policy.is_at_least(self.role, required)

    # =========================================================================
    # Generic requirements
    # =========================================================================

    def require_permission(self, permission: Permission, action: str) -> None:
        if not self.can(permission):
            raise MissingPermissionError(action, permission.value, user_id=self.user_id, role=self.role.value)

    def require_role(self, allowed: bool, required: Role, action: str) -> None:
        """Raise InsufficientRoleError unless a policy predicate allowed the action."""
        if not allowed:
            raise InsufficientRoleError(action, required.value, user_id=self.user_id, role=self.role.value)

    # =========================================================================
    # Per-action requirements
    # =========================================================================

    def require_create_table(self) -> None:
        self.require_permission(Permission.TABLES, "create tables")
        self.require_role(policy.can_create_table(self.role), Role.MANAGER, "create tables")

    def require_assign_waiter(self) -> None:
        self.require_permission(Permission.ASSIGN_TABLES, "assign waiters")
        self.require_role(policy.can_assign_waiter(self.role), Role.MANAGER, "assign waiters")

    def require_menu_write(self, action: str) -> None:
        self.require_permission(Permission.MENU, action)
        self.require_role(policy.can_write_menu(self.role), Role.MANAGER, action)

    def require_order_status(self, status: OrderStatus | OrderItemStatus) -> None:
        self.require_permission(Permission.ORDERS, "change order status")
        if not policy.can_set_order_status(self.role, status):
            raise InsufficientRoleError(
                f"set status '{status.value}'",
                f"{Role.CHEF.value} or {Role.MANAGER.value}",
                user_id=self.user_id,
                role=self.role.value,
            )

    def require_payment_method(self, method: PaymentMethod) -> None:
        self.require_permission(Permission.PAYMENTS, "record payments")
        if not policy.can_use_payment_method(self.role, method):
            raise InsufficientRoleError(
                f"accept {method.value} payments",
                Role.MANAGER.value,
                user_id=self.user_id,
                role=self.role.value,
            )

    def require_reports(self) -> None:
        self.require_permission(Permission.REPORTS, "view reports")
        self.require_role(policy.can_view_reports(self.role), Role.OWNER, "view reports")

    def require_register(self) -> None:
        if not policy.can_register_users(self.role):
            raise InsufficientRoleError("register users", Role.ADMIN.value, user_id=self.user_id, role=self.role.value)

    def require_staff_listing(self, role_filter: Role | None) -> None:
        if not policy.can_view_staff(self.role, role_filter):
            raise MissingPermissionError(
                "view staff",
                f"{Permission.STAFF.value} or {Permission.VIEW_STAFF.value}",
                user_id=self.user_id,
                role=self.role.value,
            )

    def require_staff_record_access(self, target_role: Role) -> None:
        if not policy.can_access_staff_record(self.role, target_role):
            raise InsufficientRoleError("access admin accounts", Role.ADMIN.value, user_id=self.user_id)

    def require_staff_management(self, target_role: Role, action: str) -> None:
        self.require_permission(Permission.STAFF, action)
        self.require_staff_record_access(target_role)
        if not policy.can_manage_staff(self.role, target_role):
            raise AuthorizationError(
                f"{action} with role '{target_role.value}'",
                user_id=self.user_id,
                role=self.role.value,
                target_role=target_role.value,
            )

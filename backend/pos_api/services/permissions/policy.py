"""
Role policy: the named predicates every authorization decision goes through.

All functions are pure; they look at roles only, never at entity state.
"""

from pos_shared.config.constants import (
    KITCHEN_STATUSES,
    LATERAL_ROLES,
    OrderItemStatus,
    OrderStatus,
    PaymentMethod,
    Permission,
    Role,
)

from .strategies import get_strategy_for_role


def tier(role: Role) -> int:
    return get_strategy_for_role(role).tier


def is_at_least(role: Role, required: Role) -> bool:
    """
    Coarse role comparison, in order of precedence:

    1. admin passes everything
    2. a chef requirement is met only by chef
    3. owner passes any requirement up to manager
    4. manager and owner pass any requirement up to waiter
    5. waiter and chef never stand in for each other
    6. otherwise compare tiers
    """
    if role is Role.ADMIN:
        return True
    if required is Role.CHEF:
        return role is Role.CHEF
    if role is Role.OWNER and tier(required) <= tier(Role.MANAGER):
        return True
    if role in (Role.MANAGER, Role.OWNER) and tier(required) <= tier(Role.WAITER):
        return True
    if role in LATERAL_ROLES and required in LATERAL_ROLES:
        return role is required
    return tier(role) >= tier(required)


def has_permission(role: Role, permission: Permission) -> bool:
    return get_strategy_for_role(role).has_permission(permission)


def can_manage_target_role(acting: Role, target: Role) -> bool:
    """Staff provisioning hierarchy; independent of the permission matrix."""
    return target in get_strategy_for_role(acting).manageable_roles


# =============================================================================
# Per-action predicates
# =============================================================================


def can_create_table(role: Role) -> bool:
    return has_permission(role, Permission.TABLES) and is_at_least(role, Role.MANAGER)


def can_assign_waiter(role: Role) -> bool:
    return has_permission(role, Permission.ASSIGN_TABLES) and is_at_least(role, Role.MANAGER)


def can_write_menu(role: Role) -> bool:
    return has_permission(role, Permission.MENU) and is_at_least(role, Role.MANAGER)


def can_access_orders(role: Role) -> bool:
    return has_permission(role, Permission.ORDERS)


def can_set_order_status(role: Role, status: OrderStatus | OrderItemStatus) -> bool:
    """
    Moving an order (or an item) into in_progress or done is kitchen work:
    chef or manager tier and above. Other statuses only need `orders`.
    """
    if not can_access_orders(role):
        return False
    if status.value in KITCHEN_STATUSES:
        return is_at_least(role, Role.CHEF) or is_at_least(role, Role.MANAGER)
    return True


def can_settle_payments(role: Role) -> bool:
    return has_permission(role, Permission.PAYMENTS)


def can_use_payment_method(role: Role, method: PaymentMethod) -> bool:
    """Waiter tier settles in cash only; manager tier and above use any method."""
    if not can_settle_payments(role):
        return False
    return method is PaymentMethod.CASH or is_at_least(role, Role.MANAGER)


def can_view_reports(role: Role) -> bool:
    return has_permission(role, Permission.REPORTS) and is_at_least(role, Role.OWNER)


def can_register_users(role: Role) -> bool:
    return role is Role.ADMIN


def can_view_staff(role: Role, role_filter: Role | None = None) -> bool:
    """Listing waiters is open to all staff, for table assignment."""
    if role_filter is Role.WAITER:
        return True
    return has_permission(role, Permission.STAFF) or has_permission(role, Permission.VIEW_STAFF)


def can_access_staff_record(role: Role, target_role: Role) -> bool:
    """Admin accounts are visible to admins only."""
    return target_role is not Role.ADMIN or role is Role.ADMIN


def can_manage_staff(role: Role, target_role: Role) -> bool:
    return (
        has_permission(role, Permission.STAFF)
        and can_access_staff_record(role, target_role)
        and can_manage_target_role(role, target_role)
    )

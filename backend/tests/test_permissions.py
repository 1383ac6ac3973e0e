"""
Tests for the role policy: tiers, is_at_least, the permission matrix and
the staff provisioning hierarchy.
"""

import pytest

from pos_api.services.permissions import (
    STRATEGY_REGISTRY,
    Identity,
    PermissionContext,
    get_strategy_for_role,
    policy,
)
from pos_shared.config.constants import OrderItemStatus, OrderStatus, PaymentMethod, Permission, Role
from pos_shared.utils.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InsufficientRoleError,
    MissingPermissionError,
)


PERMISSION_MATRIX = {
    Role.HOST: {Permission.TABLES, Permission.MENU, Permission.VIEW_STAFF},
    Role.WAITER: {
        Permission.TABLES, Permission.MENU, Permission.ORDERS,
        Permission.PAYMENTS, Permission.ASSIGN_TABLES,
    },
    Role.CHEF: {Permission.TABLES, Permission.ORDERS, Permission.MENU, Permission.VIEW_STAFF},
    Role.MANAGER: {
        Permission.TABLES, Permission.MENU, Permission.ORDERS, Permission.PAYMENTS,
        Permission.STAFF, Permission.ASSIGN_TABLES,
    },
    Role.OWNER: {
        Permission.TABLES, Permission.MENU, Permission.ORDERS, Permission.PAYMENTS,
        Permission.STAFF, Permission.ASSIGN_TABLES, Permission.REPORTS,
    },
}

CONCRETE_PERMISSIONS = [p for p in Permission if p is not Permission.ALL]


def ctx(role: Role) -> PermissionContext:
    return PermissionContext(Identity(id=f"{role.value}-id", email=f"{role.value}@test.com", role=role))


class TestStrategies:

    def test_every_role_has_a_strategy(self):
        assert set(STRATEGY_REGISTRY) == set(Role)

    @pytest.mark.parametrize("role,expected", [
        (Role.HOST, 1),
        (Role.WAITER, 2),
        (Role.CHEF, 2),
        (Role.MANAGER, 3),
        (Role.OWNER, 4),
        (Role.ADMIN, 5),
    ])
    def test_tiers(self, role, expected):
        assert policy.tier(role) == expected
        assert get_strategy_for_role(role).tier == expected


class TestIsAtLeast:

    @pytest.mark.parametrize("required", list(Role))
    def test_admin_passes_everything(self, required):
        assert policy.is_at_least(Role.ADMIN, required)

    @pytest.mark.parametrize("role", list(Role))
    def test_chef_requirement_is_met_only_by_chef_or_admin(self, role):
        assert policy.is_at_least(role, Role.CHEF) == (role in (Role.CHEF, Role.ADMIN))

    def test_lateral_roles_do_not_satisfy_each_other(self):
        assert not policy.is_at_least(Role.WAITER, Role.CHEF)
        assert not policy.is_at_least(Role.CHEF, Role.WAITER)

    @pytest.mark.parametrize("required", [Role.HOST, Role.WAITER, Role.MANAGER])
    def test_owner_passes_manager_and_below(self, required):
        assert policy.is_at_least(Role.OWNER, required)

    @pytest.mark.parametrize("role", [Role.MANAGER, Role.OWNER])
    def test_manager_and_owner_pass_waiter_and_below(self, role):
        assert policy.is_at_least(role, Role.WAITER)
        assert policy.is_at_least(role, Role.HOST)

    def test_tier_fallback(self):
        assert policy.is_at_least(Role.WAITER, Role.HOST)
        assert policy.is_at_least(Role.CHEF, Role.HOST)
        assert not policy.is_at_least(Role.HOST, Role.WAITER)
        assert not policy.is_at_least(Role.MANAGER, Role.OWNER)
        assert not policy.is_at_least(Role.OWNER, Role.ADMIN)


class TestPermissionMatrix:

    @pytest.mark.parametrize("role", list(PERMISSION_MATRIX))
    @pytest.mark.parametrize("permission", CONCRETE_PERMISSIONS)
    def test_matrix(self, role, permission):
        expected = permission in PERMISSION_MATRIX[role]
        assert policy.has_permission(role, permission) is expected

    @pytest.mark.parametrize("role", list(PERMISSION_MATRIX))
    @pytest.mark.parametrize("permission", CONCRETE_PERMISSIONS)
    def test_require_permission_raises_only_outside_the_matrix(self, role, permission):
        context = ctx(role)
        if permission in PERMISSION_MATRIX[role]:
            context.require_permission(permission, "do it")
        else:
            with pytest.raises(MissingPermissionError) as exc_info:
                context.require_permission(permission, "do it")
            assert exc_info.value.status_code == 403
            assert permission.value in exc_info.value.detail

    @pytest.mark.parametrize("permission", list(Permission))
    def test_admin_wildcard(self, permission):
        assert policy.has_permission(Role.ADMIN, permission)


class TestProvisioningHierarchy:

    @pytest.mark.parametrize("acting,target,expected", [
        (Role.ADMIN, Role.ADMIN, True),
        (Role.ADMIN, Role.OWNER, True),
        (Role.OWNER, Role.MANAGER, True),
        (Role.OWNER, Role.CHEF, True),
        (Role.OWNER, Role.OWNER, False),
        (Role.OWNER, Role.ADMIN, False),
        (Role.MANAGER, Role.WAITER, True),
        (Role.MANAGER, Role.HOST, True),
        (Role.MANAGER, Role.CHEF, True),
        (Role.MANAGER, Role.MANAGER, False),
        (Role.WAITER, Role.HOST, False),
        (Role.HOST, Role.HOST, False),
        (Role.CHEF, Role.WAITER, False),
    ])
    def test_can_manage_target_role(self, acting, target, expected):
        assert policy.can_manage_target_role(acting, target) is expected

    def test_manager_cannot_provision_manager(self):
        with pytest.raises(AuthorizationError):
            ctx(Role.MANAGER).require_staff_management(Role.MANAGER, "create staff")

    def test_owner_can_provision_manager(self):
        ctx(Role.OWNER).require_staff_management(Role.MANAGER, "create staff")

    def test_admin_records_are_admin_only(self):
        assert not policy.can_access_staff_record(Role.OWNER, Role.ADMIN)
        assert policy.can_access_staff_record(Role.ADMIN, Role.ADMIN)
        with pytest.raises(InsufficientRoleError):
            ctx(Role.OWNER).require_staff_record_access(Role.ADMIN)


class TestActionPredicates:

    @pytest.mark.parametrize("role,expected", [
        (Role.HOST, False),
        (Role.WAITER, False),
        (Role.CHEF, True),
        (Role.MANAGER, True),
        (Role.OWNER, True),
        (Role.ADMIN, True),
    ])
    def test_kitchen_statuses(self, role, expected):
        assert policy.can_set_order_status(role, OrderStatus.IN_PROGRESS) is expected
        assert policy.can_set_order_status(role, OrderStatus.DONE) is expected
        assert policy.can_set_order_status(role, OrderItemStatus.IN_PROGRESS) is expected

    def test_waiter_can_deliver_and_cancel(self):
        assert policy.can_set_order_status(Role.WAITER, OrderStatus.DELIVERED)
        assert policy.can_set_order_status(Role.WAITER, OrderStatus.CANCELLED)

    def test_host_has_no_order_access(self):
        assert not policy.can_set_order_status(Role.HOST, OrderStatus.DELIVERED)

    @pytest.mark.parametrize("method", list(PaymentMethod))
    def test_payment_methods(self, method):
        assert policy.can_use_payment_method(Role.WAITER, method) is (method is PaymentMethod.CASH)
        assert policy.can_use_payment_method(Role.MANAGER, method)
        assert policy.can_use_payment_method(Role.ADMIN, method)
        assert not policy.can_use_payment_method(Role.CHEF, method)
        assert not policy.can_use_payment_method(Role.HOST, method)

    def test_waiter_card_payment_names_required_role(self):
        with pytest.raises(InsufficientRoleError) as exc_info:
            ctx(Role.WAITER).require_payment_method(PaymentMethod.CREDIT_CARD)
        assert "credit_card" in exc_info.value.detail

    @pytest.mark.parametrize("role,expected", [
        (Role.HOST, False), (Role.WAITER, False), (Role.CHEF, False),
        (Role.MANAGER, True), (Role.OWNER, True), (Role.ADMIN, True),
    ])
    def test_table_creation_and_menu_writes(self, role, expected):
        assert policy.can_create_table(role) is expected
        assert policy.can_write_menu(role) is expected

    def test_assign_waiter_needs_manager_tier(self):
        # Waiters hold assign_tables but not the tier
        assert not policy.can_assign_waiter(Role.WAITER)
        assert policy.can_assign_waiter(Role.MANAGER)

    @pytest.mark.parametrize("role", list(Role))
    def test_reports(self, role):
        assert policy.can_view_reports(role) is (role in (Role.OWNER, Role.ADMIN))

    @pytest.mark.parametrize("role", list(Role))
    def test_register(self, role):
        assert policy.can_register_users(role) is (role is Role.ADMIN)

    @pytest.mark.parametrize("role", list(Role))
    def test_waiter_listing_is_open_to_everyone(self, role):
        assert policy.can_view_staff(role, Role.WAITER)

    def test_unfiltered_staff_listing(self):
        assert not policy.can_view_staff(Role.WAITER)
        assert policy.can_view_staff(Role.HOST)
        assert policy.can_view_staff(Role.CHEF)
        assert policy.can_view_staff(Role.MANAGER)


class TestContextRequirements:
    """Each require_* refuses exactly where its policy predicate does."""

    REQUIREMENTS = [
        (policy.can_create_table, lambda c: c.require_create_table()),
        (policy.can_assign_waiter, lambda c: c.require_assign_waiter()),
        (policy.can_write_menu, lambda c: c.require_menu_write("update menu items")),
        (policy.can_view_reports, lambda c: c.require_reports()),
    ]

    @pytest.mark.parametrize("role", list(Role))
    @pytest.mark.parametrize("predicate,require", REQUIREMENTS)
    def test_requirement_matches_predicate(self, role, predicate, require):
        if predicate(role):
            require(ctx(role))
        else:
            with pytest.raises(AuthorizationError):
                require(ctx(role))

    @pytest.mark.parametrize("acting", list(Role))
    @pytest.mark.parametrize("target", list(Role))
    def test_staff_management_matches_predicate(self, acting, target):
        if policy.can_manage_staff(acting, target):
            ctx(acting).require_staff_management(target, "update staff")
        else:
            with pytest.raises(AuthorizationError):
                ctx(acting).require_staff_management(target, "update staff")

    def test_waiter_assign_names_missing_tier(self):
        with pytest.raises(InsufficientRoleError) as exc_info:
            ctx(Role.WAITER).require_assign_waiter()
        assert Role.MANAGER.value in exc_info.value.detail

    def test_host_assign_names_missing_permission(self):
        with pytest.raises(MissingPermissionError):
            ctx(Role.HOST).require_assign_waiter()


class TestIdentity:

    def test_from_claims(self):
        identity = Identity.from_claims({"sub": "u1", "email": "a@b.c", "role": "chef"})
        assert identity == Identity(id="u1", email="a@b.c", role=Role.CHEF)

    @pytest.mark.parametrize("claims", [
        {"email": "a@b.c", "role": "chef"},
        {"sub": "u1", "role": "sommelier"},
    ])
    def test_bad_claims(self, claims):
        with pytest.raises(AuthenticationError):
            Identity.from_claims(claims)

    def test_context_exposes_identity(self):
        context = ctx(Role.ADMIN)
        assert context.is_admin
        assert context.role is Role.ADMIN
        assert context.user_id == "admin-id"

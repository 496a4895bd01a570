"""
Tests for the permission catalog.

These tests verify:
- Each role holds exactly the permissions it should
- Unknown roles and permissions resolve to no access
- has_all_permissions agrees with has_permission and subset checks
"""

import pytest

from pharmacy_pos.core.permissions import (
    PERMISSION_CATEGORIES,
    ROLE_PERMISSIONS,
    get_permission_matrix,
    get_permission_name,
    get_role_metadata,
    get_role_permissions,
    has_all_permissions,
    has_any_permission,
    has_permission,
)
from pharmacy_pos.models import Permission, Role


class TestRolePermissions:
    """Test suite for the role to permission mapping."""

    def test_super_admin_holds_every_permission(self):
        """Test that super admin holds every permission."""
        assert get_role_permissions(Role.SUPER_ADMIN) == frozenset(Permission)

    def test_admin_lacks_only_super_admin_permissions(self):
        """Test that admin lacks only admin management and system configuration."""
        missing = frozenset(Permission) - get_role_permissions(Role.ADMIN)
        assert missing == {Permission.MANAGE_ADMINS, Permission.SYSTEM_CONFIGURATION}

    def test_roles_are_nested(self):
        """Test that each role holds everything the role below it holds, pharmacist aside."""
        cashier = get_role_permissions(Role.CASHIER)
        pharmacist = get_role_permissions(Role.PHARMACIST)
        manager = get_role_permissions(Role.MANAGER)
        admin = get_role_permissions(Role.ADMIN)

        assert cashier < pharmacist
        assert cashier < manager
        assert manager < admin

    def test_cashier_can_sell_but_not_refund(self):
        """Test that cashiers can sell and print but not refund or report."""
        assert has_permission(Role.CASHIER, Permission.CREATE_SALE)
        assert has_permission(Role.CASHIER, Permission.PRINT_INVOICE)
        assert not has_permission(Role.CASHIER, Permission.REFUND_SALE)
        assert not has_permission(Role.CASHIER, Permission.VIEW_REPORTS)

    def test_pharmacist_extras(self):
        """Test that pharmacists can edit customers and see low stock."""
        assert has_permission(Role.PHARMACIST, Permission.EDIT_CUSTOMER)
        assert has_permission(Role.PHARMACIST, Permission.VIEW_LOW_STOCK)
        assert not has_permission(Role.PHARMACIST, Permission.DELETE_CUSTOMER)
        assert not has_permission(Role.PHARMACIST, Permission.ADJUST_INVENTORY)

    def test_manager_cannot_manage_users(self):
        """Test that managers can view users but not create them."""
        assert has_permission(Role.MANAGER, Permission.VIEW_USERS)
        assert not has_permission(Role.MANAGER, Permission.CREATE_USER)
        assert not has_permission(Role.MANAGER, Permission.DELETE_SUPPLIER)

    def test_string_values_are_accepted(self):
        """Test that role and permission strings are accepted."""
        assert has_permission("manager", "refund_sale")
        assert has_permission(" Cashier ", "create_sale")


class TestUnknownValues:
    """Unknown roles and permissions fail closed."""

    @pytest.mark.parametrize("role", ["auditor", "", None, "superadmin"])
    def test_unknown_role_has_no_permissions(self, role):
        """Test that unknown roles hold no permissions."""
        assert get_role_permissions(role) == frozenset()
        assert not has_permission(role, Permission.VIEW_DASHBOARD)

    def test_unknown_permission_is_denied(self):
        """Test that an unknown permission is denied even to super admin."""
        assert not has_permission(Role.SUPER_ADMIN, "launch_rockets")

    def test_unknown_role_metadata_is_none(self):
        """Test that unknown roles have no metadata."""
        assert get_role_metadata("auditor") is None


class TestPermissionSets:
    """Test suite for any/all checks."""

    def test_has_any_permission(self):
        """Test that any-of is true when one permission is held."""
        assert has_any_permission(Role.CASHIER, [Permission.REFUND_SALE, Permission.CREATE_SALE])
        assert not has_any_permission(Role.CASHIER, [Permission.REFUND_SALE, Permission.VIEW_REPORTS])
        assert not has_any_permission(Role.SUPER_ADMIN, [])

    def test_has_all_permissions_empty_is_true(self):
        """Test that all-of an empty list is true."""
        assert has_all_permissions(Role.CASHIER, [])
        assert has_all_permissions("auditor", [])

    @pytest.mark.parametrize("role", list(Role))
    def test_has_all_agrees_with_has_permission(self, role):
        """Test that all-of agrees with checking each permission."""
        for perms in PERMISSION_CATEGORIES.values():
            expected = all(has_permission(role, p) for p in perms)
            assert has_all_permissions(role, perms) == expected
            assert has_all_permissions(role, perms) == set(perms).issubset(get_role_permissions(role))


class TestDisplayHelpers:
    """Test suite for metadata and naming helpers."""

    def test_permission_name(self):
        """Test that permission ids become title-case names."""
        assert get_permission_name("create_sale") == "Create Sale"
        assert get_permission_name(Permission.VIEW_AUDIT_LOGS) == "View Audit Logs"

    def test_role_metadata(self):
        """Test that role metadata has a display name and color."""
        meta = get_role_metadata(Role.SUPER_ADMIN)
        assert meta.name == "Super Administrator"
        assert meta.color == "indigo"

    def test_every_role_has_catalog_entry(self):
        """Test that every role is in the permission catalog."""
        assert set(ROLE_PERMISSIONS) == set(Role)

    def test_matrix_covers_every_permission(self):
        """Test that the matrix lists every permission per role."""
        matrix = get_permission_matrix()
        listed = {perm for perms in matrix.values() for perm in perms}
        assert listed == {p.value for p in Permission}
        assert matrix["Sales"]["refund_sale"][Role.MANAGER] is True
        assert matrix["Sales"]["refund_sale"][Role.CASHIER] is False

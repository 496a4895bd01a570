"""
Tests for the access guard.

These tests verify:
- Role resolution (signed-in, anonymous, inactive, unrecognized)
- Permission queries through the guard
- Context binding and the require_permission decorator
"""

import pytest

from pharmacy_pos.core.access import (
    FALLBACK_ROLE,
    AccessGuard,
    authenticated,
    clear_current_user,
    get_access_guard,
    get_current_user,
    require_permission,
    set_current_user,
)
from pharmacy_pos.core.audit import AuditAction, AuditResult, AuditService
from pharmacy_pos.exceptions import AuthorizationError
from pharmacy_pos.models import AuthUser, Permission, Role


class TestRoleResolution:
    """Test suite for how the guard picks a role."""

    def test_signed_in_user(self, manager):
        """Test that an active user gets their stored role."""
        guard = AccessGuard(manager)
        assert guard.role is Role.MANAGER
        assert guard.is_authenticated

    def test_anonymous_falls_back_to_cashier(self):
        """Test that no user resolves to the cashier role."""
        guard = AccessGuard(None)
        assert guard.role is FALLBACK_ROLE
        assert not guard.is_authenticated
        assert guard.has_permission(Permission.CREATE_SALE)
        assert not guard.has_permission(Permission.REFUND_SALE)

    def test_inactive_user_falls_back_to_cashier(self, personas):
        """Test that an inactive user is treated as an anonymous cashier."""
        former = personas.get("former_manager")
        guard = AccessGuard(former)
        assert guard.role is Role.CASHIER
        assert not guard.is_authenticated
        assert not guard.has_permission(Permission.REFUND_SALE)

    def test_unrecognized_role_has_no_permissions(self, personas):
        """Test that an unknown stored role grants nothing."""
        legacy = personas.get("legacy_user")
        guard = AccessGuard(legacy)
        assert guard.role is None
        assert guard.permissions() == frozenset()
        assert not guard.has_permission(Permission.VIEW_DASHBOARD)

    def test_user_from_collaborator_record(self):
        """Test that a user record with camelCase keys resolves its role."""
        user = AuthUser.from_dict({"id": 7, "username": "m", "role": "manager", "isActive": True})
        assert AccessGuard(user).role is Role.MANAGER


class TestGuardQueries:
    """Test suite for permission queries."""

    def test_any_and_all(self, pharmacist):
        """Test that any-of and all-of queries follow the role's permissions."""
        guard = AccessGuard(pharmacist)
        assert guard.has_any_permission([Permission.REFUND_SALE, Permission.EDIT_CUSTOMER])
        assert not guard.has_all_permissions([Permission.REFUND_SALE, Permission.EDIT_CUSTOMER])
        assert guard.has_all_permissions([])

    def test_super_admin_has_everything(self, super_admin):
        """Test that super admin holds every permission."""
        assert AccessGuard(super_admin).permissions() == frozenset(Permission)

    def test_describe(self, cashier):
        """Test that the guard describes its user and role."""
        assert AccessGuard(cashier).describe() == "User test-cashier_1 (cashier)"
        assert AccessGuard(None).describe() == "User anonymous (cashier)"


class TestContext:
    """Test suite for the context-bound current user."""

    def test_set_and_clear(self, admin):
        """Test that the current user can be bound and cleared."""
        set_current_user(admin)
        try:
            assert get_current_user() is admin
            assert get_access_guard().role is Role.ADMIN
        finally:
            clear_current_user()
        assert get_current_user() is None

    def test_authenticated_restores_previous_user(self, admin, cashier):
        """Test that nested authenticated blocks restore the outer user."""
        with authenticated(admin) as guard:
            assert guard.role is Role.ADMIN
            with authenticated(cashier):
                assert get_access_guard().role is Role.CASHIER
            assert get_current_user() is admin
        assert get_current_user() is None


class TestRequirePermission:
    """Test suite for the require_permission decorator."""

    def test_allows_permitted_call(self, manager):
        """Test that a permitted user can call the action."""
        @require_permission(Permission.REFUND_SALE)
        def refund(sale_id: str) -> str:
            return f"refunded {sale_id}"

        with authenticated(manager):
            assert refund("s-1") == "refunded s-1"

    def test_denies_without_permission(self, cashier):
        """Test that a user without the permission gets AuthorizationError."""
        @require_permission(Permission.REFUND_SALE)
        def refund(sale_id: str) -> str:
            return f"refunded {sale_id}"

        with authenticated(cashier):
            with pytest.raises(AuthorizationError) as exc_info:
                refund("s-1")

        assert exc_info.value.error_code == "PERMISSION_DENIED"
        assert exc_info.value.details == {"required_permission": "refund_sale", "role": "cashier"}
        assert "refund sale" in exc_info.value.message

    async def test_async_function(self, admin, pharmacist):
        """Test that the decorator guards coroutine functions."""
        @require_permission(Permission.CREATE_USER)
        async def create_user(username: str) -> str:
            return username

        with authenticated(admin):
            assert await create_user("new") == "new"

        with authenticated(pharmacist):
            with pytest.raises(AuthorizationError):
                await create_user("new")

    def test_anonymous_uses_fallback_role(self):
        """Test that anonymous calls are checked against the cashier role."""
        @require_permission(Permission.CREATE_SALE)
        def ring_up() -> bool:
            return True

        assert ring_up() is True

    def test_denial_is_audited(self, cashier, audit: AuditService):
        """Test that a refused call records an access_denied event for the user."""
        @require_permission(Permission.REFUND_SALE, audit=audit)
        def refund(sale_id: str) -> str:
            return f"refunded {sale_id}"

        with authenticated(cashier):
            with pytest.raises(AuthorizationError):
                refund("s-1")

        events = audit.list_events(action=AuditAction.ACCESS_DENIED)
        assert len(events) == 1
        assert events[0].actor_id == cashier.id
        assert events[0].result == AuditResult.DENIED.value
        assert events[0].resource_name == "refund_sale"
        assert events[0].metadata == {"role": "cashier"}

    async def test_anonymous_denial_is_audited(self, audit: AuditService):
        """Test that a refused call with no user is audited without an actor."""
        @require_permission(Permission.DELETE_USER, audit=audit)
        async def delete_user(user_id: str) -> None:
            return None

        with pytest.raises(AuthorizationError):
            await delete_user("u-9")

        assert audit.list_events(action=AuditAction.ACCESS_DENIED)[0].actor_id is None

    def test_allowed_call_is_not_audited(self, manager, audit: AuditService):
        """Test that permitted calls leave no access_denied event."""
        @require_permission(Permission.REFUND_SALE, audit=audit)
        def refund(sale_id: str) -> str:
            return f"refunded {sale_id}"

        with authenticated(manager):
            refund("s-1")

        assert audit.list_events() == []

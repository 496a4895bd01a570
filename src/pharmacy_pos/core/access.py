"""
Access guard.

Query surface used by screens and actions to gate visibility. The guard
resolves the current role from the authenticated user and answers yes/no;
anything that is not an explicit yes is a deny.

Usage:
    from pharmacy_pos.core.access import AccessGuard

    guard = AccessGuard(user)
    if guard.has_permission(Permission.REFUND_SALE):
        show_refund_button()

For call sites without a user in hand, the current user can be bound to the
running context (one register session per context):

    with authenticated(user):
        guard = get_access_guard()
"""

import functools
import inspect
import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from ..exceptions import AuthorizationError
from ..models.auth import AuthUser
from ..models.rbac import Permission, Role
from . import permissions as catalog

if TYPE_CHECKING:
    from .audit import AuditService

logger = logging.getLogger(__name__)

# Lowest-privilege role, used when nobody (or an inactive user) is signed in
FALLBACK_ROLE = Role.CASHIER

_current_user: ContextVar[AuthUser | None] = ContextVar("current_user", default=None)


class AccessGuard:
    """
    Read-only permission checks for one user.

    Role resolution:
    - no user, or an inactive user: ``cashier``
    - a user whose stored role is not one of the five roles: no role, no permissions
    - otherwise the user's role
    """

    def __init__(self, user: AuthUser | None = None):
        self._user = user
        self._role = self._resolve_role(user)

    @staticmethod
    def _resolve_role(user: AuthUser | None) -> Role | None:
        if user is None or not user.is_active:
            return FALLBACK_ROLE

        role = user.resolved_role
        if role is None:
            logger.warning(f"[RBAC] User {user.id} has unrecognized role '{user.role}'")
        return role

    @property
    def user(self) -> AuthUser | None:
        return self._user

    @property
    def role(self) -> Role | None:
        """Effective role, or None when the user's stored role is unrecognized."""
        return self._role

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None and self._user.is_active

    def has_permission(self, permission: Permission | str) -> bool:
        allowed = catalog.has_permission(self._role, permission)
        if not allowed:
            logger.debug(f"[RBAC] {self.describe()} denied {permission}")
        return allowed

    def has_any_permission(self, permissions: Iterable[Permission | str]) -> bool:
        return catalog.has_any_permission(self._role, permissions)

    def has_all_permissions(self, permissions: Iterable[Permission | str]) -> bool:
        return catalog.has_all_permissions(self._role, permissions)

    def permissions(self) -> frozenset[Permission]:
        """All permissions of the effective role."""
        return catalog.get_role_permissions(self._role)

    def describe(self) -> str:
        user_id = self._user.id if self._user else "anonymous"
        role = self._role.value if self._role else "unknown"
        return f"User {user_id} ({role})"


# =============================================================================
# CONTEXT
# =============================================================================

def set_current_user(user: AuthUser | None) -> None:
    """Bind the signed-in user to the current context."""
    _current_user.set(user)


def get_current_user() -> AuthUser | None:
    """Get the signed-in user, or None if nobody is signed in."""
    return _current_user.get()


def clear_current_user() -> None:
    """Sign out of the current context."""
    _current_user.set(None)


@contextmanager
def authenticated(user: AuthUser | None) -> Iterator[AccessGuard]:
    """Bind ``user`` for the duration of the block and yield its guard."""
    token = _current_user.set(user)
    try:
        yield AccessGuard(user)
    finally:
        _current_user.reset(token)


def get_access_guard() -> AccessGuard:
    """Guard for the user bound to the current context."""
    return AccessGuard(get_current_user())


# =============================================================================
# DECORATOR
# =============================================================================

def require_permission(permission: Permission | str, audit: "AuditService | None" = None) -> Callable:
    """
    Decorator factory that refuses to run an action without ``permission``.

    Works on plain and async functions. Raises ``AuthorizationError`` when
    the context user lacks the permission, after recording an
    ``access_denied`` event on ``audit`` when one is given.

    Usage:
        @require_permission(Permission.REFUND_SALE)
        async def refund(sale_id: str):
            ...
    """
    def _check() -> None:
        guard = get_access_guard()
        if not guard.has_permission(permission):
            logger.warning(f"[RBAC] {guard.describe()} lacks permission: {permission}")
            if audit is not None:
                audit.log_access_denied(
                    actor_id=guard.user.id if guard.user else None,
                    permission=str(permission),
                    role=guard.role.value if guard.role else None,
                )
            raise AuthorizationError(
                message=f"You don't have permission to {catalog.get_permission_name(permission).lower()}",
                required_permission=str(permission),
                role=guard.role.value if guard.role else None,
            )

    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                _check()
                return await func(*args, **kwargs)

            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            _check()
            return func(*args, **kwargs)

        return sync_wrapper

    return decorator

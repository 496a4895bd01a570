"""
Role hierarchy.

Decides which roles a role may create, edit or assign. Only ``super_admin``
and ``admin`` manage anyone, and an admin never manages another admin or a
super admin.

``get_assignable_roles`` is the only list a role-selection control may offer.
"""

import logging
from typing import TYPE_CHECKING

from ..exceptions import RoleAssignmentError
from ..models.rbac import Role

if TYPE_CHECKING:
    from .audit import AuditService

logger = logging.getLogger(__name__)

# Rank per role, used only for ordering and comparisons
ROLE_HIERARCHY: dict[Role, int] = {
    Role.SUPER_ADMIN: 5,
    Role.ADMIN: 4,
    Role.MANAGER: 3,
    Role.PHARMACIST: 2,
    Role.CASHIER: 1,
}

# Roles that may not be managed by an admin
_ADMIN_PROTECTED = frozenset({Role.SUPER_ADMIN, Role.ADMIN})

# Password resets follow their own table
_PASSWORD_RESET_TARGETS: dict[Role, frozenset[Role]] = {
    Role.SUPER_ADMIN: frozenset({Role.SUPER_ADMIN, Role.ADMIN}),
    Role.ADMIN: frozenset({Role.MANAGER, Role.PHARMACIST, Role.CASHIER}),
}


def get_role_rank(role: Role | str | None) -> int:
    """Get a role's rank (super_admin=5 ... cashier=1), 0 if unrecognized."""
    resolved = Role.parse(role)
    if resolved is None:
        return 0
    return ROLE_HIERARCHY[resolved]


def roles_by_rank() -> list[Role]:
    """All roles, highest rank first."""
    return sorted(Role, key=lambda r: ROLE_HIERARCHY[r], reverse=True)


def can_manage_role(manager_role: Role | str | None, target_role: Role | str | None) -> bool:
    """
    Check if a role can manage another role.

    - super_admin manages every role, including other super admins and admins
    - admin manages every role except super_admin and admin
    - every other role manages no one
    """
    manager = Role.parse(manager_role)
    target = Role.parse(target_role)
    if manager is None or target is None:
        return False

    if manager is Role.SUPER_ADMIN:
        return True

    if manager is Role.ADMIN:
        return target not in _ADMIN_PROTECTED

    return False


def can_create_user_with_role(creator_role: Role | str | None, new_role: Role | str | None) -> bool:
    """Check if a role can create a user holding ``new_role``."""
    return can_manage_role(creator_role, new_role)


def can_change_user_role(
    manager_role: Role | str | None,
    current_role: Role | str | None,
    new_role: Role | str | None,
) -> bool:
    """
    Check if a role can move a user from ``current_role`` to ``new_role``.

    Both the user's current role and the proposed role must be manageable.
    """
    return can_manage_role(manager_role, current_role) and can_manage_role(manager_role, new_role)


def get_assignable_roles(role: Role | str | None) -> list[Role]:
    """
    Roles that ``role`` may assign, highest rank first.

    Returns:
        - super_admin: all five roles
        - admin: manager, pharmacist, cashier
        - anyone else: empty list
    """
    return [target for target in roles_by_rank() if can_manage_role(role, target)]


def can_reset_password(admin_role: Role | str | None, target_role: Role | str | None) -> bool:
    """
    Check if ``admin_role`` may reset the password of a ``target_role`` user.

    super_admin resets super admin and admin passwords; admin resets manager,
    pharmacist and cashier passwords.
    """
    admin = Role.parse(admin_role)
    target = Role.parse(target_role)
    if admin is None or target is None:
        return False
    return target in _PASSWORD_RESET_TARGETS.get(admin, frozenset())


def validate_role_assignment(
    actor_role: Role | str | None,
    new_role: Role | str | None,
    current_role: Role | str | None = None,
    audit: "AuditService | None" = None,
    actor_id: str | None = None,
    target_user_id: str | None = None,
) -> Role:
    """
    Validate a create-user or change-role request.

    Args:
        actor_role: Role of the user performing the change
        new_role: Role being granted
        current_role: Target user's existing role (None when creating a user)
        audit: Records the attempt as ``role.assign`` when given
        actor_id: ID of the user performing the change (for the audit trail)
        target_user_id: ID of the user being changed (for the audit trail)

    Returns:
        The validated new role

    Raises:
        RoleAssignmentError: If the actor may not grant ``new_role`` or may not
            touch a user holding ``current_role``
    """
    try:
        role = _check_role_assignment(actor_role, new_role, current_role)
    except RoleAssignmentError:
        if audit is not None:
            audit.log_role_assignment(
                actor_id=actor_id or "unknown",
                target_user_id=target_user_id,
                new_role=str(new_role),
                allowed=False,
                current_role=str(current_role) if current_role else None,
            )
        raise

    if audit is not None:
        audit.log_role_assignment(
            actor_id=actor_id or "unknown",
            target_user_id=target_user_id,
            new_role=role.value,
            allowed=True,
            current_role=str(current_role) if current_role else None,
        )
    return role


def _check_role_assignment(
    actor_role: Role | str | None,
    new_role: Role | str | None,
    current_role: Role | str | None,
) -> Role:
    actor = Role.parse(actor_role)
    target = Role.parse(new_role)

    if target is None:
        logger.info(f"[RBAC] Rejected unknown role '{new_role}' requested by {actor_role}")
        raise RoleAssignmentError(
            message=f"Unknown role: {new_role}",
            actor_role=str(actor_role) if actor_role else None,
            target_role=str(new_role) if new_role else None,
        )

    if current_role is not None and not can_manage_role(actor, current_role):
        logger.warning(f"[RBAC] {actor_role} may not change a user holding {current_role}")
        raise RoleAssignmentError(
            message=f"You cannot change the role of a {current_role} user",
            actor_role=str(actor_role) if actor_role else None,
            target_role=str(current_role),
        )

    if target not in get_assignable_roles(actor):
        logger.warning(f"[RBAC] {actor_role} may not assign role {target.value}")
        raise RoleAssignmentError(
            message=f"You cannot assign the {target.value} role",
            actor_role=str(actor_role) if actor_role else None,
            target_role=target.value,
        )

    return target

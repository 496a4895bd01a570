"""
Permission catalog.

Static mapping of each role to the permissions it holds. Lookups never raise:
a role or permission value outside the catalog resolves to "no access".

Usage:
    from pharmacy_pos.core.permissions import has_permission
    from pharmacy_pos.models import Permission, Role

    if has_permission(Role.CASHIER, Permission.CREATE_SALE):
        ...
"""

from collections.abc import Iterable

from ..models.rbac import Permission, Role, RoleMetadata

P = Permission

# Permissions shared by every role that can ring up a sale
_POS_BASICS = frozenset({
    P.VIEW_DASHBOARD,
    P.VIEW_SALES,
    P.CREATE_SALE,
    P.VIEW_SALE_DETAILS,
    P.PRINT_INVOICE,
    P.VIEW_PRODUCTS,
    P.VIEW_INVENTORY,
    P.VIEW_CUSTOMERS,
    P.CREATE_CUSTOMER,
})

_MANAGER = _POS_BASICS | {
    P.REFUND_SALE,
    P.CREATE_PRODUCT,
    P.EDIT_PRODUCT,
    P.DELETE_PRODUCT,
    P.MANAGE_CATEGORIES,
    P.ADJUST_INVENTORY,
    P.TRANSFER_STOCK,
    P.VIEW_LOW_STOCK,
    P.VIEW_PURCHASES,
    P.CREATE_PURCHASE,
    P.EDIT_PURCHASE,
    P.DELETE_PURCHASE,
    P.EDIT_CUSTOMER,
    P.DELETE_CUSTOMER,
    P.VIEW_REPORTS,
    P.EXPORT_REPORTS,
    P.VIEW_USERS,
    P.VIEW_SETTINGS,
    P.VIEW_SUPPLIERS,
    P.CREATE_SUPPLIER,
    P.EDIT_SUPPLIER,
    P.VIEW_AUDIT_LOGS,
}

# Everything except admin management and system configuration
_ADMIN = _MANAGER | {
    P.CREATE_USER,
    P.EDIT_USER,
    P.DELETE_USER,
    P.MANAGE_ROLES,
    P.EDIT_SETTINGS,
    P.DELETE_SUPPLIER,
}

ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.SUPER_ADMIN: frozenset(Permission),
    Role.ADMIN: frozenset(_ADMIN),
    Role.MANAGER: frozenset(_MANAGER),
    Role.PHARMACIST: _POS_BASICS | {
        P.VIEW_LOW_STOCK,
        P.EDIT_CUSTOMER,
        P.VIEW_REPORTS,
        P.VIEW_SUPPLIERS,
    },
    Role.CASHIER: _POS_BASICS,
}

ROLE_METADATA: dict[Role, RoleMetadata] = {
    Role.SUPER_ADMIN: RoleMetadata(
        name="Super Administrator",
        description="Ultimate system access with ability to manage admins",
        color="indigo",
    ),
    Role.ADMIN: RoleMetadata(
        name="Administrator",
        description="Full system access, can create and manage users",
        color="red",
    ),
    Role.MANAGER: RoleMetadata(
        name="Manager",
        description="Manage operations, inventory, and reports",
        color="blue",
    ),
    Role.PHARMACIST: RoleMetadata(
        name="Pharmacist",
        description="Handle prescriptions, sales, and customer service",
        color="green",
    ),
    Role.CASHIER: RoleMetadata(
        name="Cashier",
        description="Process sales and customer transactions",
        color="purple",
    ),
}

# Permission categories for UI grouping (permission matrix)
PERMISSION_CATEGORIES: dict[str, tuple[Permission, ...]] = {
    "Dashboard": (P.VIEW_DASHBOARD,),
    "Sales": (P.VIEW_SALES, P.CREATE_SALE, P.VIEW_SALE_DETAILS, P.REFUND_SALE, P.PRINT_INVOICE),
    "Products": (P.VIEW_PRODUCTS, P.CREATE_PRODUCT, P.EDIT_PRODUCT, P.DELETE_PRODUCT, P.MANAGE_CATEGORIES),
    "Inventory": (P.VIEW_INVENTORY, P.ADJUST_INVENTORY, P.TRANSFER_STOCK, P.VIEW_LOW_STOCK),
    "Purchases": (P.VIEW_PURCHASES, P.CREATE_PURCHASE, P.EDIT_PURCHASE, P.DELETE_PURCHASE),
    "Customers": (P.VIEW_CUSTOMERS, P.CREATE_CUSTOMER, P.EDIT_CUSTOMER, P.DELETE_CUSTOMER),
    "Reports": (P.VIEW_REPORTS, P.EXPORT_REPORTS),
    "Users & Roles": (P.VIEW_USERS, P.CREATE_USER, P.EDIT_USER, P.DELETE_USER, P.MANAGE_ROLES),
    "Admin Management": (P.MANAGE_ADMINS,),
    "Settings": (P.VIEW_SETTINGS, P.EDIT_SETTINGS, P.SYSTEM_CONFIGURATION),
    "Suppliers": (P.VIEW_SUPPLIERS, P.CREATE_SUPPLIER, P.EDIT_SUPPLIER, P.DELETE_SUPPLIER),
    "Audit": (P.VIEW_AUDIT_LOGS,),
}


def _check_catalog() -> None:
    """Fail at import time if a role or permission was left out of the tables."""
    missing_roles = set(Role) - set(ROLE_PERMISSIONS)
    if missing_roles:
        raise RuntimeError(f"Roles missing from permission catalog: {sorted(missing_roles)}")

    missing_meta = set(Role) - set(ROLE_METADATA)
    if missing_meta:
        raise RuntimeError(f"Roles missing metadata: {sorted(missing_meta)}")

    categorized = {p for perms in PERMISSION_CATEGORIES.values() for p in perms}
    uncategorized = set(Permission) - categorized
    if uncategorized:
        raise RuntimeError(f"Permissions missing a category: {sorted(uncategorized)}")


_check_catalog()


# =============================================================================
# LOOKUPS
# =============================================================================

def get_role_permissions(role: Role | str | None) -> frozenset[Permission]:
    """
    Get all permissions for a role.

    Returns an empty set for an unrecognized role.
    """
    resolved = Role.parse(role)
    if resolved is None:
        return frozenset()
    return ROLE_PERMISSIONS[resolved]


def has_permission(role: Role | str | None, permission: Permission | str) -> bool:
    """
    Check if a role holds a permission.

    Args:
        role: Role to check
        permission: The permission being checked

    Returns:
        True if the role holds the permission
    """
    resolved = Permission.parse(permission)
    if resolved is None:
        return False
    return resolved in get_role_permissions(role)


def has_any_permission(role: Role | str | None, permissions: Iterable[Permission | str]) -> bool:
    """
    Check if a role holds at least one of the permissions.

    False for an empty list.
    """
    return any(has_permission(role, p) for p in permissions)


def has_all_permissions(role: Role | str | None, permissions: Iterable[Permission | str]) -> bool:
    """
    Check if a role holds every one of the permissions.

    Vacuously true for an empty list.
    """
    return all(has_permission(role, p) for p in permissions)


def get_role_metadata(role: Role | str | None) -> RoleMetadata | None:
    """Get display metadata for a role, or None if unrecognized."""
    resolved = Role.parse(role)
    if resolved is None:
        return None
    return ROLE_METADATA[resolved]


def get_permission_name(permission: Permission | str) -> str:
    """
    Human-readable permission name.

    Example:
        >>> get_permission_name("create_sale")
        'Create Sale'
    """
    value = permission.value if isinstance(permission, Permission) else str(permission)
    return " ".join(word.capitalize() for word in value.split("_"))


def get_permission_matrix() -> dict[str, dict[str, dict[Role, bool]]]:
    """
    Category -> permission -> role -> granted.

    Feeds the read-only permission matrix on the role management screen.
    """
    return {
        category: {
            perm.value: {role: perm in ROLE_PERMISSIONS[role] for role in Role}
            for perm in perms
        }
        for category, perms in PERMISSION_CATEGORIES.items()
    }

"""
RBAC (Role-Based Access Control) Models.

Roles and permissions are closed enumerations. Both subclass ``str`` so they
compare equal to their wire values ("cashier", "create_sale") and can be
stored or logged without conversion.
"""

from dataclasses import dataclass
from enum import Enum


# =============================================================================
# ENUMS
# =============================================================================

class Role(str, Enum):
    """The five operator roles, highest privilege first."""
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    MANAGER = "manager"
    PHARMACIST = "pharmacist"
    CASHIER = "cashier"

    @classmethod
    def parse(cls, value: "str | Role | None") -> "Role | None":
        """
        Resolve a stored role string.

        Returns None for anything that is not one of the five roles.
        """
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


class Permission(str, Enum):
    """Atomic authorizable actions."""
    # Dashboard
    VIEW_DASHBOARD = "view_dashboard"
    # Sales
    VIEW_SALES = "view_sales"
    CREATE_SALE = "create_sale"
    VIEW_SALE_DETAILS = "view_sale_details"
    REFUND_SALE = "refund_sale"
    PRINT_INVOICE = "print_invoice"
    # Products
    VIEW_PRODUCTS = "view_products"
    CREATE_PRODUCT = "create_product"
    EDIT_PRODUCT = "edit_product"
    DELETE_PRODUCT = "delete_product"
    MANAGE_CATEGORIES = "manage_categories"
    # Inventory
    VIEW_INVENTORY = "view_inventory"
    ADJUST_INVENTORY = "adjust_inventory"
    TRANSFER_STOCK = "transfer_stock"
    VIEW_LOW_STOCK = "view_low_stock"
    # Purchases
    VIEW_PURCHASES = "view_purchases"
    CREATE_PURCHASE = "create_purchase"
    EDIT_PURCHASE = "edit_purchase"
    DELETE_PURCHASE = "delete_purchase"
    # Customers
    VIEW_CUSTOMERS = "view_customers"
    CREATE_CUSTOMER = "create_customer"
    EDIT_CUSTOMER = "edit_customer"
    DELETE_CUSTOMER = "delete_customer"
    # Reports
    VIEW_REPORTS = "view_reports"
    EXPORT_REPORTS = "export_reports"
    # Users & Roles
    VIEW_USERS = "view_users"
    CREATE_USER = "create_user"
    EDIT_USER = "edit_user"
    DELETE_USER = "delete_user"
    MANAGE_ROLES = "manage_roles"
    # Settings
    VIEW_SETTINGS = "view_settings"
    EDIT_SETTINGS = "edit_settings"
    # Suppliers
    VIEW_SUPPLIERS = "view_suppliers"
    CREATE_SUPPLIER = "create_supplier"
    EDIT_SUPPLIER = "edit_supplier"
    DELETE_SUPPLIER = "delete_supplier"
    # Audit
    VIEW_AUDIT_LOGS = "view_audit_logs"
    # Super admin only
    MANAGE_ADMINS = "manage_admins"
    SYSTEM_CONFIGURATION = "system_configuration"

    @classmethod
    def parse(cls, value: "str | Permission | None") -> "Permission | None":
        """Resolve a permission string, or None if it is not in the catalog."""
        if isinstance(value, Permission):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


# =============================================================================
# DATACLASS MODELS
# =============================================================================

@dataclass(frozen=True)
class RoleMetadata:
    """Display metadata for a role. Carries no authorization semantics."""
    name: str
    description: str
    color: str

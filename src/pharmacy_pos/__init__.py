"""
Pharmacy POS cores.

Role-based access control and the sales pipeline of a pharmacy point of
sale: who may do what, and how a cart becomes a priced, persisted sale.

Usage:
    from pharmacy_pos import AccessGuard, Permission, PosSession, CheckoutOrchestrator

    guard = AccessGuard(user)
    if guard.has_permission(Permission.CREATE_SALE):
        session = PosSession()
        session.add_item(product_line)
        session.set_tendered("50")
        completed = await CheckoutOrchestrator(backend).checkout(session, user)

Role hierarchy:
    super_admin > admin > manager > pharmacist > cashier
"""

from .config import PosConfig, get_pos_config
from .core import (
    AccessGuard,
    AuditService,
    Cart,
    CheckoutOrchestrator,
    PosSession,
    PricingContext,
    authenticated,
    calculate_totals,
    can_manage_role,
    get_assignable_roles,
    get_role_permissions,
    has_permission,
    require_permission,
)
from .db import MemorySalesBackend, SalesBackend
from .exceptions import (
    AuthorizationError,
    EmptyCartError,
    InsufficientPaymentError,
    POSError,
    PointsRedemptionError,
    RoleAssignmentError,
    SalePersistenceError,
    ValidationRejectedError,
)
from .models import (
    AuthUser,
    CartItem,
    CompletedSale,
    Customer,
    Permission,
    PricingBreakdown,
    Role,
    SaleItemSnapshot,
    SaleRecord,
)

__version__ = "1.0.0"

__all__ = [
    # Config
    "PosConfig",
    "get_pos_config",
    # Models
    "Role",
    "Permission",
    "AuthUser",
    "CartItem",
    "Customer",
    "PricingBreakdown",
    "SaleItemSnapshot",
    "SaleRecord",
    "CompletedSale",
    # RBAC
    "AccessGuard",
    "authenticated",
    "require_permission",
    "get_role_permissions",
    "has_permission",
    "can_manage_role",
    "get_assignable_roles",
    # Sales
    "Cart",
    "PricingContext",
    "calculate_totals",
    "PosSession",
    "CheckoutOrchestrator",
    "SalesBackend",
    "MemorySalesBackend",
    "AuditService",
    # Exceptions
    "POSError",
    "ValidationRejectedError",
    "EmptyCartError",
    "InsufficientPaymentError",
    "PointsRedemptionError",
    "RoleAssignmentError",
    "AuthorizationError",
    "SalePersistenceError",
]

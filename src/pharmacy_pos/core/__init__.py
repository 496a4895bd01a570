"""
POS cores: RBAC (permissions, hierarchy, access guard) and sales
(cart, pricing, checkout), plus the audit trail.
"""

from .access import (
    AccessGuard,
    authenticated,
    clear_current_user,
    get_access_guard,
    get_current_user,
    require_permission,
    set_current_user,
)
from .audit import AuditAction, AuditEvent, AuditResult, AuditService
from .cart import Cart, CartView
from .checkout import (
    CheckoutOrchestrator,
    PosSession,
    build_sale_items,
    generate_invoice_number,
)
from .hierarchy import (
    ROLE_HIERARCHY,
    can_change_user_role,
    can_create_user_with_role,
    can_manage_role,
    can_reset_password,
    get_assignable_roles,
    get_role_rank,
    validate_role_assignment,
)
from .permissions import (
    PERMISSION_CATEGORIES,
    ROLE_METADATA,
    ROLE_PERMISSIONS,
    get_permission_matrix,
    get_permission_name,
    get_role_metadata,
    get_role_permissions,
    has_all_permissions,
    has_any_permission,
    has_permission,
)
from .pricing import (
    PricingContext,
    calculate_breakdown,
    calculate_change,
    calculate_points_earned,
    calculate_totals,
    get_max_redeemable_points,
    is_payment_sufficient,
    parse_points,
    recompute_from_snapshot,
    validate_points_redemption,
)

__all__ = [
    # Permission catalog
    "ROLE_PERMISSIONS",
    "ROLE_METADATA",
    "PERMISSION_CATEGORIES",
    "get_role_permissions",
    "has_permission",
    "has_any_permission",
    "has_all_permissions",
    "get_role_metadata",
    "get_permission_name",
    "get_permission_matrix",
    # Hierarchy
    "ROLE_HIERARCHY",
    "get_role_rank",
    "can_manage_role",
    "can_create_user_with_role",
    "can_change_user_role",
    "get_assignable_roles",
    "can_reset_password",
    "validate_role_assignment",
    # Access guard
    "AccessGuard",
    "authenticated",
    "set_current_user",
    "get_current_user",
    "clear_current_user",
    "get_access_guard",
    "require_permission",
    # Cart & pricing
    "Cart",
    "CartView",
    "PricingContext",
    "calculate_breakdown",
    "calculate_totals",
    "recompute_from_snapshot",
    "get_max_redeemable_points",
    "parse_points",
    "validate_points_redemption",
    "calculate_points_earned",
    "calculate_change",
    "is_payment_sufficient",
    # Checkout
    "PosSession",
    "CheckoutOrchestrator",
    "generate_invoice_number",
    "build_sale_items",
    # Audit
    "AuditAction",
    "AuditResult",
    "AuditEvent",
    "AuditService",
]

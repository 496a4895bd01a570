"""
Data models for the POS cores.

Enums and dataclasses for RBAC, Pydantic models for cart lines and sales.
"""

from .auth import AuthUser
from .cart import CartItem
from .rbac import Permission, Role, RoleMetadata
from .sale import (
    CompletedSale,
    Customer,
    PricingBreakdown,
    SaleItemSnapshot,
    SaleRecord,
)

__all__ = [
    # RBAC
    "Role",
    "Permission",
    "RoleMetadata",
    "AuthUser",
    # Cart
    "CartItem",
    # Sale
    "Customer",
    "PricingBreakdown",
    "SaleItemSnapshot",
    "SaleRecord",
    "CompletedSale",
]

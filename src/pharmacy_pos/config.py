"""
POS Configuration.

Loaded from environment variables (prefix ``POS_``) with sensible defaults.

Note: The pricing engine and RBAC model never read the environment directly.
Components accept their settings as constructor arguments and only fall back
to ``get_pos_config()`` when none are given.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PosConfig(BaseSettings):
    """Store and register configuration."""

    model_config = SettingsConfigDict(
        env_prefix="POS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # ENVIRONMENT
    # =========================================================================

    environment: Literal["local", "development", "production", "test"] = Field(
        default="local",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_json: bool = Field(
        default=False,
        description="Emit JSON log lines instead of console output",
    )

    # =========================================================================
    # STORE
    # =========================================================================

    store_name: str = Field(default="", description="Store name printed on receipts")
    currency: str = Field(default="USD", description="Currency code used for display")
    tax_rate: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Store-wide tax rate percent applied at checkout",
    )

    # =========================================================================
    # LOYALTY
    # =========================================================================

    point_value: Decimal = Field(
        default=Decimal("0.10"),
        gt=0,
        description="Monetary value of one redeemed loyalty point",
    )
    points_earn_threshold: Decimal = Field(
        default=Decimal("10"),
        gt=0,
        description="Amount spent per loyalty point earned",
    )

    # =========================================================================
    # CHECKOUT
    # =========================================================================

    invoice_prefix: str = Field(default="INV", description="Invoice number prefix")
    default_payment_method: str = Field(
        default="cash",
        description="Payment method restored after each checkout",
    )
    audit_enabled: bool = Field(
        default=True,
        description="Record audit events for sales and role changes",
    )

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        return self.environment == "test"


@lru_cache
def get_pos_config() -> PosConfig:
    """Get cached POS config instance."""
    return PosConfig()


# Global instance
pos_config = get_pos_config()

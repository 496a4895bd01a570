"""
Sale data models.

Pydantic models for the checkout-time breakdown and the persisted sale
snapshot. Snapshots are frozen: later catalog edits must not change a
historical invoice.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..utils.currency import DEFAULT_CURRENCY, format_currency, quantize_money

MONEY_FIELDS = (
    "subtotal",
    "line_discount",
    "transaction_discount",
    "points_discount",
    "discount_amount",
    "taxable_amount",
    "tax_amount",
    "total",
)


class Customer(BaseModel):
    """Customer as supplied by the Customers collaborator."""

    id: str = Field(description="Customer id")
    name: str = Field(default="", description="Display name")
    phone: str | None = Field(default=None, description="Phone number")
    email: str | None = Field(default=None, description="Email address")
    loyalty_points: int = Field(default=0, ge=0, description="Available point balance")


class PricingBreakdown(BaseModel):
    """
    Finalized totals for one checkout attempt.

    Amounts are unrounded; call ``rounded()`` or ``formatted()`` for display.
    """

    model_config = ConfigDict(frozen=True)

    subtotal: Decimal
    line_discount: Decimal = Decimal("0")
    transaction_discount: Decimal = Decimal("0")
    points_discount: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    taxable_amount: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    points_redeemed: int = 0

    def rounded(self, currency: str = DEFAULT_CURRENCY) -> dict[str, Decimal]:
        """Money fields rounded to the currency's minor unit."""
        return {name: quantize_money(getattr(self, name), currency) for name in MONEY_FIELDS}

    def formatted(self, currency: str = DEFAULT_CURRENCY) -> dict[str, str]:
        """Money fields as display strings."""
        return {name: format_currency(getattr(self, name), currency) for name in MONEY_FIELDS}


class SaleItemSnapshot(BaseModel):
    """Immutable copy of one cart line at the moment of sale."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    product_name: str
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    discount_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0)
    subtotal: Decimal = Field(description="unit_price x quantity")
    barcode: str | None = None
    batch_number: str | None = None
    expiry_date: str | None = None


class SaleRecord(BaseModel):
    """Sale header handed to the Sales collaborator."""

    model_config = ConfigDict(frozen=True)

    invoice_number: str
    user_id: str
    customer_id: str | None = None
    account_id: str | None = None
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    change_amount: Decimal
    payment_method: str = "cash"
    status: str = "completed"
    points_redeemed: int = 0
    discount_percent: Decimal = Decimal("0")
    tax_rate: Decimal = Decimal("0")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CompletedSale(BaseModel):
    """Result of a successful checkout, used for the sale-complete receipt."""

    model_config = ConfigDict(frozen=True)

    sale_id: str
    sale: SaleRecord
    items: tuple[SaleItemSnapshot, ...]
    breakdown: PricingBreakdown
    customer_name: str | None = None
    points_earned: int = 0

    @property
    def invoice_number(self) -> str:
        return self.sale.invoice_number

    def to_receipt(self, currency: str = DEFAULT_CURRENCY) -> dict[str, Any]:
        """Receipt-ready dictionary with amounts formatted for display."""
        return {
            "invoice_number": self.sale.invoice_number,
            "customer_name": self.customer_name,
            "date": self.sale.created_at.isoformat(),
            "items": [
                {
                    "product_name": item.product_name,
                    "quantity": item.quantity,
                    "unit_price": format_currency(item.unit_price, currency),
                    "discount_percent": str(item.discount_percent),
                    "subtotal": format_currency(item.subtotal, currency),
                }
                for item in self.items
            ],
            "subtotal": format_currency(self.sale.subtotal, currency),
            "discount_amount": format_currency(self.sale.discount_amount, currency),
            "tax_amount": format_currency(self.sale.tax_amount, currency),
            "total_amount": format_currency(self.sale.total_amount, currency),
            "paid_amount": format_currency(self.sale.paid_amount, currency),
            "change_amount": format_currency(self.sale.change_amount, currency),
            "payment_method": self.sale.payment_method,
            "points_redeemed": self.sale.points_redeemed,
            "points_earned": self.points_earned,
        }

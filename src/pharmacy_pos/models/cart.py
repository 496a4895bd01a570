"""
Cart line item model.

Pydantic model so catalog defaults arriving from the Products collaborator
are validated once, when the line is created or a field is reassigned.
"""

import uuid
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.currency import convert_to_decimal

HUNDRED = Decimal("100")


def new_line_id() -> str:
    """Surrogate id for a cart line (distinct from the product id)."""
    return str(uuid.uuid4())


class CartItem(BaseModel):
    """
    One line of the active transaction.

    Identity is ``id``; ``product_id`` is unique within a cart because adding
    a product that is already present merges into the existing line.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=new_line_id, description="Surrogate line id")
    product_id: str = Field(description="Product id from the catalog")
    name: str = Field(description="Display name")
    price: Decimal = Field(ge=0, description="Unit price")
    quantity: int = Field(gt=0, description="Units on this line")
    discount: Decimal = Field(default=Decimal("0"), ge=0, le=100, description="Line discount percent")
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, description="Line tax rate percent")

    # Optional catalog extras carried into the sale snapshot
    barcode: str | None = Field(default=None, description="Barcode or SKU")
    batch_number: str | None = Field(default=None, description="Dispensed batch")
    expiry_date: str | None = Field(default=None, description="Batch expiry date")

    @field_validator("price", "discount", "tax_rate", mode="before")
    @classmethod
    def coerce_decimal(cls, v: Any) -> Decimal:
        """Convert numeric input to Decimal without float artifacts."""
        if v is None:
            return Decimal("0")
        return convert_to_decimal(v)

    # =========================================================================
    # DERIVED AMOUNTS
    # =========================================================================

    @property
    def line_total(self) -> Decimal:
        """price x quantity, before any discount."""
        return self.price * self.quantity

    @property
    def discount_amount(self) -> Decimal:
        """Line discount applied to this line's own total."""
        return self.line_total * self.discount / HUNDRED

    @property
    def taxable_amount(self) -> Decimal:
        """Post-discount line amount."""
        return self.line_total - self.discount_amount

    @property
    def tax_amount(self) -> Decimal:
        """Line tax, charged on the post-discount amount."""
        return self.taxable_amount * self.tax_rate / HUNDRED

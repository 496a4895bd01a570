"""
Pricing calculator.

Pure functions turning a cart and the transaction inputs into a finalized
breakdown. No rounding happens here; amounts are rounded for display only
(see ``PricingBreakdown.rounded``).

Formula (one formula, used for display, checkout and snapshot recompute):

    subtotal             = sum(price x quantity)
    line_discount        = sum(line_total x line_discount% / 100)
    transaction_discount = subtotal x discount% / 100
    points_discount      = points_redeemed x point_value
    discount_amount      = min(subtotal, line + transaction + points)
    taxable_amount       = max(0, subtotal - discount_amount)
    tax_amount           = taxable_amount x tax_rate / 100
    total                = subtotal - discount_amount + tax_amount
    change               = max(0, tendered - total)
"""

import logging
import math
from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from ..exceptions import PointsRedemptionError
from ..models.cart import HUNDRED
from ..models.sale import PricingBreakdown, SaleItemSnapshot
from ..utils.currency import convert_to_decimal
from .cart import Cart

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# 1 point = 0.10 currency units of discount
POINT_VALUE = Decimal("0.10")

# 1 point earned per 10 currency units spent
POINTS_EARN_THRESHOLD = Decimal("10")

_POINTS = TypeAdapter(int)


class PricingContext(BaseModel):
    """
    Transaction-level inputs for one checkout attempt.

    Lives next to the cart, never on it, and is discarded once the sale
    completes or is abandoned.
    """

    model_config = ConfigDict(validate_assignment=True)

    discount_percent: Decimal = Field(default=ZERO, ge=0, le=100, description="Transaction discount percent")
    points_to_redeem: int = Field(default=0, ge=0, description="Loyalty points to redeem")
    tax_rate: Decimal = Field(default=ZERO, ge=0, description="Store-wide tax rate percent")
    amount_tendered: Decimal = Field(default=ZERO, ge=0, description="Cash or payment received")
    payment_method: str = Field(default="cash", description="Payment method or account type")
    account_id: str | None = Field(default=None, description="Selected payment account")

    @field_validator("discount_percent", "tax_rate", "amount_tendered", mode="before")
    @classmethod
    def coerce_decimal(cls, v: Any) -> Decimal:
        """Blank input counts as zero."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return ZERO
        return convert_to_decimal(v)

    @field_validator("points_to_redeem", mode="before")
    @classmethod
    def coerce_points(cls, v: Any) -> Any:
        """Blank input counts as zero."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return 0
        return v


# =============================================================================
# LOYALTY
# =============================================================================

def parse_points(value: Any) -> int:
    """
    Points as typed into the redeem field.

    Blank counts as zero; whole numbers given as text are accepted.

    Raises:
        PointsRedemptionError: If the value is not a whole number
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0
    if isinstance(value, str):
        value = value.strip()
    try:
        return _POINTS.validate_python(value)
    except ValidationError as e:
        raise PointsRedemptionError(message=f"Invalid points value: {value!r}") from e


def get_max_redeemable_points(
    subtotal: Decimal,
    available_points: int,
    point_value: Decimal = POINT_VALUE,
) -> int:
    """
    Most points a customer can redeem against this subtotal.

    ``min(available_points, floor(subtotal / point_value))``: points never buy
    more than the cart is worth.
    """
    if available_points <= 0 or subtotal <= 0:
        return 0
    max_by_subtotal = math.floor(convert_to_decimal(subtotal) / convert_to_decimal(point_value))
    return min(int(available_points), int(max_by_subtotal))


def validate_points_redemption(points: int | str, max_redeemable: int) -> int:
    """
    Check a redemption request against the allowed maximum.

    Raises:
        PointsRedemptionError: If ``points`` is not a whole number, is
            negative or is above the maximum
    """
    points = parse_points(points)
    if points < 0:
        raise PointsRedemptionError(
            message="Points to redeem cannot be negative",
            requested=points,
            maximum=max_redeemable,
        )
    if points > max_redeemable:
        raise PointsRedemptionError(
            message=f"Cannot redeem {points} points (maximum {max_redeemable})",
            requested=points,
            maximum=max_redeemable,
        )
    return points


def calculate_points_earned(
    total: Decimal,
    threshold: Decimal = POINTS_EARN_THRESHOLD,
) -> int:
    """Loyalty points earned on a sale total (1 per ``threshold`` spent)."""
    if total <= 0:
        return 0
    return int(math.floor(convert_to_decimal(total) / convert_to_decimal(threshold)))


# =============================================================================
# TOTALS
# =============================================================================

def calculate_breakdown(
    subtotal: Decimal,
    line_discount: Decimal = ZERO,
    discount_percent: Decimal = ZERO,
    points_redeemed: int = 0,
    tax_rate: Decimal = ZERO,
    point_value: Decimal = POINT_VALUE,
) -> PricingBreakdown:
    """
    Core arithmetic shared by live carts and persisted snapshots.

    Args:
        subtotal: Sum of price x quantity
        line_discount: Sum of per-line discount amounts
        discount_percent: Transaction-level discount percent (on the subtotal)
        points_redeemed: Loyalty points converted to discount
        tax_rate: Store-wide tax rate percent
        point_value: Monetary value of one point

    Returns:
        Unrounded PricingBreakdown
    """
    subtotal = convert_to_decimal(subtotal)
    line_discount = convert_to_decimal(line_discount)
    discount_percent = convert_to_decimal(discount_percent)
    tax_rate = convert_to_decimal(tax_rate)
    point_value = convert_to_decimal(point_value)

    transaction_discount = subtotal * discount_percent / HUNDRED
    points_discount = points_redeemed * point_value

    combined = line_discount + transaction_discount + points_discount
    discount_amount = min(combined, subtotal) if subtotal > 0 else ZERO
    if combined > discount_amount:
        logger.info(
            f"[PRICING] Discounts {combined} exceed subtotal {subtotal}; capped"
        )

    taxable_amount = max(ZERO, subtotal - discount_amount)
    tax_amount = taxable_amount * tax_rate / HUNDRED
    total = subtotal - discount_amount + tax_amount

    return PricingBreakdown(
        subtotal=subtotal,
        line_discount=line_discount,
        transaction_discount=transaction_discount,
        points_discount=points_discount,
        discount_amount=discount_amount,
        taxable_amount=taxable_amount,
        tax_amount=tax_amount,
        total=total,
        points_redeemed=points_redeemed,
    )


def calculate_totals(
    cart: Cart,
    context: PricingContext,
    point_value: Decimal = POINT_VALUE,
) -> PricingBreakdown:
    """Breakdown for the live cart under the given transaction inputs."""
    return calculate_breakdown(
        subtotal=cart.get_subtotal(),
        line_discount=cart.get_discount_amount(),
        discount_percent=context.discount_percent,
        points_redeemed=context.points_to_redeem,
        tax_rate=context.tax_rate,
        point_value=point_value,
    )


def recompute_from_snapshot(
    items: Iterable[SaleItemSnapshot],
    discount_percent: Decimal = ZERO,
    points_redeemed: int = 0,
    tax_rate: Decimal = ZERO,
    point_value: Decimal = POINT_VALUE,
) -> PricingBreakdown:
    """
    Rebuild the breakdown from persisted sale lines.

    Uses the same arithmetic as the live cart, so a sale re-read from storage
    reports the totals shown at checkout.
    """
    subtotal = ZERO
    line_discount = ZERO
    for item in items:
        subtotal += item.subtotal
        line_discount += item.subtotal * item.discount_percent / HUNDRED

    return calculate_breakdown(
        subtotal=subtotal,
        line_discount=line_discount,
        discount_percent=discount_percent,
        points_redeemed=points_redeemed,
        tax_rate=tax_rate,
        point_value=point_value,
    )


# =============================================================================
# PAYMENT
# =============================================================================

def calculate_change(total: Decimal, tendered: Decimal) -> Decimal:
    """Change due, never negative."""
    return max(ZERO, convert_to_decimal(tendered) - convert_to_decimal(total))


def is_payment_sufficient(total: Decimal, tendered: Decimal) -> bool:
    """True if the tendered amount covers the total."""
    return convert_to_decimal(tendered) >= convert_to_decimal(total)

"""
Checkout.

``PosSession`` is the explicitly owned register state: the cart, the
transaction pricing context and the selected customer. ``CheckoutOrchestrator``
turns a session into a persisted sale.

Usage:
    session = PosSession(tax_rate=Decimal("5"))
    session.add_item({"product_id": "p1", "name": "Paracetamol", "price": "4.50", "quantity": 2})
    session.set_tendered("20")

    orchestrator = CheckoutOrchestrator(backend=MemorySalesBackend())
    completed = await orchestrator.checkout(session, user)
"""

import functools
import logging
import threading
import time
import uuid
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from decimal import Decimal
from typing import Any

from pydantic import TypeAdapter, ValidationError

from ..config import PosConfig, get_pos_config
from ..db.base import SalesBackend
from ..exceptions import (
    EmptyCartError,
    InsufficientPaymentError,
    SalePersistenceError,
    ValidationRejectedError,
)
from ..models.auth import AuthUser
from ..models.cart import CartItem
from ..models.sale import CompletedSale, Customer, PricingBreakdown, SaleItemSnapshot, SaleRecord
from ..utils.currency import parse_tendered_amount, quantize_money
from ..utils.logging import session_context
from .audit import AuditService
from .cart import Cart, CartView
from .pricing import (
    PricingContext,
    calculate_change,
    calculate_points_earned,
    calculate_totals,
    get_max_redeemable_points,
    is_payment_sufficient,
    validate_points_redemption,
)

logger = logging.getLogger(__name__)

_QUANTITY = TypeAdapter(int)


# =============================================================================
# INVOICE NUMBERS
# =============================================================================

_invoice_lock = threading.Lock()
_last_invoice_ms = 0


def generate_invoice_number(prefix: str = "INV", now_ms: int | None = None) -> str:
    """
    Invoice number of the form ``{prefix}-{epoch milliseconds}``.

    Two calls in the same millisecond get consecutive numbers, so numbers
    never repeat within a process.
    """
    global _last_invoice_ms

    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000

    with _invoice_lock:
        stamp = max(now_ms, _last_invoice_ms + 1)
        _last_invoice_ms = stamp

    return f"{prefix}-{stamp}"


def build_sale_items(cart: Iterable[CartItem]) -> list[SaleItemSnapshot]:
    """Snapshot every cart line, in cart order."""
    return [
        SaleItemSnapshot(
            product_id=item.product_id,
            product_name=item.name,
            quantity=item.quantity,
            unit_price=item.price,
            discount_percent=item.discount,
            tax_rate=item.tax_rate,
            subtotal=item.line_total,
            barcode=item.barcode,
            batch_number=item.batch_number,
            expiry_date=item.expiry_date,
        )
        for item in cart
    ]


# =============================================================================
# SESSION
# =============================================================================

def _in_session(method: Callable) -> Callable:
    """Run a session method with its register session bound for logging."""
    @functools.wraps(method)
    def wrapper(self: "PosSession", *args: Any, **kwargs: Any) -> Any:
        with session_context(self.session_id):
            return method(self, *args, **kwargs)

    return wrapper


@contextmanager
def _rejecting_invalid_input() -> Iterator[None]:
    """Surface pydantic validation failures as ``ValidationRejectedError``."""
    try:
        yield
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        message = f"{field}: {error['msg']}" if field else error["msg"]
        logger.info(f"[CART] Rejected input: {message}")
        raise ValidationRejectedError(message=message) from e


class PosSession:
    """
    State of one register session.

    All changes go through the session so they can be refused while a
    checkout is waiting on the Sales collaborator. ``cart`` is a read-only
    view; invalid input raises ``ValidationRejectedError``.
    """

    def __init__(
        self,
        tax_rate: Decimal | str | int | None = None,
        point_value: Decimal | None = None,
        default_payment_method: str | None = None,
        config: PosConfig | None = None,
        session_id: str | None = None,
    ):
        config = config or get_pos_config()

        self.session_id = session_id or uuid.uuid4().hex[:8]
        self.tax_rate = Decimal(str(tax_rate)) if tax_rate is not None else config.tax_rate
        self.point_value = point_value if point_value is not None else config.point_value
        self.default_payment_method = default_payment_method or config.default_payment_method

        self._cart = Cart()
        self.customer: Customer | None = None
        self.context = self._new_context()
        self._checkout_in_progress = False

    def _new_context(self) -> PricingContext:
        return PricingContext(tax_rate=self.tax_rate, payment_method=self.default_payment_method)

    @property
    def cart(self) -> CartView:
        return CartView(self._cart)

    # =========================================================================
    # CHECKOUT GUARD
    # =========================================================================

    @property
    def checkout_in_progress(self) -> bool:
        return self._checkout_in_progress

    def begin_checkout(self) -> None:
        """Lock the session while a sale is being stored."""
        self._ensure_mutable()
        self._checkout_in_progress = True

    def end_checkout(self) -> None:
        self._checkout_in_progress = False

    def _ensure_mutable(self) -> None:
        if self._checkout_in_progress:
            logger.info("[CART] Change refused while checkout is in progress")
            raise ValidationRejectedError(
                message="Checkout in progress, please wait",
                error_code="CHECKOUT_IN_PROGRESS",
            )

    def _set_context(self, **values: Any) -> None:
        self._ensure_mutable()
        with _rejecting_invalid_input():
            for field, value in values.items():
                setattr(self.context, field, value)

    # =========================================================================
    # CART
    # =========================================================================

    @_in_session
    def add_item(self, item: CartItem | dict[str, Any]) -> CartItem:
        self._ensure_mutable()
        with _rejecting_invalid_input():
            return self._cart.add_item(item).model_copy()

    @_in_session
    def remove_item(self, item_id: str) -> None:
        self._ensure_mutable()
        self._cart.remove_item(item_id)

    @_in_session
    def update_quantity(self, item_id: str, quantity: int) -> None:
        self._ensure_mutable()
        with _rejecting_invalid_input():
            quantity = _QUANTITY.validate_python(quantity)
            self._cart.update_quantity(item_id, quantity)

    @_in_session
    def update_discount(self, item_id: str, discount: Decimal | float | int | str) -> None:
        self._ensure_mutable()
        with _rejecting_invalid_input():
            self._cart.update_discount(item_id, discount)

    # =========================================================================
    # CUSTOMER & TRANSACTION INPUTS
    # =========================================================================

    @_in_session
    def set_customer(self, customer: Customer | None) -> None:
        """Select a customer (or none). Any pending point redemption is dropped."""
        self._ensure_mutable()
        self.customer = customer
        self._cart.set_customer(customer.id if customer else None)
        self.context.points_to_redeem = 0

    def max_redeemable_points(self) -> int:
        if self.customer is None:
            return 0
        return get_max_redeemable_points(
            self._cart.get_subtotal(),
            self.customer.loyalty_points,
            self.point_value,
        )

    @_in_session
    def set_points_to_redeem(self, points: int | str | None) -> None:
        """
        Redeem loyalty points against this sale.

        Raises:
            PointsRedemptionError: If ``points`` is not a whole number, is
                negative or is above ``max_redeemable_points()``
        """
        self._ensure_mutable()
        points = validate_points_redemption(points, self.max_redeemable_points())
        self._set_context(points_to_redeem=points)

    @_in_session
    def set_discount_percent(self, percent: Decimal | float | int | str | None) -> None:
        self._set_context(discount_percent=percent)

    @_in_session
    def set_tendered(self, amount: Any) -> None:
        """Amount received from the customer. Blank or unparseable input counts as zero."""
        self._set_context(amount_tendered=parse_tendered_amount(amount))

    @_in_session
    def select_payment(self, payment_method: str, account_id: str | None = None) -> None:
        self._set_context(payment_method=payment_method, account_id=account_id)

    @_in_session
    def reset(self) -> None:
        """Clear cart, customer and transaction inputs."""
        self._ensure_mutable()
        self._cart.clear_cart()
        self.customer = None
        self.context = self._new_context()
        logger.debug("[CART] Session reset")

    # =========================================================================
    # DERIVED
    # =========================================================================

    def breakdown(self) -> PricingBreakdown:
        return calculate_totals(self._cart, self.context, self.point_value)

    def amount_due(self) -> Decimal:
        """Final total as charged, rounded to cents."""
        return quantize_money(self.breakdown().total)

    def change(self) -> Decimal:
        return calculate_change(self.amount_due(), self.context.amount_tendered)

    def can_checkout(self) -> bool:
        return (
            not self._cart.is_empty
            and not self._checkout_in_progress
            and is_payment_sufficient(self.amount_due(), self.context.amount_tendered)
        )


# =============================================================================
# ORCHESTRATOR
# =============================================================================

class CheckoutOrchestrator:
    """Validates a session, persists the sale and resets the session."""

    def __init__(
        self,
        backend: SalesBackend,
        audit: AuditService | None = None,
        config: PosConfig | None = None,
    ):
        self.config = config or get_pos_config()
        self.backend = backend
        self.audit = audit or AuditService(enabled=self.config.audit_enabled)

    def validate(self, session: PosSession) -> PricingBreakdown:
        """
        Check the checkout preconditions without touching any state.

        Raises:
            ValidationRejectedError: Checkout already in progress
            EmptyCartError: No items in the cart
            PointsRedemptionError: Redemption no longer fits the cart or balance
            InsufficientPaymentError: Tendered amount below the final total
        """
        if session.checkout_in_progress:
            raise ValidationRejectedError(
                message="Checkout in progress, please wait",
                error_code="CHECKOUT_IN_PROGRESS",
            )

        if session.cart.is_empty:
            logger.info("[CHECKOUT] Rejected: cart is empty")
            raise EmptyCartError()

        # Items may have been removed since the points were chosen
        validate_points_redemption(session.context.points_to_redeem, session.max_redeemable_points())

        breakdown = session.breakdown()
        total = quantize_money(breakdown.total, self.config.currency)
        tendered = session.context.amount_tendered
        if not is_payment_sufficient(total, tendered):
            logger.info(f"[CHECKOUT] Rejected: tendered {tendered} < total {total}")
            raise InsufficientPaymentError(tendered=tendered, total=total)

        return breakdown

    async def checkout(self, session: PosSession, user: AuthUser) -> CompletedSale:
        """
        Complete the sale held in ``session``.

        On success the session is reset and the completed sale is returned
        for the receipt. On any failure the session is left exactly as it was.
        Everything logged meanwhile carries the session id and ``user.id``.

        Raises:
            ValidationRejectedError: A precondition failed (see ``validate``)
            SalePersistenceError: The Sales collaborator could not store the sale
        """
        with session_context(session.session_id, operator_id=user.id):
            return await self._checkout(session, user)

    async def _checkout(self, session: PosSession, user: AuthUser) -> CompletedSale:
        breakdown = self.validate(session)

        currency = self.config.currency
        rounded = breakdown.rounded(currency)
        context = session.context
        tendered = context.amount_tendered

        items = build_sale_items(session.cart)
        sale = SaleRecord(
            invoice_number=generate_invoice_number(self.config.invoice_prefix),
            user_id=user.id,
            customer_id=session.cart.customer_id,
            account_id=context.account_id,
            subtotal=rounded["subtotal"],
            discount_amount=rounded["discount_amount"],
            tax_amount=rounded["tax_amount"],
            total_amount=rounded["total"],
            paid_amount=quantize_money(tendered, currency),
            change_amount=quantize_money(calculate_change(rounded["total"], tendered), currency),
            payment_method=context.payment_method,
            points_redeemed=context.points_to_redeem,
            discount_percent=context.discount_percent,
            tax_rate=context.tax_rate,
        )

        session.begin_checkout()
        try:
            sale_id = await self.backend.create(sale, items)
        except SalePersistenceError as e:
            logger.error(f"[CHECKOUT] Failed to store sale {sale.invoice_number}: {e.message}")
            self.audit.log_sale_failed(user.id, sale.invoice_number, e.message)
            raise
        except Exception as e:
            logger.exception(f"[CHECKOUT] Failed to store sale {sale.invoice_number}")
            self.audit.log_sale_failed(user.id, sale.invoice_number, str(e))
            raise SalePersistenceError(invoice_number=sale.invoice_number) from e
        finally:
            session.end_checkout()

        completed = CompletedSale(
            sale_id=sale_id,
            sale=sale,
            items=tuple(items),
            breakdown=breakdown,
            customer_name=session.customer.name if session.customer else None,
            points_earned=calculate_points_earned(breakdown.total, self.config.points_earn_threshold),
        )

        session.reset()

        logger.info(
            f"[CHECKOUT] Sale {sale.invoice_number} completed: "
            f"{len(items)} items, total {sale.total_amount}"
        )
        self.audit.log_sale(
            user_id=user.id,
            sale_id=sale_id,
            invoice_number=sale.invoice_number,
            total_amount=sale.total_amount,
            item_count=len(items),
        )
        return completed

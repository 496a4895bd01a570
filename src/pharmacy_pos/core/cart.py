"""
Cart aggregate.

In-memory, ordered line items for the active transaction plus an optional
customer reference. Never persisted directly: it becomes a Sale snapshot at
checkout.

Invariants:
- at most one line per product (adding a present product merges quantities)
- no line with quantity <= 0 (setting such a quantity removes the line)
"""

import logging
from collections.abc import Iterator
from decimal import Decimal
from typing import Any

from ..models.cart import CartItem, new_line_id

logger = logging.getLogger(__name__)


class Cart:
    """Line items of one register session."""

    def __init__(self, customer_id: str | None = None):
        self._items: list[CartItem] = []
        self.customer_id: str | None = customer_id

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def items(self) -> tuple[CartItem, ...]:
        """Lines in insertion order."""
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CartItem]:
        return iter(tuple(self._items))

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def unit_count(self) -> int:
        """Total units across all lines."""
        return sum(item.quantity for item in self._items)

    def get_item(self, item_id: str) -> CartItem | None:
        """Find a line by its surrogate id."""
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def find_by_product(self, product_id: str) -> CartItem | None:
        """Find the line holding ``product_id``."""
        for item in self._items:
            if item.product_id == product_id:
                return item
        return None

    # =========================================================================
    # MUTATION
    # =========================================================================

    def add_item(self, item: CartItem | dict[str, Any]) -> CartItem:
        """
        Add a product to the cart.

        If the product already has a line, only its quantity grows; the
        existing price, discount and tax rate are kept. Otherwise a new line
        is appended under a fresh id.

        Returns:
            The line that now holds the product
        """
        if isinstance(item, dict):
            item = CartItem(**item)

        existing = self.find_by_product(item.product_id)
        if existing is not None:
            existing.quantity = existing.quantity + item.quantity
            logger.debug(
                f"[CART] Merged {item.quantity} x {item.product_id} into line {existing.id} "
                f"(now {existing.quantity})"
            )
            return existing

        line = item.model_copy(update={"id": new_line_id()})
        self._items.append(line)
        logger.debug(f"[CART] Added line {line.id}: {line.quantity} x {line.product_id}")
        return line

    def remove_item(self, item_id: str) -> None:
        """Remove a line. No-op if the id is not in the cart."""
        self._items = [item for item in self._items if item.id != item_id]

    def update_quantity(self, item_id: str, quantity: int) -> None:
        """
        Set a line's quantity exactly.

        A quantity of zero or less removes the line.
        """
        if quantity <= 0:
            self.remove_item(item_id)
            return

        item = self.get_item(item_id)
        if item is not None:
            item.quantity = quantity

    def update_discount(self, item_id: str, discount: Decimal | float | int | str) -> None:
        """Set a line's discount percent. No-op if the id is not in the cart."""
        item = self.get_item(item_id)
        if item is not None:
            item.discount = discount

    def set_customer(self, customer_id: str | None) -> None:
        """Associate a customer (or none). The id is not validated here."""
        self.customer_id = customer_id

    def clear_cart(self) -> None:
        """Empty the cart and drop the customer reference."""
        self._items = []
        self.customer_id = None

    # =========================================================================
    # DERIVED TOTALS
    # =========================================================================

    def get_subtotal(self) -> Decimal:
        """Sum of price x quantity."""
        return sum((item.line_total for item in self._items), Decimal("0"))

    def get_discount_amount(self) -> Decimal:
        """Sum of per-line discounts, each on its own line total."""
        return sum((item.discount_amount for item in self._items), Decimal("0"))

    def get_tax_amount(self) -> Decimal:
        """Sum of per-line tax on each post-discount line amount."""
        return sum((item.tax_amount for item in self._items), Decimal("0"))

    def get_total(self) -> Decimal:
        """subtotal - line discounts + line tax."""
        return self.get_subtotal() - self.get_discount_amount() + self.get_tax_amount()


class CartView:
    """
    Read-only view of a cart.

    Lines are handed out as copies, so changes go through the cart's owner.
    """

    def __init__(self, cart: Cart):
        self._cart = cart

    @property
    def items(self) -> tuple[CartItem, ...]:
        return tuple(item.model_copy() for item in self._cart.items)

    @property
    def customer_id(self) -> str | None:
        return self._cart.customer_id

    def __len__(self) -> int:
        return len(self._cart)

    def __iter__(self) -> Iterator[CartItem]:
        return iter(self.items)

    @property
    def is_empty(self) -> bool:
        return self._cart.is_empty

    @property
    def unit_count(self) -> int:
        return self._cart.unit_count

    def get_item(self, item_id: str) -> CartItem | None:
        item = self._cart.get_item(item_id)
        return item.model_copy() if item is not None else None

    def find_by_product(self, product_id: str) -> CartItem | None:
        item = self._cart.find_by_product(product_id)
        return item.model_copy() if item is not None else None

    def get_subtotal(self) -> Decimal:
        return self._cart.get_subtotal()

    def get_discount_amount(self) -> Decimal:
        return self._cart.get_discount_amount()

    def get_tax_amount(self) -> Decimal:
        return self._cart.get_tax_amount()

    def get_total(self) -> Decimal:
        return self._cart.get_total()

"""
Tests for the cart aggregate.

These tests verify:
- Adding a product twice merges into one line
- Quantity and discount updates (zero or negative quantity removes)
- Derived totals per line and per cart
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from pharmacy_pos.core.cart import Cart, CartView
from pharmacy_pos.models import CartItem


class TestAddItem:
    """Test suite for Cart.add_item."""

    def test_same_product_twice_merges(self, cart: Cart, paracetamol):
        """Test that adding the same product again bumps the existing line."""
        first = cart.add_item(paracetamol)
        second = cart.add_item(paracetamol)

        assert len(cart) == 1
        assert first.id == second.id
        assert cart.items[0].quantity == 2

    def test_merge_keeps_existing_price(self, cart: Cart, paracetamol):
        """Test that a merge keeps the price of the line already in the cart."""
        cart.add_item(paracetamol)
        cart.add_item({**paracetamol, "price": "9.99", "quantity": 3})

        line = cart.find_by_product("prod-paracetamol")
        assert line.quantity == 4
        assert line.price == Decimal("4.50")

    def test_new_products_append_in_order(self, cart: Cart, paracetamol, vitamin_c):
        """Test that new products are appended in the order added."""
        cart.add_item(paracetamol)
        cart.add_item(vitamin_c)

        assert [item.product_id for item in cart] == ["prod-paracetamol", "prod-vitamin-c"]
        assert cart.unit_count == 3

    def test_line_gets_fresh_id(self, cart: Cart):
        """Test that the cart assigns its own line id."""
        item = CartItem(id="caller-id", product_id="p1", name="Gauze", price=2, quantity=1)
        line = cart.add_item(item)

        assert line.id != "caller-id"
        assert line.product_id == "p1"

    def test_catalog_extras_are_kept(self, cart: Cart, paracetamol):
        """Test that barcode, batch and expiry survive on the line."""
        line = cart.add_item(paracetamol)
        assert line.barcode == "8901234567890"
        assert line.batch_number == "B-2291"
        assert line.expiry_date == "2027-03-31"


class TestInvalidItems:
    """Invalid catalog values are rejected when the line is built."""

    @pytest.mark.parametrize("overrides", [
        {"price": "-1"},
        {"quantity": 0},
        {"discount": "101"},
        {"tax_rate": "-5"},
    ])
    def test_rejected(self, paracetamol, overrides):
        """Test that out-of-range catalog values fail validation."""
        with pytest.raises(ValidationError):
            CartItem(**{**paracetamol, **overrides})

    def test_float_price_has_no_binary_artifacts(self):
        """Test that float prices convert without binary noise."""
        item = CartItem(product_id="p", name="x", price=0.1, quantity=3)
        assert item.price == Decimal("0.1")
        assert item.line_total == Decimal("0.3")


class TestUpdates:
    """Test suite for quantity and discount updates."""

    def test_update_quantity(self, cart: Cart, paracetamol):
        """Test that a line's quantity can be set exactly."""
        line = cart.add_item(paracetamol)
        cart.update_quantity(line.id, 5)
        assert cart.get_item(line.id).quantity == 5

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_non_positive_quantity_removes_line(self, cart: Cart, paracetamol, vitamin_c, quantity):
        """Test that a quantity of zero or less removes the line."""
        line = cart.add_item(paracetamol)
        cart.add_item(vitamin_c)

        cart.update_quantity(line.id, quantity)

        assert len(cart) == 1
        assert cart.get_item(line.id) is None

    def test_unknown_id_is_noop(self, cart: Cart, paracetamol):
        """Test that updates to an unknown line id change nothing."""
        cart.add_item(paracetamol)
        cart.update_quantity("missing", 9)
        cart.update_discount("missing", 10)
        cart.remove_item("missing")
        assert cart.items[0].quantity == 1

    def test_update_discount(self, cart: Cart, vitamin_c):
        """Test that a line discount can be set from text."""
        line = cart.add_item(vitamin_c)
        cart.update_discount(line.id, "25")
        assert cart.get_item(line.id).discount == Decimal("25")

    def test_update_discount_out_of_range(self, cart: Cart, vitamin_c):
        """Test that a line discount above 100 is refused and the old one kept."""
        line = cart.add_item(vitamin_c)
        with pytest.raises(ValidationError):
            cart.update_discount(line.id, 150)
        assert cart.get_item(line.id).discount == Decimal("0")

    def test_clear_cart(self, cart: Cart, paracetamol):
        """Test that clearing empties the lines and drops the customer."""
        cart.add_item(paracetamol)
        cart.set_customer("cust-1")

        cart.clear_cart()

        assert cart.is_empty
        assert cart.customer_id is None


class TestTotals:
    """Test suite for derived cart totals."""

    def test_empty_cart(self, cart: Cart):
        """Test that an empty cart totals zero."""
        assert cart.get_subtotal() == 0
        assert cart.get_total() == 0

    def test_line_discount_and_tax(self, cart: Cart):
        """Test that line discounts apply before line tax."""
        cart.add_item({
            "product_id": "p1", "name": "Inhaler", "price": "20", "quantity": 2,
            "discount": "10", "tax_rate": "5",
        })

        assert cart.get_subtotal() == Decimal("40")
        assert cart.get_discount_amount() == Decimal("4")
        assert cart.get_tax_amount() == Decimal("1.8")
        assert cart.get_total() == Decimal("37.8")

    def test_multiple_lines(self, cart: Cart, paracetamol, vitamin_c):
        """Test that the subtotal sums every line."""
        cart.add_item(paracetamol)
        cart.add_item(vitamin_c)
        assert cart.get_subtotal() == Decimal("28.50")


class TestCartView:
    """Test suite for the read-only CartView."""

    def test_reads_through_to_cart(self, cart: Cart, paracetamol):
        """Test that the view reports the cart's lines and totals."""
        view = CartView(cart)
        line = cart.add_item(paracetamol)
        cart.set_customer("cust-1")

        assert len(view) == 1
        assert view.customer_id == "cust-1"
        assert not view.is_empty
        assert view.find_by_product("prod-paracetamol").id == line.id
        assert view.get_total() == cart.get_total()

    def test_lines_are_copies(self, cart: Cart, paracetamol):
        """Test that lines read through the view cannot change the cart."""
        line = cart.add_item(paracetamol)
        view = CartView(cart)

        view.items[0].quantity = 5
        view.get_item(line.id).quantity = 6

        assert cart.get_item(line.id).quantity == 1

    def test_missing_lines(self, cart: Cart):
        """Test that unknown ids and products read as None."""
        view = CartView(cart)
        assert view.get_item("missing") is None
        assert view.find_by_product("missing") is None

"""Tests for the persisted ShoppingCart aggregate."""

import pytest
from protean.exceptions import ValidationError

from ordering.cart.cart import ShoppingCart


class TestShoppingCartLines:
    def test_add_line_creates_line(self):
        cart = ShoppingCart.open("shopper-001")
        assert cart.add_line("var-001", 2) == 2
        assert cart.line_for("var-001").quantity == 2

    def test_adding_same_variant_merges_quantities(self):
        cart = ShoppingCart.open("shopper-001")
        cart.add_line("var-001", 2)
        assert cart.add_line("var-001", 3) == 5
        assert len(cart.lines) == 1

    def test_lines_keep_insertion_order(self):
        cart = ShoppingCart.open("shopper-001")
        cart.add_line("var-b", 1)
        cart.add_line("var-a", 1)
        assert [str(line.variant_id) for line in cart.ordered_lines()] == ["var-b", "var-a"]

    def test_set_line_quantity(self):
        cart = ShoppingCart.open("shopper-001")
        cart.add_line("var-001", 1)
        cart.set_line_quantity("var-001", 4)
        assert cart.line_for("var-001").quantity == 4

    def test_remove_line(self):
        cart = ShoppingCart.open("shopper-001")
        cart.add_line("var-001", 1)
        cart.remove_line("var-001")
        assert cart.line_for("var-001") is None

    def test_clear_empties_cart(self):
        cart = ShoppingCart.open("shopper-001")
        cart.add_line("var-001", 1)
        cart.add_line("var-002", 1)
        cart.clear()
        assert not cart.lines

    def test_zero_quantity_line_is_invalid(self):
        cart = ShoppingCart.open("shopper-001")
        with pytest.raises(ValidationError):
            cart.add_line("var-001", 0)

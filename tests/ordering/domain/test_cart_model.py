"""Tests for the cart read model."""

import pytest
from protean.exceptions import ValidationError

from ordering.cart.cart import Cart, CartItem, ItemType


class TestCartFromPayload:
    def test_lines_and_totals(self, cart):
        assert cart.cart_id == "cart-1"
        assert len(cart.items) == 2
        assert cart.subtotal == 200.0
        assert cart.totals.item_count == 3
        assert cart.totals.shipping == 12.0
        assert cart.totals.tax == 30.0

    def test_product_line(self, cart):
        line = cart.find_item("it-1")
        assert line.kind is ItemType.PRODUCT
        assert line.product_id == "p-1"
        assert line.detail.name == "Mechanical Keyboard"
        assert line.detail.image_url == "kb.png"
        assert line.line_total == 100.0

    def test_bundle_line_keeps_only_bundle_detail(self, cart):
        line = cart.find_item("it-2")
        assert line.kind is ItemType.BUNDLE
        assert line.bundle.name == "Desk Setup"
        assert line.product is None
        assert line.product_id is None

    def test_raw_is_the_backend_body(self, cart, cart_payload):
        assert cart.raw == cart_payload

    def test_missing_totals_are_none(self):
        cart = Cart.from_payload({"cartId": "c", "items": [], "totals": {"subtotal": "0"}})
        assert cart.totals.shipping is None
        assert cart.totals.tax is None
        assert cart.is_empty

    def test_malformed_payload_is_rejected(self):
        with pytest.raises(ValidationError):
            Cart.from_payload(["not", "a", "cart"])

    def test_malformed_items_are_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Cart.from_payload({"cartId": "c", "items": "it-1"})
        assert "items" in exc_info.value.messages

    def test_unknown_line_is_none(self, cart):
        assert cart.find_item("missing") is None


class TestCartItem:
    def test_missing_type_means_product(self):
        line = CartItem.from_payload({"id": 1, "quantity": 1, "product": {"id": "p", "name": "P", "price": "3"}})
        assert line.kind is ItemType.PRODUCT
        assert line.item_id == "1"

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            CartItem.from_payload({"id": "x", "itemType": "gift-card", "quantity": 1})
        assert "item_type" in exc_info.value.messages

    def test_null_quantity_is_zero(self):
        line = CartItem.from_payload({"id": "x", "quantity": None, "product": {"id": "p", "price": "3"}})
        assert line.quantity == 0
        assert line.line_total == 0.0

    def test_missing_quantity_is_zero(self):
        assert CartItem.from_payload({"id": "x"}).quantity == 0

    def test_negative_quantity_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            CartItem.from_payload({"id": "x", "quantity": -1})
        assert "quantity" in exc_info.value.messages

    def test_line_without_detail_totals_zero(self):
        line = CartItem.from_payload({"id": "x", "itemType": "bundle", "quantity": 3})
        assert line.detail is None
        assert line.line_total == 0.0

    def test_cart_with_null_quantity_line_still_loads(self, cart_payload):
        cart_payload["items"][0]["quantity"] = None
        cart = Cart.from_payload(cart_payload)
        assert cart.find_item("it-1").quantity == 0

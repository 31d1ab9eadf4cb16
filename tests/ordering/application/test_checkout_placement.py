"""Tests for starting a checkout and placing the order."""

import copy

import pytest
from protean.exceptions import ValidationError

from ordering.checkout.checkout import CheckoutStep, PaymentType
from ordering.checkout.placement import apply_promo_code, place_order, start_checkout, submit_order, sync_cart
from ordering.checkout.store import wizards
from shared.backend import BackendResponse
from shared.errors import BackendError

TOKEN = "Bearer customer"


def _reviewed_wizard(backend):
    wizard = start_checkout(TOKEN, email="mona@example.com", backend=backend)
    wizard.select_location("loc-1")
    wizard.continue_to_review()
    return wizard


def _without_bundle(cart_payload):
    """The same cart after the bundle line was removed in another tab."""
    payload = copy.deepcopy(cart_payload)
    payload["items"] = [item for item in payload["items"] if item["id"] != "it-2"]
    payload["totals"] = {"subtotal": "100.00", "itemCount": 2}
    return payload


def _discount_answer(amount, code="SAVE10"):
    return {
        "valid": True,
        "discountAmount": amount,
        "discountCode": {"code": code, "type": "percentage", "value": "10"},
    }


class TestStartCheckout:
    def test_loads_addresses_and_active_locations(self, shop):
        wizard = start_checkout(TOKEN, backend=shop)

        assert wizard.step is CheckoutStep.SELECTION
        assert wizard.address.address_id == "a-1"
        assert [location.location_id for location in wizard.locations] == ["loc-1", "loc-2", "loc-3"]
        assert wizard.stock_message is None
        assert wizard.country == "Egypt"

    def test_empty_cart_cannot_check_out(self, backend):
        backend.respond("GET", "/cart", {"cartId": "c", "items": [], "totals": {"subtotal": "0"}})

        with pytest.raises(ValidationError) as exc_info:
            start_checkout(TOKEN, backend=backend)
        assert exc_info.value.messages == {"cart": ["Your cart is empty"]}

    def test_unreadable_cart_cannot_check_out(self, backend):
        backend.respond("GET", "/cart", {"error": "boom"}, status_code=500)

        with pytest.raises(ValidationError):
            start_checkout(TOKEN, backend=backend)

    def test_stock_warning_is_carried(self, shop):
        shop.respond(
            "GET", "/cart/validate", {"valid": False, "message": "Some items are out of stock"}, status_code=400
        )

        wizard = start_checkout(TOKEN, backend=shop)

        assert wizard.stock_message == "Some items are out of stock"


class TestPlaceCashOrder:
    def test_redirects_to_success_page(self, shop):
        shop.respond("POST", "/cart/checkout", {"order": {"id": 42}}, status_code=201)
        wizard = _reviewed_wizard(shop)

        placed = place_order(wizard, "cash", TOKEN, backend=shop)

        assert placed.payment_type == PaymentType.CASH.value
        assert placed.order_id == "42"
        assert placed.redirect_url == "/checkout/success?orderId=42&status=success"
        sent = shop.calls_to("POST", "/cart/checkout")[0]
        assert sent["json"]["paymentType"] == "cash"
        assert sent["json"]["addressId"] == "a-1"
        assert sent["token"] == TOKEN

    def test_to_payload(self, shop):
        shop.respond("POST", "/cart/checkout", {"order": {"id": 42}}, status_code=201)

        placed = place_order(_reviewed_wizard(shop), "cash", TOKEN, backend=shop)

        assert placed.to_payload() == {
            "paymentType": "cash",
            "redirectUrl": "/checkout/success?orderId=42&status=success",
            "orderId": "42",
        }

    def test_backend_rejection_propagates(self, shop):
        shop.respond("POST", "/cart/checkout", {"error": "Insufficient stock"}, status_code=400)
        wizard = _reviewed_wizard(shop)

        with pytest.raises(BackendError) as exc_info:
            place_order(wizard, "cash", TOKEN, backend=shop)
        assert exc_info.value.status_code == 400

    def test_missing_order_is_an_error(self, shop):
        shop.respond("POST", "/cart/checkout", {"message": "ok"}, status_code=201)
        wizard = _reviewed_wizard(shop)

        with pytest.raises(ValidationError):
            place_order(wizard, "cash", TOKEN, backend=shop)

    def test_must_review_first(self, shop):
        wizard = start_checkout(TOKEN, backend=shop)

        with pytest.raises(ValidationError):
            place_order(wizard, "cash", TOKEN, backend=shop)
        assert shop.calls_to("POST", "/cart/checkout") == []


class TestPlaceCardOrder:
    def test_redirects_to_gateway(self, shop):
        shop.respond(
            "POST",
            "/cart/checkout",
            {"checkoutUrl": "https://pay.example/checkout/int-1", "orderId": 43, "intentionId": "int-1"},
        )
        wizard = _reviewed_wizard(shop)

        placed = place_order(wizard, "card", TOKEN, backend=shop)

        assert placed.payment_type == PaymentType.CARD.value
        assert placed.redirect_url == "https://pay.example/checkout/int-1"
        assert placed.order_id == "43"
        sent = shop.calls_to("POST", "/cart/checkout")[0]["json"]
        assert sent["totalAmount"] == pytest.approx(238.0)
        assert sent["billingData"]["email"] == "mona@example.com"

    def test_missing_checkout_url_is_an_error(self, shop):
        shop.respond("POST", "/cart/checkout", {"orderId": 43})
        wizard = _reviewed_wizard(shop)

        with pytest.raises(ValidationError) as exc_info:
            place_order(wizard, "card", TOKEN, backend=shop)
        assert "payment" in exc_info.value.messages


class TestCartChangesDuringCheckout:
    def test_card_amounts_follow_the_current_cart(self, shop, cart_payload):
        shop.respond("POST", "/cart/checkout", {"checkoutUrl": "https://pay.example/checkout/int-2"})
        wizard = _reviewed_wizard(shop)
        shop.respond("GET", "/cart", _without_bundle(cart_payload))

        place_order(wizard, "card", TOKEN, backend=shop)

        sent = shop.calls_to("POST", "/cart/checkout")[0]["json"]
        assert sent["subtotal"] == pytest.approx(100.0)
        assert sent["taxAmount"] == pytest.approx(14.0)
        assert sent["shippingAmount"] == pytest.approx(5.0)
        assert sent["totalAmount"] == pytest.approx(119.0)

    def test_emptied_cart_is_not_ordered(self, shop):
        wizard = _reviewed_wizard(shop)
        shop.respond("GET", "/cart", {"cartId": "cart-1", "items": [], "totals": {"subtotal": "0"}})

        with pytest.raises(ValidationError) as exc_info:
            place_order(wizard, "cash", TOKEN, backend=shop)
        assert exc_info.value.messages == {"cart": ["Your cart is empty"]}
        assert shop.calls_to("POST", "/cart/checkout") == []

    def test_unreadable_cart_is_not_ordered(self, shop):
        wizard = _reviewed_wizard(shop)
        shop.respond("GET", "/cart", {"error": "boom"}, status_code=500)

        with pytest.raises(BackendError):
            place_order(wizard, "cash", TOKEN, backend=shop)
        assert shop.calls_to("POST", "/cart/checkout") == []

    def test_discount_is_repriced_for_the_new_subtotal(self, shop, cart_payload):
        shop.respond("POST", "/discounts/validate", _discount_answer("20.00"))
        wizard = _reviewed_wizard(shop)
        apply_promo_code(wizard, "save10", TOKEN, backend=shop)
        shop.respond("GET", "/cart", _without_bundle(cart_payload))
        shop.respond("POST", "/discounts/validate", _discount_answer("10.00"))

        sync_cart(wizard, TOKEN, backend=shop)

        assert wizard.discount.discount_amount == 10.0
        assert shop.calls_to("POST", "/discounts/validate")[-1]["json"] == {"code": "SAVE10", "subtotal": 100.0}

    def test_discount_that_no_longer_applies_is_removed(self, shop, cart_payload):
        shop.respond("POST", "/discounts/validate", _discount_answer("20.00"))
        wizard = _reviewed_wizard(shop)
        apply_promo_code(wizard, "SAVE10", TOKEN, backend=shop)
        shop.respond("GET", "/cart", _without_bundle(cart_payload))
        shop.respond("POST", "/discounts/validate", {"error": "Minimum purchase of 150 required"}, status_code=400)

        with pytest.raises(ValidationError) as exc_info:
            sync_cart(wizard, TOKEN, backend=shop)

        assert exc_info.value.messages == {"discountCode": ["Minimum purchase of 150 required"]}
        assert wizard.discount is None
        assert wizard.cart.subtotal == 100.0

    def test_unchanged_cart_keeps_the_discount_without_asking_again(self, shop):
        shop.respond("POST", "/discounts/validate", _discount_answer("20.00"))
        wizard = _reviewed_wizard(shop)
        apply_promo_code(wizard, "SAVE10", TOKEN, backend=shop)

        sync_cart(wizard, TOKEN, backend=shop)

        assert wizard.discount.discount_amount == 20.0
        assert len(shop.calls_to("POST", "/discounts/validate")) == 1

    def test_promo_code_is_checked_against_the_current_subtotal(self, shop, cart_payload):
        shop.respond("POST", "/discounts/validate", _discount_answer("10.00"))
        wizard = _reviewed_wizard(shop)
        shop.respond("GET", "/cart", _without_bundle(cart_payload))

        apply_promo_code(wizard, "SAVE10", TOKEN, backend=shop)

        assert shop.calls_to("POST", "/discounts/validate")[0]["json"]["subtotal"] == 100.0
        assert wizard.breakdown().subtotal == 100.0


class TestSubmitOrder:
    def test_successful_order_ends_checkout(self, shop):
        shop.respond("POST", "/cart/checkout", {"order": {"id": 42}}, status_code=201)
        wizards.put(TOKEN, _reviewed_wizard(shop))

        placed = submit_order(TOKEN, "cash", backend=shop)

        assert placed.order_id == "42"
        with pytest.raises(ValidationError):
            wizards.get(TOKEN)

    def test_failed_order_keeps_checkout(self, shop):
        shop.respond("POST", "/cart/checkout", {"error": "Insufficient stock"}, status_code=409)
        wizard = _reviewed_wizard(shop)
        wizards.put(TOKEN, wizard)

        with pytest.raises(BackendError):
            submit_order(TOKEN, "cash", backend=shop)

        assert wizards.get(TOKEN) is wizard

    def test_second_submit_while_first_is_in_flight_is_rejected(self, shop):
        rejected = []

        def checkout(call):
            # A second click arrives while the backend is still placing the first order
            with pytest.raises(ValidationError) as exc_info:
                submit_order(TOKEN, "cash", backend=shop)
            rejected.append(exc_info.value.messages)
            return BackendResponse(status_code=201, payload={"order": {"id": 42}})

        shop.respond_with("POST", "/cart/checkout", checkout)
        wizards.put(TOKEN, _reviewed_wizard(shop))

        placed = submit_order(TOKEN, "cash", backend=shop)

        assert placed.order_id == "42"
        assert rejected == [{"checkout": ["No checkout in progress"]}]
        assert len(shop.calls_to("POST", "/cart/checkout")) == 1

    def test_without_checkout_nothing_is_sent(self, shop):
        with pytest.raises(ValidationError) as exc_info:
            submit_order(TOKEN, "cash", backend=shop)

        assert exc_info.value.messages == {"checkout": ["No checkout in progress"]}
        assert shop.calls_to("POST", "/cart/checkout") == []

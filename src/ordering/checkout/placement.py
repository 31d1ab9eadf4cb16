"""Starting a checkout and placing the order at the end of it.

Starting loads everything step 1 needs (cart, addresses, locations) and
checks stock. Placing submits the order with the chosen payment type:

- cash: the backend creates the order immediately and the browser goes to
  the success page.
- card: the backend opens a payment intention and the browser is sent to
  the gateway's hosted checkout page.

Prices always follow the cart as it is in the backend at that moment, not
as it was when checkout started.
"""

from urllib.parse import urlencode

import structlog
from protean.exceptions import ValidationError
from protean.fields import String

from identity.address.address import fetch_addresses
from ordering.cart.cart import Cart
from ordering.cart.context import CartContext
from ordering.checkout.checkout import CheckoutWizard, PaymentType
from ordering.checkout.store import wizards
from ordering.discount.discount import validate_discount
from ordering.domain import ordering
from ordering.location.location import fetch_active_locations
from shared.backend import Backend, get_backend
from shared.settings import get_settings

logger = structlog.get_logger(__name__)

SUCCESS_PAGE = "/checkout/success"


@ordering.value_object
class PlacedOrder:
    payment_type = String(required=True, choices=PaymentType)
    redirect_url = String(required=True, max_length=2048)
    order_id = String(max_length=50)

    def to_payload(self) -> dict:
        return {
            "paymentType": self.payment_type,
            "redirectUrl": self.redirect_url,
            "orderId": self.order_id,
        }


def start_checkout(token: str, email: str | None = None, backend: Backend | None = None) -> CheckoutWizard:
    """Build a fresh wizard at step 1. An empty cart cannot be checked out."""
    backend = backend or get_backend()
    carts = CartContext(token, backend)

    cart = carts.fetch_cart()
    if cart is None or cart.is_empty:
        raise ValidationError({"cart": ["Your cart is empty"]})

    wizard = CheckoutWizard(
        cart=cart,
        addresses=fetch_addresses(backend, token),
        locations=fetch_active_locations(backend),
        email=email,
        country=get_settings().country,
    )

    validation = carts.validate_cart()
    if not validation.valid:
        wizard.stock_message = validation.message

    logger.info("checkout_started", cart_id=cart.cart_id, items=len(cart.items))
    return wizard


def _current_cart(backend: Backend, token: str) -> Cart:
    return Cart.from_payload(backend.get("/cart", token=token).expect_ok("Failed to fetch cart"))


def sync_cart(wizard: CheckoutWizard, token: str, backend: Backend | None = None) -> None:
    """Reprice the wizard against the current cart.

    A promo code applied to an older subtotal is validated again; when it no
    longer applies it is removed and the rejection is raised.
    """
    backend = backend or get_backend()
    moved = wizard.refresh_cart(_current_cart(backend, token))
    if not moved or wizard.discount is None:
        return

    logger.info("checkout_cart_changed", cart_id=wizard.cart.cart_id, subtotal=wizard.cart.subtotal)
    try:
        wizard.apply_discount(validate_discount(backend, token, wizard.discount.code, wizard.cart.subtotal))
    except ValidationError:
        wizard.remove_discount()
        raise


def apply_promo_code(wizard: CheckoutWizard, code: str, token: str, backend: Backend | None = None) -> None:
    """Validate ``code`` against the current cart subtotal and apply it."""
    backend = backend or get_backend()
    wizard.refresh_cart(_current_cart(backend, token))
    wizard.apply_discount(validate_discount(backend, token, code, wizard.cart.subtotal))


def place_order(wizard: CheckoutWizard, payment_type: str, token: str, backend: Backend | None = None) -> PlacedOrder:
    """Submit the order. Backend rejections propagate as BackendError."""
    backend = backend or get_backend()
    kind = wizard.assert_can_place_order(payment_type)
    sync_cart(wizard, token, backend)

    if kind is PaymentType.CASH:
        payload = backend.post("/cart/checkout", token=token, json=wizard.cash_order_payload()).expect_ok(
            "Failed to place order"
        )
        order = payload.get("order") if isinstance(payload, dict) else None
        if not order:
            raise ValidationError({"order": ["Failed to place order"]})
        order_id = str(order["id"])
        logger.info("order_placed", order_id=order_id, payment_type=kind.value)
        return PlacedOrder(
            payment_type=kind.value,
            order_id=order_id,
            redirect_url=f"{SUCCESS_PAGE}?{urlencode({'orderId': order_id, 'status': 'success'})}",
        )

    payload = backend.post("/cart/checkout", token=token, json=wizard.card_order_payload()).expect_ok(
        "Failed to initiate payment"
    )
    checkout_url = payload.get("checkoutUrl") if isinstance(payload, dict) else None
    if not checkout_url:
        raise ValidationError({"payment": ["Failed to initiate payment"]})
    order_id = payload.get("orderId")
    logger.info("payment_initiated", order_id=order_id, intention_id=payload.get("intentionId"))
    return PlacedOrder(
        payment_type=kind.value,
        order_id=str(order_id) if order_id is not None else None,
        redirect_url=checkout_url,
    )


def submit_order(token: str, payment_type: str, backend: Backend | None = None) -> PlacedOrder:
    """Place the order for ``token``'s checkout, at most once.

    The wizard leaves the store before the backend is called, so a second
    submit arriving meanwhile finds no checkout in progress. A failed attempt
    puts the wizard back for a retry.
    """
    wizard = wizards.claim(token)
    try:
        placed = place_order(wizard, payment_type, token, backend)
    except Exception:
        wizards.restore(token, wizard)
        raise
    return placed

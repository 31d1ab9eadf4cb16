"""Checkout wizard: the per-session state behind the two checkout steps.

State Machine:
    SELECTION (1): pick a shipping address and a delivery location
    REVIEW    (2): review the price breakdown, apply a promo code, pay

SELECTION → REVIEW requires both an address and a location. REVIEW →
SELECTION is always allowed. Orders can only be placed from REVIEW. The
wizard is never persisted; a fresh one always starts at SELECTION.
"""

from enum import Enum, IntEnum

import structlog
from protean.exceptions import ValidationError
from protean.fields import String

from identity.address.address import Address
from ordering.cart.cart import Cart
from ordering.discount.discount import AppliedDiscount
from ordering.domain import ordering
from ordering.location.location import Location, find_location
from ordering.pricing import PriceBreakdown, compute_breakdown

logger = structlog.get_logger(__name__)


class CheckoutStep(IntEnum):
    SELECTION = 1
    REVIEW = 2


class PaymentType(Enum):
    CASH = "cash"
    CARD = "card"


_VALID_TRANSITIONS = {
    CheckoutStep.SELECTION: {CheckoutStep.REVIEW},
    CheckoutStep.REVIEW: {CheckoutStep.SELECTION},
}


@ordering.value_object
class ShippingContact:
    """Contact and delivery details sent with a card payment."""

    first_name = String(max_length=100, default="")
    last_name = String(max_length=155, default="")
    email = String(max_length=254, default="")
    phone = String(max_length=20, default="")
    address = String(max_length=255, default="")
    city = String(max_length=100, default="")
    state = String(max_length=100, default="")
    zip_code = String(max_length=20, default="")
    country = String(max_length=100, default="")

    @classmethod
    def from_address(cls, address: Address, email: str | None, country: str) -> "ShippingContact":
        # "Mona Ali Hassan" -> first "Mona", last "Ali Hassan"
        first_name, _, last_name = (address.recipient_name or "").strip().partition(" ")
        return cls(
            first_name=first_name,
            last_name=last_name.strip(),
            email=email or "",
            phone=address.phone_number,
            address=address.street_address,
            city=address.city,
            state=address.district,
            zip_code=address.postal_code,
            country=country,
        )

    def to_payload(self) -> dict:
        return {
            "firstName": self.first_name or "",
            "lastName": self.last_name or "",
            "email": self.email or "",
            "phone": self.phone or "",
            "address": self.address or "",
            "city": self.city or "",
            "state": self.state or "",
            "zipCode": self.zip_code or "",
            "country": self.country or "",
        }

    def billing_data(self) -> dict:
        data = self.to_payload()
        return {key: data[key] for key in ("firstName", "lastName", "phone", "email", "address", "city", "state")}


class CheckoutWizard:
    def __init__(
        self,
        cart: Cart,
        addresses: list[Address],
        locations: list[Location],
        email: str | None = None,
        country: str = "Egypt",
    ) -> None:
        self.cart = cart
        self.addresses = addresses
        self.locations = locations
        self.email = email
        self.country = country

        self.step = CheckoutStep.SELECTION
        self.address: Address | None = None
        self.location: Location | None = None
        self.shipping_contact: ShippingContact | None = None
        self.discount: AppliedDiscount | None = None
        self.stock_message: str | None = None

        default = next((address for address in addresses if address.is_default), None)
        if default is not None:
            self.select_address(default.address_id)

    # -------------------------------------------------------------------
    # Step 1: selection
    # -------------------------------------------------------------------
    def select_address(self, address_id: str) -> Address:
        address = next((a for a in self.addresses if a.address_id == str(address_id)), None)
        if address is None:
            raise ValidationError({"address": [f"Unknown address: {address_id}"]})
        self.address = address
        self.shipping_contact = ShippingContact.from_address(address, self.email, self.country)
        return address

    def select_location(self, location_id: str) -> Location:
        location = find_location(self.locations, location_id)
        if location is None:
            raise ValidationError({"location": [f"Unknown location: {location_id}"]})
        self.location = location
        return location

    def continue_to_review(self) -> None:
        self._assert_can_transition(CheckoutStep.REVIEW)
        errors = {}
        if self.address is None:
            errors["address"] = ["Please select a shipping address"]
        if self.location is None:
            errors["location"] = ["Please select a delivery location"]
        if errors:
            raise ValidationError(errors)
        self.step = CheckoutStep.REVIEW
        logger.debug("checkout_step_changed", step=int(self.step))

    def back_to_selection(self) -> None:
        self._assert_can_transition(CheckoutStep.SELECTION)
        self.step = CheckoutStep.SELECTION

    # -------------------------------------------------------------------
    # Cart
    # -------------------------------------------------------------------
    def refresh_cart(self, cart: Cart) -> bool:
        """Price against ``cart`` from now on. Returns True when the subtotal moved."""
        if cart.is_empty:
            raise ValidationError({"cart": ["Your cart is empty"]})
        moved = cart.subtotal != self.cart.subtotal
        self.cart = cart
        return moved

    # -------------------------------------------------------------------
    # Promo code
    # -------------------------------------------------------------------
    def apply_discount(self, discount: AppliedDiscount) -> None:
        self.discount = discount

    def remove_discount(self) -> None:
        self.discount = None

    # -------------------------------------------------------------------
    # Pricing and order payloads
    # -------------------------------------------------------------------
    def breakdown(self) -> PriceBreakdown:
        return compute_breakdown(
            self.cart.subtotal,
            location=self.location,
            cart_totals=self.cart.totals,
            applied_discount=self.discount,
        )

    def assert_can_place_order(self, payment_type: str) -> PaymentType:
        try:
            kind = PaymentType(payment_type)
        except ValueError:
            raise ValidationError({"paymentType": [f"Unsupported payment type: {payment_type}"]}) from None
        if self.step != CheckoutStep.REVIEW:
            raise ValidationError({"step": ["Review your order before placing it"]})
        return kind

    def cash_order_payload(self) -> dict:
        return {
            "paymentType": PaymentType.CASH.value,
            "locationId": self.location.location_id,
            "addressId": self.address.address_id,
            "discountCode": self.discount.code if self.discount else None,
        }

    def card_order_payload(self) -> dict:
        prices = self.breakdown()
        return {
            "paymentType": PaymentType.CARD.value,
            "locationId": self.location.location_id,
            "discountCode": self.discount.code if self.discount else None,
            "subtotal": prices.subtotal,
            "taxAmount": prices.tax,
            "shippingAmount": prices.shipping,
            "discountAmount": prices.discount,
            "totalAmount": prices.total,
            "billingData": self.shipping_contact.billing_data(),
        }

    def to_dict(self, currency: str) -> dict:
        return {
            "step": int(self.step),
            "addresses": [address.to_payload() for address in self.addresses],
            "locations": [location.to_payload() for location in self.locations],
            "selectedAddressId": self.address.address_id if self.address else None,
            "selectedLocationId": self.location.location_id if self.location else None,
            "shippingData": self.shipping_contact.to_payload() if self.shipping_contact else None,
            "appliedDiscount": self.discount.to_payload(currency) if self.discount else None,
            "stockMessage": self.stock_message,
            "cart": self.cart.raw,
            "summary": self.breakdown().to_payload(currency),
        }

    def _assert_can_transition(self, target: CheckoutStep) -> None:
        if target not in _VALID_TRANSITIONS.get(self.step, set()):
            raise ValidationError({"step": [f"Cannot move from step {int(self.step)} to step {int(target)}"]})

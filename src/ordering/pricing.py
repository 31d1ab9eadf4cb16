"""Order price breakdown shared by the cart summary, checkout summary and review.

    shipping = subtotal * location.shippingRate   (else cart shipping, else 0)
    tax      = subtotal * location.taxRate        (else cart tax, else 0)
    discount = applied discount amount            (else 0)
    total    = subtotal + shipping + tax - discount

Values are not rounded; only the display strings are.
"""

from protean.fields import Float

from ordering.cart.cart import CartTotals
from ordering.discount.discount import AppliedDiscount
from ordering.domain import ordering
from ordering.location.location import Location
from shared.money import format_money


@ordering.value_object
class PriceBreakdown:
    subtotal = Float(default=0.0)
    shipping = Float(default=0.0)
    tax = Float(default=0.0)
    discount = Float(default=0.0)

    @property
    def total(self) -> float:
        return self.subtotal + self.shipping + self.tax - self.discount

    def to_payload(self, currency: str) -> dict:
        return {
            "subtotal": self.subtotal,
            "shipping": self.shipping,
            "tax": self.tax,
            "discount": self.discount,
            "total": self.total,
            "currency": currency,
            "display": {
                "subtotal": format_money(self.subtotal, currency),
                "shipping": format_money(self.shipping, currency),
                "tax": format_money(self.tax, currency),
                "discount": format_money(self.discount, currency),
                "total": format_money(self.total, currency),
            },
        }


def compute_breakdown(
    subtotal: float,
    location: Location | None = None,
    cart_totals: CartTotals | None = None,
    applied_discount: AppliedDiscount | None = None,
) -> PriceBreakdown:
    if location is not None:
        shipping = subtotal * location.shipping_multiplier
        tax = subtotal * location.tax_multiplier
    else:
        shipping = (cart_totals.shipping if cart_totals else None) or 0.0
        tax = (cart_totals.tax if cart_totals else None) or 0.0

    discount = applied_discount.discount_amount if applied_discount else 0.0
    return PriceBreakdown(subtotal=subtotal, shipping=shipping, tax=tax, discount=discount)

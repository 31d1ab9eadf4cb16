"""Pydantic request schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from the
internal cart, checkout and discount models. Fields are snake_case in Python
and camelCase on the wire.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from shared.schemas import CamelModel


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddCartItemRequest(CamelModel):
    product_id: str | None = None
    bundle_id: str | None = None
    quantity: int = Field(ge=1, default=1)
    item_type: Literal["product", "bundle"] = "product"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"productId": "12", "quantity": 2},
                {"bundleId": "3", "quantity": 1, "itemType": "bundle"},
            ]
        }
    }


class UpdateCartItemRequest(CamelModel):
    # Not bounded below: anything under 1 removes the line
    quantity: int
    item_type: Literal["product", "bundle"] = "product"


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class StartCheckoutRequest(CamelModel):
    email: str | None = None


class SelectAddressRequest(CamelModel):
    address_id: str


class SelectLocationRequest(CamelModel):
    location_id: str


class ApplyDiscountRequest(CamelModel):
    code: str = Field(min_length=1)


class PlaceOrderRequest(CamelModel):
    payment_type: Literal["cash", "card"]

    model_config = {"json_schema_extra": {"examples": [{"paymentType": "cash"}]}}


# ---------------------------------------------------------------------------
# Promo codes
# ---------------------------------------------------------------------------
class ValidateDiscountRequest(CamelModel):
    code: str
    subtotal: float = Field(ge=0)


class DiscountCodeRequest(CamelModel):
    code: str = Field(min_length=1, max_length=50)
    type: Literal["percentage", "fixed"]
    value: float = Field(gt=0)
    min_purchase: float | None = Field(default=None, ge=0)
    max_uses: int | None = Field(default=None, ge=1)
    valid_from: datetime
    valid_to: datetime
    active: bool = True

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "code": "WELCOME10",
                    "type": "percentage",
                    "value": 10,
                    "minPurchase": 500,
                    "maxUses": 100,
                    "validFrom": "2026-01-01T00:00:00Z",
                    "validTo": "2026-12-31T23:59:59Z",
                    "active": True,
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------
class LocationRequest(CamelModel):
    name: str = Field(min_length=1)
    city: str = Field(min_length=1)
    tax_rate: str = Field(min_length=1)
    shipping_rate: str = Field(min_length=1)
    active: bool = True

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Nasr City",
                    "city": "Cairo",
                    "taxRate": "0.14",
                    "shippingRate": "0.05",
                    "active": True,
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class UpdateOrderRequest(CamelModel):
    status: str | None = None
    payment_status: str | None = None
    metadata: dict[str, Any] | None = None

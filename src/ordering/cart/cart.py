"""Shopping Cart aggregate rebuilt from the backend's cart payload.

The backend owns the cart; every read replaces the local copy wholesale.
A cart line is polymorphic: ``itemType`` decides whether the line carries
a product or a bundle. Only the detail matching the type is kept, so a line
never exposes both.
"""

import json
from enum import Enum
from typing import Any

from protean.exceptions import ValidationError
from protean.fields import Float, HasMany, Identifier, Integer, String, Text, ValueObject

from ordering.domain import ordering
from shared.money import parse_amount


class ItemType(Enum):
    PRODUCT = "product"
    BUNDLE = "bundle"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Cart")
class LineDetail:
    """Name, price and image of the product or bundle on a cart line."""

    detail_id = Identifier()
    name = String(max_length=255, default="")
    price = Float(default=0.0)
    image_url = String(max_length=1024)
    sku = String(max_length=50)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "LineDetail":
        return cls(
            detail_id=_optional_id(payload.get("id")),
            name=payload.get("name") or "",
            price=parse_amount(payload.get("price")),
            image_url=payload.get("imageUrl"),
            sku=payload.get("sku"),
        )


@ordering.value_object(part_of="Cart")
class CartTotals:
    subtotal = Float(default=0.0)
    item_count = Integer(default=0, min_value=0)
    # None means the backend did not send a value
    shipping = Float()
    tax = Float()
    total = Float()

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | None) -> "CartTotals":
        payload = payload or {}

        def _optional(key: str) -> float | None:
            return parse_amount(payload[key]) if payload.get(key) is not None else None

        return cls(
            subtotal=parse_amount(payload.get("subtotal")),
            item_count=int(payload.get("itemCount") or 0),
            shipping=_optional("shipping"),
            tax=_optional("tax"),
            total=_optional("total"),
        )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Cart")
class CartItem:
    item_id = Identifier(required=True)
    item_type = String(choices=ItemType, default=ItemType.PRODUCT.value)
    quantity = Integer(default=0, min_value=0)
    product_id = Identifier()
    bundle_id = Identifier()
    product = ValueObject(LineDetail)
    bundle = ValueObject(LineDetail)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CartItem":
        """Lines without ``itemType`` are products."""
        item_type = payload.get("itemType") or ItemType.PRODUCT.value
        is_bundle = item_type == ItemType.BUNDLE.value
        product = None if is_bundle else payload.get("product")
        bundle = payload.get("bundle") if is_bundle else None
        return cls(
            item_id=_optional_id(payload.get("id")),
            item_type=item_type,
            quantity=int(payload.get("quantity") or 0),
            product_id=None if is_bundle else _optional_id(payload.get("productId")),
            bundle_id=_optional_id(payload.get("bundleId")) if is_bundle else None,
            product=LineDetail.from_payload(product) if product else None,
            bundle=LineDetail.from_payload(bundle) if bundle else None,
        )

    @property
    def kind(self) -> ItemType:
        return ItemType(self.item_type)

    @property
    def detail(self) -> LineDetail | None:
        return self.bundle if self.kind is ItemType.BUNDLE else self.product

    @property
    def line_total(self) -> float:
        return self.detail.price * self.quantity if self.detail else 0.0


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Cart:
    cart_id = Identifier()
    items = HasMany(CartItem)
    totals = ValueObject(CartTotals)
    snapshot = Text()  # JSON body as the backend sent it

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Cart":
        if not isinstance(payload, dict):
            raise ValidationError({"cart": ["Malformed cart payload"]})
        if not isinstance(payload.get("items") or [], list):
            raise ValidationError({"items": ["Malformed cart items"]})

        cart = cls(
            cart_id=_optional_id(payload.get("cartId")),
            totals=CartTotals.from_payload(payload.get("totals")),
            snapshot=json.dumps(payload),
        )
        for item in payload.get("items") or []:
            cart.add_items(CartItem.from_payload(item))
        return cart

    @property
    def raw(self) -> dict[str, Any]:
        return json.loads(self.snapshot)

    @property
    def subtotal(self) -> float:
        return self.totals.subtotal if self.totals else 0.0

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find_item(self, item_id: str) -> CartItem | None:
        return next((item for item in self.items if str(item.item_id) == str(item_id)), None)


def _optional_id(value: Any) -> str | None:
    return str(value) if value not in (None, "") else None

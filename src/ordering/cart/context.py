"""Cart context: a request-scoped cache of the remote cart.

Every mutation follows the same protocol:

1. send the request to the backend (nothing is changed locally first),
2. on success re-fetch the whole cart and report a success notice,
3. on failure report an error notice. There is nothing to roll back.

Failures never raise out of a mutation; the caller gets a falsy result
carrying the error notice. Rapid successive calls are not coalesced, each
one is its own round trip.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog
from protean.exceptions import ValidationError
from protean.fields import String, Text

from ordering.cart.cart import Cart, ItemType
from ordering.domain import ordering
from shared.backend import Backend, get_backend
from shared.errors import BackendError, BackendUnavailable, error_message

logger = structlog.get_logger(__name__)


class NoticeLevel(Enum):
    SUCCESS = "success"
    ERROR = "error"


@ordering.value_object
class Notice:
    """A user-facing toast. ``key`` is the translation key the UI renders."""

    level = String(required=True, choices=NoticeLevel)
    key = String(required=True, max_length=50)
    detail = Text()

    def to_payload(self) -> dict:
        return {"level": self.level, "key": self.key, "detail": self.detail}


@dataclass(frozen=True)
class CartMutationResult:
    ok: bool
    notice: Notice
    cart: Cart | None = None
    status_code: int = 200

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True)
class CartValidation:
    valid: bool
    message: str
    invalid_items: list[dict[str, Any]] | None = None


class CartContext:
    """Cart operations for one signed-in user.

    ``cart`` holds the last successfully fetched cart, ``None`` before the
    first fetch, after a failed fetch, or after the cart was cleared.
    """

    def __init__(self, token: str | None, backend: Backend | None = None) -> None:
        self.token = token
        self.backend = backend or get_backend()
        self.cart: Cart | None = None

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def fetch_cart(self) -> Cart | None:
        """Load the cart. Any failure leaves the cache empty and returns None."""
        try:
            response = self.backend.get("/cart", token=self.token)
            payload = response.expect_ok("Failed to fetch cart")
            self.cart = Cart.from_payload(payload)
        except (BackendError, BackendUnavailable, ValidationError) as exc:
            logger.warning("cart_fetch_failed", error=str(exc))
            self.cart = None
        return self.cart

    def validate_cart(self) -> CartValidation:
        """Check stock for every line.

        The backend answers 400 with ``valid: false`` when stock is short;
        that is a verdict, not a failure.
        """
        try:
            response = self.backend.get("/cart/validate", token=self.token)
        except BackendUnavailable:
            return CartValidation(valid=False, message="Failed to validate cart")

        payload = response.payload if isinstance(response.payload, dict) else {}
        if "valid" in payload:
            return CartValidation(
                valid=bool(payload["valid"]),
                message=payload.get("message", ""),
                invalid_items=payload.get("invalidItems"),
            )
        return CartValidation(valid=False, message=error_message(payload, "Failed to validate cart"))

    def checkout_cart(self, payload: dict[str, Any]) -> dict[str, Any] | None:
        """Submit the cart as an order. Returns the created order, or None."""
        try:
            response = self.backend.post("/cart/checkout", token=self.token, json=payload)
            data = response.expect_ok("Checkout failed")
        except (BackendError, BackendUnavailable) as exc:
            logger.warning("cart_checkout_failed", error=str(exc))
            return None
        return data.get("order") if isinstance(data, dict) else None

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add_to_cart(self, product_id: str, quantity: int = 1) -> CartMutationResult:
        return self._mutate(
            "POST",
            "/cart/items",
            json={"productId": product_id, "quantity": quantity},
            success_key="itemAdded",
            failure_key="addFailed",
        )

    def add_bundle_to_cart(self, bundle_id: str, quantity: int = 1) -> CartMutationResult:
        return self._mutate(
            "POST",
            "/cart/items",
            json={"bundleId": bundle_id, "quantity": quantity, "itemType": ItemType.BUNDLE.value},
            success_key="itemAdded",
            failure_key="addFailed",
        )

    def update_quantity(
        self, item_id: str, quantity: int, item_type: ItemType = ItemType.PRODUCT
    ) -> CartMutationResult:
        """Set a line's quantity. Anything below 1 removes the line instead."""
        if quantity < 1:
            return self.remove_item(item_id, item_type)
        return self._mutate(
            "PUT",
            f"/cart/items/{item_id}",
            json={"quantity": quantity, "itemType": item_type.value},
            success_key="quantityUpdated",
            failure_key="updateFailed",
        )

    def remove_item(self, item_id: str, item_type: ItemType = ItemType.PRODUCT) -> CartMutationResult:
        return self._mutate(
            "DELETE",
            f"/cart/items/{item_id}",
            params={"itemType": item_type.value},
            success_key="itemRemoved",
            failure_key="removeFailed",
        )

    def clear_cart(self) -> CartMutationResult:
        result = self._mutate(
            "DELETE",
            "/cart",
            success_key="cartCleared",
            failure_key="clearFailed",
            refresh=False,
        )
        if result:
            self.cart = None
        return result

    def _mutate(
        self,
        method: str,
        path: str,
        *,
        success_key: str,
        failure_key: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
        refresh: bool = True,
    ) -> CartMutationResult:
        try:
            response = self.backend.request(method, path, token=self.token, json=json, params=params)
            response.expect_ok()
        except BackendError as exc:
            logger.info("cart_mutation_rejected", method=method, path=path, status_code=exc.status_code)
            return CartMutationResult(
                ok=False,
                notice=Notice(level=NoticeLevel.ERROR.value, key=failure_key, detail=exc.message),
                cart=self.cart,
                status_code=exc.status_code,
            )
        except BackendUnavailable as exc:
            logger.error("cart_mutation_failed", method=method, path=path, error=str(exc))
            return CartMutationResult(
                ok=False,
                notice=Notice(level=NoticeLevel.ERROR.value, key=failure_key),
                cart=self.cart,
                status_code=500,
            )

        if refresh:
            self.fetch_cart()
        notice = Notice(level=NoticeLevel.SUCCESS.value, key=success_key)
        return CartMutationResult(ok=True, notice=notice, cart=self.cart)

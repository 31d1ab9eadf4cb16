"""FastAPI routes for the Ordering domain: cart, checkout, promo codes, locations, orders."""

from datetime import date
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse, Response
from protean.exceptions import ValidationError

from ordering.api.schemas import (
    AddCartItemRequest,
    ApplyDiscountRequest,
    DiscountCodeRequest,
    LocationRequest,
    PlaceOrderRequest,
    SelectAddressRequest,
    SelectLocationRequest,
    StartCheckoutRequest,
    UpdateCartItemRequest,
    UpdateOrderRequest,
    ValidateDiscountRequest,
)
from ordering.cart.cart import ItemType
from ordering.cart.context import CartContext, CartMutationResult
from ordering.checkout.outcome import payment_outcome
from ordering.checkout.placement import apply_promo_code, start_checkout, submit_order, sync_cart
from ordering.checkout.store import wizards
from ordering.discount.discount import (
    check_validity_window,
    discount_codes,
    discount_rows,
    discount_stats,
    normalize_code,
    validate_discount,
)
from ordering.location.location import (
    check_rates,
    cities,
    fetch_active_locations,
    find_location,
    locations_in_city,
)
from ordering.order.order import order_update_payload, report_filters
from shared.backend import get_backend
from shared.proxy import clean_params, optional_token, relay, relay_page, require_token
from shared.settings import get_settings


def _mutation_response(result: CartMutationResult) -> JSONResponse:
    body: dict[str, Any] = {
        "cart": result.cart.raw if result.cart else None,
        "notice": result.notice.to_payload(),
    }
    if not result:
        body["error"] = result.notice.detail or result.notice.key
    return JSONResponse(content=body, status_code=result.status_code)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/api/cart", tags=["cart"])


@cart_router.get("")
def get_cart(token: str | None = Depends(optional_token)) -> Response:
    return relay(get_backend().get("/cart", token=token))


@cart_router.delete("")
def clear_cart(token: str | None = Depends(optional_token)) -> JSONResponse:
    return _mutation_response(CartContext(token).clear_cart())


@cart_router.post("/items")
def add_cart_item(body: AddCartItemRequest, token: str | None = Depends(optional_token)) -> JSONResponse:
    carts = CartContext(token)
    if body.item_type == ItemType.BUNDLE.value:
        if not body.bundle_id:
            raise ValidationError({"bundleId": ["bundleId is required for bundle items"]})
        return _mutation_response(carts.add_bundle_to_cart(body.bundle_id, body.quantity))
    if not body.product_id:
        raise ValidationError({"productId": ["productId is required"]})
    return _mutation_response(carts.add_to_cart(body.product_id, body.quantity))


@cart_router.put("/items/{item_id}")
def update_cart_item(
    item_id: str, body: UpdateCartItemRequest, token: str | None = Depends(optional_token)
) -> JSONResponse:
    result = CartContext(token).update_quantity(item_id, body.quantity, ItemType(body.item_type))
    return _mutation_response(result)


@cart_router.delete("/items/{item_id}")
def remove_cart_item(
    item_id: str,
    item_type: ItemType = Query(default=ItemType.PRODUCT, alias="itemType"),
    token: str | None = Depends(optional_token),
) -> JSONResponse:
    return _mutation_response(CartContext(token).remove_item(item_id, item_type))


@cart_router.get("/validate")
def validate_cart(token: str | None = Depends(optional_token)) -> dict:
    verdict = CartContext(token).validate_cart()
    return {"valid": verdict.valid, "message": verdict.message, "invalidItems": verdict.invalid_items}


@cart_router.post("/checkout")
def checkout_cart(body: dict[str, Any] = Body(...), token: str | None = Depends(optional_token)) -> Response:
    return relay(get_backend().post("/cart/checkout", token=token, json=body))


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/api/payment", tags=["payment"])


@payment_router.post("/initiate")
def initiate_payment(body: dict[str, Any] = Body(...), token: str = Depends(require_token)) -> Response:
    """Open a card payment intention; the body carries ``checkoutUrl``."""
    return relay(get_backend().post("/cart/checkout", token=token, json=body))


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/api/checkout", tags=["checkout"])


def _wizard_state(token: str) -> dict:
    return wizards.get(token).to_dict(get_settings().currency)


@checkout_router.post("", status_code=201)
def begin_checkout(body: StartCheckoutRequest | None = None, token: str = Depends(require_token)) -> dict:
    """Start (or restart) checkout at step 1 with the default address pre-selected."""
    wizard = start_checkout(token, email=body.email if body else None)
    wizards.put(token, wizard)
    return wizard.to_dict(get_settings().currency)


@checkout_router.get("")
def get_checkout(token: str = Depends(require_token)) -> dict:
    return _wizard_state(token)


@checkout_router.put("/address")
def choose_address(body: SelectAddressRequest, token: str = Depends(require_token)) -> dict:
    wizards.get(token).select_address(body.address_id)
    return _wizard_state(token)


@checkout_router.put("/location")
def choose_location(body: SelectLocationRequest, token: str = Depends(require_token)) -> dict:
    wizards.get(token).select_location(body.location_id)
    return _wizard_state(token)


@checkout_router.post("/review")
def continue_to_review(token: str = Depends(require_token)) -> dict:
    wizard = wizards.get(token)
    wizard.continue_to_review()
    sync_cart(wizard, token)
    return _wizard_state(token)


@checkout_router.post("/back")
def back_to_selection(token: str = Depends(require_token)) -> dict:
    wizards.get(token).back_to_selection()
    return _wizard_state(token)


@checkout_router.post("/discount")
def apply_discount(body: ApplyDiscountRequest, token: str = Depends(require_token)) -> dict:
    apply_promo_code(wizards.get(token), body.code, token)
    return _wizard_state(token)


@checkout_router.delete("/discount")
def remove_discount(token: str = Depends(require_token)) -> dict:
    wizards.get(token).remove_discount()
    return _wizard_state(token)


@checkout_router.post("/place-order")
def place_checkout_order(body: PlaceOrderRequest, token: str = Depends(require_token)) -> dict:
    return submit_order(token, body.payment_type).to_payload()


@checkout_router.get("/result")
def checkout_result(
    order_id: str | None = Query(default=None, alias="orderId"),
    status: str | None = None,
    success: str | None = None,
    pending: str | None = None,
) -> dict:
    """Outcome shown on the success page after a cash order or gateway redirect."""
    outcome = payment_outcome(order_id=order_id, status=status, success=success, pending=pending)
    return {"status": outcome.value, "orderId": order_id}


# ---------------------------------------------------------------------------
# Discount Router
# ---------------------------------------------------------------------------
discount_router = APIRouter(prefix="/api/discounts", tags=["discounts"])


@discount_router.post("/validate")
def validate_discount_code(body: ValidateDiscountRequest, token: str | None = Depends(optional_token)) -> dict:
    applied = validate_discount(get_backend(), token, body.code, body.subtotal)
    return {"valid": True, **applied.to_payload(get_settings().currency)}


# ---------------------------------------------------------------------------
# Location Router
# ---------------------------------------------------------------------------
location_router = APIRouter(prefix="/api/locations", tags=["locations"])


@location_router.get("")
def list_locations() -> list[dict]:
    return [location.to_payload() for location in fetch_active_locations(get_backend())]


@location_router.get("/cities")
def list_cities() -> list[str]:
    return cities(fetch_active_locations(get_backend()))


@location_router.get("/cities/{city}")
def list_city_locations(city: str) -> list[dict]:
    return [location.to_payload() for location in locations_in_city(fetch_active_locations(get_backend()), city)]


@location_router.get("/{location_id}")
def get_location(location_id: str) -> Response:
    location = find_location(fetch_active_locations(get_backend()), location_id)
    if location is None:
        return JSONResponse(status_code=404, content={"error": "Location not found"})
    return JSONResponse(content=location.to_payload())


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/api/orders", tags=["orders"])


@order_router.get("")
def list_my_orders(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    token: str = Depends(require_token),
) -> Response:
    return relay_page(get_backend().get("/orders", token=token, params={"page": page, "limit": limit}))


@order_router.get("/{order_id}")
def get_my_order(order_id: str, token: str = Depends(require_token)) -> Response:
    return relay(get_backend().get(f"/orders/{order_id}", token=token))


# ---------------------------------------------------------------------------
# Admin Router (promo codes, locations, orders)
# ---------------------------------------------------------------------------
admin_ordering_router = APIRouter(prefix="/api/admin", tags=["admin"])


@admin_ordering_router.get("/discounts")
def admin_list_discounts(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=6, ge=1, le=100),
    active_only: bool = Query(default=False, alias="activeOnly"),
    token: str = Depends(require_token),
) -> Response:
    params = {"page": page, "limit": limit, "activeOnly": str(active_only).lower()}
    return relay(get_backend().get("/admin/discounts", token=token, params=params))


@admin_ordering_router.get("/discounts/summary")
def admin_discount_summary(token: str = Depends(require_token)) -> dict:
    """Stats cards plus a status badge per code, computed over the first 100 codes."""
    payload = (
        get_backend()
        .get("/admin/discounts", token=token, params={"page": 1, "limit": 100, "activeOnly": "false"})
        .expect_ok("Failed to fetch discounts")
    )
    codes = discount_codes(discount_rows(payload))
    return {
        "stats": discount_stats(codes),
        "statuses": {code.code: code.status().value for code in codes},
    }


@admin_ordering_router.post("/discounts")
def admin_create_discount(body: DiscountCodeRequest, token: str = Depends(require_token)) -> Response:
    check_validity_window(body.valid_from, body.valid_to)
    payload = body.model_dump(mode="json", by_alias=True, exclude_none=True)
    payload["code"] = normalize_code(body.code)
    return relay(get_backend().post("/admin/discounts", token=token, json=payload))


@admin_ordering_router.put("/discounts/{discount_id}")
def admin_update_discount(discount_id: str, body: DiscountCodeRequest, token: str = Depends(require_token)) -> Response:
    check_validity_window(body.valid_from, body.valid_to)
    payload = body.model_dump(mode="json", by_alias=True, exclude_none=True)
    payload["code"] = normalize_code(body.code)
    return relay(get_backend().put(f"/admin/discounts/{discount_id}", token=token, json=payload))


@admin_ordering_router.delete("/discounts/{discount_id}")
def admin_delete_discount(discount_id: str, token: str = Depends(require_token)) -> Response:
    return relay(get_backend().delete(f"/admin/discounts/{discount_id}", token=token))


@admin_ordering_router.get("/locations")
def admin_list_locations(
    active_only: bool = Query(default=False, alias="activeOnly"),
    token: str = Depends(require_token),
) -> Response:
    params = {"activeOnly": "true"} if active_only else None
    return relay(get_backend().get("/admin/locations", token=token, params=params))


@admin_ordering_router.post("/locations")
def admin_create_location(body: LocationRequest, token: str = Depends(require_token)) -> Response:
    check_rates(body.tax_rate, body.shipping_rate)
    return relay(get_backend().post("/admin/locations", token=token, json=body.model_dump(by_alias=True)))


@admin_ordering_router.put("/locations/{location_id}")
def admin_update_location(location_id: str, body: LocationRequest, token: str = Depends(require_token)) -> Response:
    check_rates(body.tax_rate, body.shipping_rate)
    return relay(
        get_backend().put(f"/admin/locations/{location_id}", token=token, json=body.model_dump(by_alias=True))
    )


@admin_ordering_router.delete("/locations/{location_id}")
def admin_delete_location(location_id: str, token: str = Depends(require_token)) -> Response:
    return relay(get_backend().delete(f"/admin/locations/{location_id}", token=token))


@admin_ordering_router.get("/orders")
def admin_list_orders(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str | None = None,
    status: str | None = None,
    period: str | None = None,
    on_date: date | None = Query(default=None, alias="date"),
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    token: str = Depends(require_token),
) -> Response:
    params = {
        **clean_params(page=page, limit=limit, search=search, status=status),
        **report_filters(period, on_date, start_date, end_date),
    }
    return relay_page(get_backend().get("/admin/orders", token=token, params=params))


@admin_ordering_router.get("/orders/analytics")
def admin_order_analytics(
    period: str | None = None,
    on_date: date | None = Query(default=None, alias="date"),
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    token: str = Depends(require_token),
) -> Response:
    params = report_filters(period, on_date, start_date, end_date)
    return relay(get_backend().get("/admin/orders/analytics/summary", token=token, params=params))


@admin_ordering_router.get("/orders/{order_id}")
def admin_get_order(order_id: str, token: str = Depends(require_token)) -> Response:
    return relay(get_backend().get(f"/admin/orders/{order_id}", token=token))


@admin_ordering_router.put("/orders/{order_id}")
def admin_update_order(order_id: str, body: UpdateOrderRequest, token: str = Depends(require_token)) -> Response:
    payload = order_update_payload(body.status, body.payment_status, body.metadata)
    return relay(get_backend().put(f"/admin/orders/{order_id}", token=token, json=payload))


@admin_ordering_router.delete("/orders/{order_id}")
def admin_delete_order(order_id: str, token: str = Depends(require_token)) -> Response:
    return relay(get_backend().delete(f"/admin/orders/{order_id}", token=token))


@admin_ordering_router.get("/stats")
def admin_stats(token: str = Depends(require_token)) -> Response:
    """Dashboard figures: revenue, order counts and the like."""
    return relay(get_backend().get("/admin/orders/analytics/summary", token=token))

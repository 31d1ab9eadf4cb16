"""Ordering domain API package."""

from ordering.api.routes import (
    admin_ordering_router,
    cart_router,
    checkout_router,
    discount_router,
    location_router,
    order_router,
    payment_router,
)

__all__ = [
    "cart_router",
    "payment_router",
    "checkout_router",
    "discount_router",
    "location_router",
    "order_router",
    "admin_ordering_router",
]

"""Ordering bounded context: Shopping Cart, Checkout, Promo Codes and Orders.

Carts and orders live in the backend; the storefront models them as
read-side aggregates rebuilt from each backend answer.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)

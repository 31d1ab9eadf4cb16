"""Storefront product grid: backend filters, client-side price range, paging.

The grid asks the backend for one large page (category, manufacturer,
product type, stock and text filters are applied there), then narrows it by
price and slices it into pages locally.
"""

import math
from dataclasses import dataclass
from typing import Any

import structlog
from protean.fields import Boolean, List, String

from catalogue.domain import catalogue
from shared.backend import Backend
from shared.money import parse_amount
from shared.pagination import PageMeta, compact_page_numbers, paginate
from shared.proxy import clean_params, multi_params

logger = structlog.get_logger(__name__)

PRODUCTS_PER_PAGE = 6
BROWSE_FETCH_LIMIT = 50
DEFAULT_PRICE_RANGE = (0, 5000)
MIN_SEARCH_LENGTH = 2


@catalogue.value_object
class ProductQuery:
    """Filters the backend applies to the product list."""

    search = String(max_length=255)
    category_id = String(max_length=50)
    manufacturer_ids = List(content_type=String, default=list)
    product_type_ids = List(content_type=String, default=list)
    in_stock = Boolean(default=False)

    def to_params(self, page: int = 1, limit: int = BROWSE_FETCH_LIMIT) -> list[tuple[str, Any]]:
        single = clean_params(
            page=page,
            limit=limit,
            search=self.search,
            categoryId=self.category_id,
            in_stock="true" if self.in_stock else None,
        )
        return multi_params(
            single,
            manufacturerId=self.manufacturer_ids or [],
            productTypeId=self.product_type_ids or [],
        )


@dataclass(frozen=True)
class ProductPage:
    products: list[dict]
    meta: PageMeta
    page_numbers: list[int | str]
    price_bounds: tuple[int, int]
    price_range: tuple[float, float]

    def to_dict(self) -> dict:
        return {
            "data": self.products,
            "meta": self.meta.to_dict(),
            "pageNumbers": self.page_numbers,
            "priceBounds": list(self.price_bounds),
            "priceRange": list(self.price_range),
        }


def product_rows(payload: Any) -> list[dict]:
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]
    if isinstance(payload, list):
        return payload
    return []


def price_of(product: dict) -> float:
    return parse_amount(product.get("price"))


def price_bounds(products: list[dict]) -> tuple[int, int]:
    """Whole-number bounds around every price; ``(0, 0)`` when there are none."""
    if not products:
        return (0, 0)
    prices = [price_of(product) for product in products]
    return (math.floor(min(prices)), math.ceil(max(prices)))


def fit_price_range(current: tuple[float, float], bounds: tuple[int, int]) -> tuple[float, float]:
    """Slider range after a reload: the untouched default snaps to the bounds,
    a user-chosen range only ever widens to cover them."""
    if tuple(current) == DEFAULT_PRICE_RANGE:
        return (bounds[0], bounds[1])
    return (min(current[0], bounds[0]), max(current[1], bounds[1]))


def filter_by_price(products: list[dict], price_range: tuple[float, float]) -> list[dict]:
    low, high = price_range
    return [product for product in products if low <= price_of(product) <= high]


def fetch_products(backend: Backend, query: ProductQuery, page: int = 1, limit: int = BROWSE_FETCH_LIMIT) -> list[dict]:
    payload = backend.get("/products", params=query.to_params(page, limit)).expect_ok("Failed to fetch products")
    return product_rows(payload)


def browse_products(
    backend: Backend,
    query: ProductQuery,
    page: int = 1,
    price_range: tuple[float, float] | None = None,
) -> ProductPage:
    """One page of the storefront grid.

    Without an explicit ``price_range`` every fetched product passes the
    price filter.
    """
    products = fetch_products(backend, query)
    bounds = price_bounds(products)

    selected = price_range if price_range is not None else bounds
    if products:
        fitted = fit_price_range(selected, bounds)
    else:
        fitted = selected if price_range is not None else DEFAULT_PRICE_RANGE

    matching = filter_by_price(products, selected) if products else []
    items, meta = paginate(matching, page, PRODUCTS_PER_PAGE)
    logger.debug("products_browsed", fetched=len(products), matching=len(matching), page=page)
    return ProductPage(
        products=items,
        meta=meta,
        page_numbers=compact_page_numbers(meta.current_page, meta.total_pages),
        price_bounds=bounds,
        price_range=fitted,
    )


def search_products(backend: Backend, query: str, limit: int = BROWSE_FETCH_LIMIT) -> list[dict]:
    """Text search. Queries shorter than two characters return nothing without a backend call."""
    query = (query or "").strip()
    if len(query) < MIN_SEARCH_LENGTH:
        return []
    return fetch_products(backend, ProductQuery(search=query), page=1, limit=limit)

"""Header search bar: products from the backend plus name matches in the taxonomy."""

from typing import Any

import structlog

from catalogue.product.browsing import MIN_SEARCH_LENGTH, search_products
from shared.backend import Backend

logger = structlog.get_logger(__name__)

MAX_PRODUCT_SUGGESTIONS = 5
MAX_TAXONOMY_SUGGESTIONS = 3
TAXONOMY_FETCH_LIMIT = 100

_TAXONOMY_SOURCES = {
    "categories": "/categories",
    "manufacturers": "/manufacturers",
    "productTypes": "/product-types",
}


def _rows(payload: Any) -> list[dict]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]
    return []


def name_matches(rows: list[dict], query: str, limit: int = MAX_TAXONOMY_SUGGESTIONS) -> list[dict]:
    needle = query.casefold()
    return [row for row in rows if needle in str(row.get("name", "")).casefold()][:limit]


def global_search(backend: Backend, query: str) -> dict:
    """Suggestions grouped by kind. The query is echoed so clients can drop stale answers."""
    query = (query or "").strip()
    results: dict[str, Any] = {"query": query, "products": []}
    results.update({kind: [] for kind in _TAXONOMY_SOURCES})
    if len(query) < MIN_SEARCH_LENGTH:
        return results

    results["products"] = search_products(backend, query, limit=MAX_PRODUCT_SUGGESTIONS)
    for kind, path in _TAXONOMY_SOURCES.items():
        response = backend.get(path, params={"page": 1, "limit": TAXONOMY_FETCH_LIMIT})
        if not response.ok:
            logger.warning("search_source_failed", source=kind, status_code=response.status_code)
            continue
        results[kind] = name_matches(_rows(response.payload), query)
    return results

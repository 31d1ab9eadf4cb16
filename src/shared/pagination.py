"""Page slicing and page-number windows for list screens.

Two window styles are used:

- compact: ``[1, "...", 4, 5, 6, "...", 12]``, used by the storefront
  product grid. First and last page are always present once the page count
  exceeds the window.
- sliding: ``[3, 4, 5, 6, 7]``, used by the admin tables. A fixed-size run
  of consecutive pages centred on the current page where possible.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

ELLIPSIS = "..."


@dataclass(frozen=True)
class PageMeta:
    total_items: int
    items_per_page: int
    total_pages: int
    current_page: int

    def to_dict(self) -> dict:
        return {
            "totalItems": self.total_items,
            "itemsPerPage": self.items_per_page,
            "totalPages": self.total_pages,
            "currentPage": self.current_page,
        }


def total_pages(total_items: int, per_page: int) -> int:
    if per_page < 1:
        raise ValueError("per_page must be at least 1")
    return math.ceil(max(total_items, 0) / per_page)


def paginate(items: Sequence[Any], page: int, per_page: int) -> tuple[list[Any], PageMeta]:
    """Slice ``items`` for a 1-based ``page``.

    Pages past the end yield an empty slice; ``page`` below 1 is read as 1.
    """
    page = max(page, 1)
    start = (page - 1) * per_page
    meta = PageMeta(
        total_items=len(items),
        items_per_page=per_page,
        total_pages=total_pages(len(items), per_page),
        current_page=page,
    )
    return list(items[start : start + per_page]), meta


def compact_page_numbers(current_page: int, total: int, max_pages_to_show: int = 5) -> list[int | str]:
    if total <= max_pages_to_show:
        return list(range(1, total + 1))

    pages: list[int | str] = [1]
    if current_page > 3:
        pages.append(ELLIPSIS)

    start = max(2, current_page - 1)
    end = min(total - 1, current_page + 1)
    pages.extend(range(start, end + 1))

    if current_page < total - 2:
        pages.append(ELLIPSIS)

    pages.append(total)
    return pages


def sliding_page_numbers(current_page: int, total: int, max_visible_pages: int = 5) -> list[int]:
    start = max(1, current_page - max_visible_pages // 2)
    end = min(total, start + max_visible_pages - 1)
    if end - start + 1 < max_visible_pages:
        start = max(1, end - max_visible_pages + 1)
    return list(range(start, end + 1))


def with_page_window(payload: Any) -> Any:
    """Add ``pageNumbers`` to a ``{data, meta}`` list body for the admin tables."""
    if not isinstance(payload, dict) or not isinstance(payload.get("meta"), dict):
        return payload
    meta = payload["meta"]
    current = int(meta.get("currentPage") or 1)
    total = int(meta.get("totalPages") or 0)
    return {**payload, "pageNumbers": sliding_page_numbers(current, total)}

"""Paging of the storefront product listing."""

from typing import Any, Tuple


DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def normalize_paging(page: Any, page_size: Any, max_page_size: int = MAX_PAGE_SIZE) -> Tuple[int, int]:
    """Coerce query-string paging into a 1-based page and a bounded page size."""
    return _positive_int(page, 1), min(_positive_int(page_size, DEFAULT_PAGE_SIZE), max_page_size)


def page_offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size

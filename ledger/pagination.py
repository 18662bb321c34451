"""Page / page-size clamping for listing endpoints."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

__all__ = ["DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE", "Pagination", "normalize_pagination"]

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True, slots=True)
class Pagination:
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def normalize_pagination(page: Optional[int] = None, page_size: Optional[int] = None) -> Pagination:
    """Default missing/non-positive values and cap the page size.

    There is no upper bound on *page*; a page past the end simply yields no rows.
    """
    if page is None or page <= 0:
        page = 1
    if page_size is None or page_size <= 0:
        page_size = DEFAULT_PAGE_SIZE
    if page_size > MAX_PAGE_SIZE:
        page_size = MAX_PAGE_SIZE
    return Pagination(page=page, page_size=page_size)

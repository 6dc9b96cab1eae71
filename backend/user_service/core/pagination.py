"""Pagination - pure page-window arithmetic for list queries.

Invariants:
    - Pages are 1-indexed; page_size >= 1
    - total_pages is ceil(total_items / page_size); 0 when nothing matches
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PageWindow:
    """Offset/limit pair for a 1-indexed page."""
    page: int
    page_size: int

    def __post_init__(self):
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if self.page_size < 1:
            raise ValueError("page_size must be >= 1")

    @property
    def offset(self) -> int:
        return page_offset(self.page, self.page_size)

    @property
    def limit(self) -> int:
        return self.page_size


def page_offset(page: int, page_size: int) -> int:
    """Number of rows skipped before the given page."""
    return (page - 1) * page_size


def total_pages(total_items: int, page_size: int) -> int:
    """Ceiling division; an empty result has zero pages."""
    return (total_items + page_size - 1) // page_size

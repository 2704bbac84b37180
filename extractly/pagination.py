"""Page arithmetic shared by the list views.

Everything here is zero-based. Views that number pages from 1 go
through `to_zero_based` / `from_zero_based` so the slicing itself lives
in one place. Nothing in this module clamps or raises: an out-of-range
page simply yields an empty slice.
"""

from typing import Sequence, TypeVar

T = TypeVar("T")


def page_count(total_items: int, page_size: int) -> int:
    """Number of pages needed for total_items; 0 when there are none."""
    if total_items <= 0 or page_size < 1:
        return 0
    return -(-total_items // page_size)


def page_slice(items: Sequence[T], page: int, page_size: int) -> list[T]:
    """Return the items on a zero-based page."""
    if page < 0 or page_size < 1:
        return []
    start = page * page_size
    return list(items[start:start + page_size])


def to_zero_based(page: int, base: int) -> int:
    """Convert a page number expressed in `base` to zero-based."""
    return page - base


def from_zero_based(page: int, base: int) -> int:
    """Convert a zero-based page number to `base`."""
    return page + base


def is_valid_page(page: int, total_items: int, page_size: int, base: int = 0) -> bool:
    """True if page (numbered from base) is within [base, base + page_count)."""
    index = to_zero_based(page, base)
    return 0 <= index < page_count(total_items, page_size)


def slice_for_base(items: Sequence[T], page: int, page_size: int, base: int) -> list[T]:
    """Slice items for a page numbered from base (0 or 1)."""
    return page_slice(items, to_zero_based(page, base), page_size)

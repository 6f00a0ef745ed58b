"""
Pagination helpers for the country browser.

Produces the "smart" list of page labels shown under the country grid, e.g.
[1, DOTS, 4, 5, 6, DOTS, 10], where DOTS marks a run of hidden pages.
"""

import math
from functools import lru_cache


class _Dots:
    """Ellipsis marker in a pagination range. Never equal to a page number."""

    __slots__ = ()

    def __repr__(self):
        return "DOTS"

    def __str__(self):
        return "…"
# End of class _Dots


DOTS = _Dots()


def total_page_count(total_count, page_size):
    """
    Number of pages needed to show total_count items, page_size at a time.

    Args:
        total_count (int): Number of items, >= 0.
        page_size (int): Items per page, >= 1.

    Returns:
        int: ceil(total_count / page_size).

    Raises:
        ValueError: if page_size < 1 or total_count < 0.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    if total_count < 0:
        raise ValueError(f"total_count must be >= 0, got {total_count}")
    return math.ceil(total_count / page_size)
# End of function total_page_count()


def clamp_page(page, total_pages):
    """Clamp page into [1, total_pages]; an empty result set still has page 1."""
    if total_pages < 1:
        return 1
    return max(1, min(page, total_pages))
# End of function clamp_page()


def compute_pagination_range(total_count, page_size, current_page, sibling_count=1):
    """
    Build the sequence of page labels for a pagination control.

    The first and last pages are always shown once truncation kicks in, the
    current page is always shown together with sibling_count neighbours on
    each side, and hidden runs collapse into a single DOTS marker.

    current_page is clamped to [1, total_pages] before the range is built.

    Args:
        total_count (int): Number of items being paginated.
        page_size (int): Items per page.
        current_page (int): 1-based current page.
        sibling_count (int): Pages shown on each side of the current page.

    Returns:
        list: Page numbers (int) and DOTS markers, in display order.

    Raises:
        ValueError: if page_size < 1, or total_count or sibling_count < 0.

    Example:
        >>> compute_pagination_range(100, 10, 5)
        [1, DOTS, 4, 5, 6, DOTS, 10]
    """
    if sibling_count < 0:
        raise ValueError(f"sibling_count must be >= 0, got {sibling_count}")

    total_pages = total_page_count(total_count, page_size)
    current_page = clamp_page(current_page, total_pages)

    return list(_page_range(total_pages, current_page, sibling_count))
# End of function compute_pagination_range()


@lru_cache(maxsize=256)
def _page_range(total_pages, current_page, sibling_count):
    # first + last + current + 2 siblings-worth each side + 2 markers
    window_size = sibling_count * 2 + 5

    if window_size >= total_pages:
        return tuple(range(1, total_pages + 1))

    left_sibling = max(current_page - sibling_count, 1)
    right_sibling = min(current_page + sibling_count, total_pages)

    # A single hidden page is shown as itself rather than as DOTS
    show_left_dots = left_sibling > 2
    show_right_dots = right_sibling < total_pages - 2

    edge_item_count = 3 + 2 * sibling_count

    if not show_left_dots and show_right_dots:
        left_range = tuple(range(1, edge_item_count + 1))
        return left_range + (DOTS, total_pages)

    if show_left_dots and not show_right_dots:
        right_range = tuple(range(total_pages - edge_item_count + 1, total_pages + 1))
        return (1, DOTS) + right_range

    if show_left_dots and show_right_dots:
        middle_range = tuple(range(left_sibling, right_sibling + 1))
        return (1, DOTS) + middle_range + (DOTS, total_pages)

    return ()
# End of function _page_range()

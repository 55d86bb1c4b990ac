"""
Cursor Pagination

Shared page walker for providers that paginate by cursor (Plaid
/transactions/sync, Teller from_id, Stripe starting_after).

The walk stops on the first of:
    - the provider reports no more data
    - a page comes back empty
    - no next cursor is available
    - the next cursor equals the current one (no progress)

Pages are fetched one after another and concatenated in fetch order.
"""

from typing import Awaitable, Callable, List, Optional, Tuple, TypeVar

from core.logging import get_logger


T = TypeVar("T")

# (items, next_cursor, has_more)
Page = Tuple[List[T], Optional[str], bool]

logger = get_logger(__name__)

# Hard stop for providers that keep handing out fresh cursors forever
MAX_PAGES = 1000


async def walk_cursor_pages(
    fetch_page: Callable[[Optional[str]], Awaitable[Page]],
    cursor: Optional[str] = None,
    max_pages: int = MAX_PAGES
) -> List[T]:
    """
    Fetch every page starting at `cursor` and return all items.

    Args:
        fetch_page: Coroutine taking the cursor and returning (items, next_cursor, has_more)
        cursor: Starting cursor (None = first page)
        max_pages: Upper bound on the number of pages fetched

    Example:
        >>> async def fetch(cursor):
        ...     return ([1, 2], "c1", False) if cursor is None else ([], None, False)
        >>> await walk_cursor_pages(fetch)
        [1, 2]
    """
    items: List[T] = []
    pages = 0

    while pages < max_pages:
        page_items, next_cursor, has_more = await fetch_page(cursor)
        pages += 1
        items.extend(page_items)

        if not has_more or not page_items or next_cursor is None:
            break
        if next_cursor == cursor:
            logger.warning(f"Pagination cursor did not advance after {pages} pages, stopping")
            break
        cursor = next_cursor
    else:
        logger.warning(f"Pagination stopped at the {max_pages}-page limit")

    return items

